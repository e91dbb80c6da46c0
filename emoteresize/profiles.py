"""
Per-platform size tables.

The table is fixed configuration; profiles are frozen and shared, so
``resolve`` always hands back the same instance for a given id.
"""

from __future__ import annotations

from emoteresize.exceptions import UnknownPlatformError
from emoteresize.types import PlatformProfile, SizeSpec

DEFAULT_PLATFORM = "twitch"


def _specs(sizes: tuple[int, ...], ceiling: int) -> tuple[SizeSpec, ...]:
    return tuple(SizeSpec(target_size=s, max_allowed_size=ceiling) for s in sizes)


PLATFORM_PROFILES: dict[str, PlatformProfile] = {
    "twitch": PlatformProfile(
        platform_id="twitch",
        emotes=_specs((28, 56, 112), 100),
        badges=_specs((18, 36, 72), 25),
    ),
    "discord": PlatformProfile(
        platform_id="discord",
        emotes=_specs((128,), 256),
        badges=_specs((64,), 256),
    ),
    "youtube": PlatformProfile(
        platform_id="youtube",
        emotes=_specs((32,), 1000),
        badges=_specs((32,), 1000),
    ),
}


def known_platforms() -> list[str]:
    """Return the recognised platform ids in table order."""
    return list(PLATFORM_PROFILES)


def resolve(platform_id: str) -> PlatformProfile:
    """Look up the size profile for *platform_id*.

    Raises UnknownPlatformError for anything outside the known set.
    """
    try:
        return PLATFORM_PROFILES[platform_id]
    except (KeyError, TypeError):
        raise UnknownPlatformError(
            f"Unknown platform {platform_id!r}; expected one of "
            f"{', '.join(known_platforms())}"
        ) from None
