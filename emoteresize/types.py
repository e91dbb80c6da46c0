"""
Core data structures used throughout the resize pipeline.
"""

from __future__ import annotations

import enum
import mimetypes
from dataclasses import dataclass
from pathlib import Path
from typing import Union

ANIMATED_MIME_TYPE = "image/gif"


class Role(enum.Enum):
    """What a resized image is used for on the destination platform."""
    EMOTE = "emote"
    BADGE = "badge"


class DisposalMethod(enum.IntEnum):
    """GIF89a frame disposal methods."""
    UNSPECIFIED = 0
    NONE = 1                  # Leave the frame in place.
    RESTORE_BACKGROUND = 2    # Clear the frame's area to the background.
    RESTORE_PREVIOUS = 3      # Restore what was there before the frame.


@dataclass(frozen=True)
class SourceImage:
    """A user-supplied image as raw bytes plus its declared MIME type."""
    data: bytes
    mime_type: str
    name: str

    @classmethod
    def from_path(cls, path: str | Path, mime_type: str | None = None) -> SourceImage:
        """Read *path* from disk, guessing the MIME type from its name."""
        path = Path(path)
        if mime_type is None:
            mime_type, _ = mimetypes.guess_type(path.name)
        return cls(
            data=path.read_bytes(),
            mime_type=mime_type or "application/octet-stream",
            name=path.name,
        )

    @property
    def base_name(self) -> str:
        """File name up to the first dot (``cat.v2.png`` -> ``cat``)."""
        return self.name.split(".")[0]

    @property
    def is_animated(self) -> bool:
        return self.mime_type.lower() == ANIMATED_MIME_TYPE


@dataclass(frozen=True)
class SizeSpec:
    """A target pixel size and the platform's upload ceiling.

    ``max_allowed_size`` is informational only; the resizer never
    enforces it.
    """
    target_size: int
    max_allowed_size: int

    def __post_init__(self) -> None:
        if self.target_size <= 0 or self.max_allowed_size <= 0:
            raise ValueError(
                f"SizeSpec values must be positive, got "
                f"{self.target_size}/{self.max_allowed_size}"
            )


@dataclass(frozen=True)
class PlatformProfile:
    """All size specs for one destination platform, grouped by role."""
    platform_id: str
    emotes: tuple[SizeSpec, ...]
    badges: tuple[SizeSpec, ...]

    def specs_for(self, role: Role) -> tuple[SizeSpec, ...]:
        return self.emotes if role is Role.EMOTE else self.badges


@dataclass(frozen=True)
class Frame:
    """One fully decoded RGBA frame of an animation."""
    pixels: bytes             # RGBA, row-major, width * height * 4 bytes
    width: int
    height: int
    x_offset: int = 0
    y_offset: int = 0
    delay_cs: int = 0         # Display time in 1/100 s
    disposal: DisposalMethod = DisposalMethod.UNSPECIFIED

    def __post_init__(self) -> None:
        if self.delay_cs < 0:
            raise ValueError(f"delay_cs must be >= 0, got {self.delay_cs}")

    @property
    def size(self) -> tuple[int, int]:
        return (self.width, self.height)


@dataclass(frozen=True)
class ProcessedFile:
    """A resized static image or re-encoded animation."""
    name: str
    mime_type: str
    data: bytes
    width: int
    height: int

    @property
    def size_bytes(self) -> int:
        return len(self.data)

    @property
    def size_label(self) -> str:
        return f"{self.width}x{self.height}px"

    @property
    def size_kb(self) -> str:
        return f"{self.size_bytes / 1024:.2f} KB"


@dataclass(frozen=True)
class ResultGroup:
    """Accumulated output files for one role across a whole batch."""
    role: Role
    files: tuple[ProcessedFile, ...]


# ---------------------------------------------------------------------------
# Static / animated tagged union
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class StaticImage:
    source: SourceImage


@dataclass(frozen=True)
class AnimatedImage:
    source: SourceImage


ClassifiedImage = Union[StaticImage, AnimatedImage]


def classify(source: SourceImage) -> ClassifiedImage:
    """Pick the processing path for *source* from its declared MIME type."""
    if source.is_animated:
        return AnimatedImage(source)
    return StaticImage(source)
