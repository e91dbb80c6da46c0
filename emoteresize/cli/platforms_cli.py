"""
CLI command listing the per-platform size table.

Usage:
    emoteresize platforms
    emoteresize platforms --platform discord
"""

from __future__ import annotations

import argparse

from ..profiles import known_platforms, resolve
from ..types import PlatformProfile, Role


def format_platform_table(profiles: list[PlatformProfile]) -> str:
    lines = []
    header = f"  {'Platform':<10}{'Role':<8}{'Target sizes (px)':<20}Upload ceiling (px)"
    lines.append(header)
    lines.append("  " + "-" * (len(header) - 2))
    for profile in profiles:
        for role in Role:
            specs = profile.specs_for(role)
            if not specs:
                continue
            sizes = ", ".join(str(s.target_size) for s in specs)
            ceiling = ", ".join(sorted({str(s.max_allowed_size) for s in specs}))
            lines.append(
                f"  {profile.platform_id:<10}{role.value:<8}{sizes:<20}{ceiling}")
    return "\n".join(lines) + "\n"


def cmd_platforms(args: argparse.Namespace) -> int:
    ids = [args.platform] if args.platform else known_platforms()
    print(format_platform_table([resolve(p) for p in ids]), end="")
    return 0


def build_platforms_parser(subparsers: argparse._SubParsersAction) -> None:
    """Register the ``platforms`` subcommand."""
    p = subparsers.add_parser(
        "platforms",
        help="Show target sizes per platform",
        description="List the emote and badge sizes produced for each platform.",
    )
    p.add_argument(
        "--platform", choices=known_platforms(), default=None,
        help="Only show one platform",
    )
    p.set_defaults(func=cmd_platforms)
