"""
CLI command for resizing images into platform emote and badge sizes.

Usage:
    emoteresize resize cat.png --platform twitch -o out/
    emoteresize resize dance.gif wave.gif --platform discord --zip
"""

from __future__ import annotations

import argparse
import dataclasses
import sys
from pathlib import Path

from ..config import config_from_env
from ..exceptions import EmoteResizeError
from ..export import DEFAULT_ARCHIVE_NAME, write_archive, write_files
from ..pipeline import run_batch
from ..profiles import DEFAULT_PLATFORM, known_platforms
from ..types import ResultGroup, Role, SourceImage

_ROLE_TITLES = {
    Role.EMOTE: "Emotes",
    Role.BADGE: "Badges",
}


def format_summary(groups: list[ResultGroup]) -> str:
    """One block per role listing name, pixel size and file size."""
    lines = []
    for group in groups:
        lines.append(_ROLE_TITLES[group.role])
        if not group.files:
            lines.append("  (none)")
            continue
        name_w = max(len(f.name) for f in group.files)
        for f in group.files:
            lines.append(f"  {f.name:<{name_w}}   {f.size_label:>10}   {f.size_kb:>10}")
    return "\n".join(lines) + "\n"


def cmd_resize(args: argparse.Namespace) -> int:
    """Main handler for ``emoteresize resize``."""
    paths = [Path(f) for f in args.files]
    for path in paths:
        if not path.is_file():
            print(f"Error: file not found: {path}", file=sys.stderr)
            return 1

    try:
        config = config_from_env()
    except ValueError as exc:
        print(f"Error: {exc}", file=sys.stderr)
        return 1
    if args.workers is not None:
        config.max_workers = args.workers
    if args.gif_quality is not None:
        config.gif = dataclasses.replace(config.gif, quality=args.gif_quality)
    config.show_progress = not args.no_progress

    sources = [SourceImage.from_path(p) for p in paths]
    try:
        groups = run_batch(sources, args.platform, config)
    except EmoteResizeError as exc:
        print(f"Error: {exc}", file=sys.stderr)
        return 1

    out_dir = Path(args.output_dir)
    write_files(groups, out_dir)
    print(format_summary(groups), end="")

    if args.zip:
        archive = write_archive(groups, out_dir / args.zip)
        print(f"Archive: {archive}")
    return 0


def build_resize_parser(subparsers: argparse._SubParsersAction) -> None:
    """Register the ``resize`` subcommand and its arguments."""
    p = subparsers.add_parser(
        "resize",
        help="Resize images into emote and badge sizes",
        description="Resize static images and animated GIFs to a platform's emote and badge sizes.",
    )
    p.add_argument(
        "files", nargs="+",
        help="Images to resize (PNG, JPEG, WebP, BMP, TIFF or animated GIF)",
    )
    p.add_argument(
        "--platform", choices=known_platforms(), default=DEFAULT_PLATFORM,
        help=f"Destination platform (default: {DEFAULT_PLATFORM})",
    )
    p.add_argument(
        "-o", "--output-dir", default=".",
        help="Directory for the resized files (default: current directory)",
    )
    p.add_argument(
        "--zip", nargs="?", const=DEFAULT_ARCHIVE_NAME, default=None, metavar="NAME",
        help=f"Also write a zip of all files (default name: {DEFAULT_ARCHIVE_NAME})",
    )
    p.add_argument(
        "--workers", type=int, default=None,
        help="Parallel workers; 0 = auto (default: auto)",
    )
    p.add_argument(
        "--gif-quality", type=int, default=None,
        help="GIF palette sample interval, 1 = best (default: 10)",
    )
    p.add_argument(
        "--no-progress", action="store_true",
        help="Hide the progress bar",
    )
    p.set_defaults(func=cmd_resize)
