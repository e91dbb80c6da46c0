"""Main CLI entry point for emoteresize."""

from __future__ import annotations

import argparse
import logging
import sys

from .. import __version__
from .platforms_cli import build_platforms_parser
from .resize_cli import build_resize_parser


def _configure_logging(verbose: bool, quiet: bool) -> None:
    if verbose:
        level = logging.DEBUG
    elif quiet:
        level = logging.WARNING
    else:
        level = logging.INFO
    logging.basicConfig(
        level=level,
        format="%(levelname)s %(name)s: %(message)s",
        stream=sys.stderr,
    )


def main(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(
        prog="emoteresize",
        description="Resize emotes and badges for Twitch, Discord and YouTube",
    )
    parser.add_argument("--version", action="version", version=f"emoteresize {__version__}")
    verbosity = parser.add_mutually_exclusive_group()
    verbosity.add_argument("-v", "--verbose", action="store_true", help="Debug logging")
    verbosity.add_argument("-q", "--quiet", action="store_true", help="Warnings and errors only")
    subparsers = parser.add_subparsers(dest="command")
    build_resize_parser(subparsers)
    build_platforms_parser(subparsers)
    args = parser.parse_args(argv)
    if args.command is None:
        parser.print_help()
        return 0
    _configure_logging(args.verbose, args.quiet)
    return args.func(args)


def cli_entry() -> None:
    sys.exit(main())
