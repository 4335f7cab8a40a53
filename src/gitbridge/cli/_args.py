"""Common CLI argument registration helpers."""
from __future__ import annotations

import argparse


def add_json_flag(parser: argparse.ArgumentParser) -> None:
    parser.add_argument(
        "--json",
        action="store_true",
        help="Output as JSON",
    )


def add_repo_root_flag(parser: argparse.ArgumentParser) -> None:
    parser.add_argument(
        "--repo-root",
        type=str,
        help="Repository root (default: detected from the current directory)",
    )


def add_verbose_flag(parser: argparse.ArgumentParser) -> None:
    """Add -v/--verbose; repeat for DEBUG."""
    parser.add_argument(
        "-v",
        "--verbose",
        action="count",
        default=0,
        help="Log git invocations to stderr (-vv for debug output)",
    )


def add_standard_flags(parser: argparse.ArgumentParser) -> None:
    add_json_flag(parser)
    add_repo_root_flag(parser)
    add_verbose_flag(parser)


__all__ = [
    "add_json_flag",
    "add_repo_root_flag",
    "add_verbose_flag",
    "add_standard_flags",
]
