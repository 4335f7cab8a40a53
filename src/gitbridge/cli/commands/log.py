"""
gitbridge log command.

SUMMARY: Show the revision history of a file
"""

from __future__ import annotations

import argparse

from gitbridge.cli import OutputFormatter, add_standard_flags, open_commands, resolve_path

SUMMARY = "Show the revision history of a file"


def register_args(parser: argparse.ArgumentParser) -> None:
    parser.add_argument("path", help="File to show history for")
    add_standard_flags(parser)


def main(args: argparse.Namespace) -> int:
    formatter = OutputFormatter(json_mode=getattr(args, "json", False))

    try:
        commands = open_commands(args)
        revisions = commands.log(resolve_path(args.path))

        if formatter.json_mode:
            formatter.json_output({"path": args.path, "revisions": [r.to_dict() for r in revisions]})
        else:
            for rev in revisions:
                formatter.text(f"{rev.id[:10]}  {rev.timestamp:%Y-%m-%d %H:%M}  {rev.author}  {rev.message}")
        return 0

    except Exception as e:
        formatter.error(e, error_code="log_error")
        return 1
