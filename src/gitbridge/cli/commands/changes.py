"""
gitbridge changes command.

SUMMARY: List the files changed by a commit
"""

from __future__ import annotations

import argparse

from gitbridge.cli import OutputFormatter, add_standard_flags, open_commands

SUMMARY = "List the files changed by a commit"

_STATUS_LETTERS = {"added": "A", "deleted": "D", "modified": "M"}


def register_args(parser: argparse.ArgumentParser) -> None:
    parser.add_argument("commit", nargs="?", default="HEAD", help="Commit id (default: HEAD)")
    add_standard_flags(parser)


def main(args: argparse.Namespace) -> int:
    formatter = OutputFormatter(json_mode=getattr(args, "json", False))

    try:
        commands = open_commands(args)
        changes = commands.changes_for_commit(args.commit)

        if formatter.json_mode:
            formatter.json_output({"commit": args.commit, "changes": [c.to_dict() for c in changes]})
        else:
            for change in changes:
                letter = _STATUS_LETTERS.get(change.status.value, "?")
                if change.before and change.after and change.before.path != change.after.path:
                    formatter.text(f"{letter} {change.before.path} -> {change.after.path}")
                else:
                    ref = change.after or change.before
                    formatter.text(f"{letter} {ref.path if ref else ''}")
        return 0

    except Exception as e:
        formatter.error(e, error_code="changes_error")
        return 1
