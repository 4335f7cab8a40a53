"""
gitbridge branches command.

SUMMARY: List local or remote branches
"""

from __future__ import annotations

import argparse

from gitbridge.cli import OutputFormatter, add_standard_flags, open_commands

SUMMARY = "List local or remote branches"


def register_args(parser: argparse.ArgumentParser) -> None:
    parser.add_argument(
        "-r",
        "--remote",
        action="store_true",
        help="List remote-tracking branches only",
    )
    parser.add_argument(
        "--urls",
        action="store_true",
        help="Resolve the repository URL of each remote branch",
    )
    add_standard_flags(parser)


def main(args: argparse.Namespace) -> int:
    formatter = OutputFormatter(json_mode=getattr(args, "json", False))

    try:
        commands = open_commands(args)
        branches = commands.branch_list(remote_only=args.remote)
        urls = {}
        if args.urls:
            for branch in branches:
                if branch.remote and branch.remote_alias not in urls:
                    urls[branch.remote_alias] = commands.remote_url(branch)

        if formatter.json_mode:
            formatter.json_output(
                {
                    "current": next((b.name for b in branches if b.active), None),
                    "branches": [
                        {
                            "name": b.name,
                            "active": b.active,
                            "remote": b.remote,
                            "url": urls.get(b.remote_alias) if b.remote else None,
                        }
                        for b in branches
                    ],
                }
            )
        else:
            for b in branches:
                marker = "*" if b.active else " "
                suffix = f"  ({urls[b.remote_alias]})" if b.remote and urls.get(b.remote_alias) else ""
                formatter.text(f"{marker} {b.name}{suffix}")
        return 0

    except Exception as e:
        formatter.error(e, error_code="branches_error")
        return 1
