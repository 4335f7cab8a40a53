"""
gitbridge annotate command.

SUMMARY: Show per-line revision and author of a file
"""

from __future__ import annotations

import argparse

from gitbridge.cli import OutputFormatter, add_standard_flags, open_commands, resolve_path

SUMMARY = "Show per-line revision and author of a file"


def register_args(parser: argparse.ArgumentParser) -> None:
    parser.add_argument("path", help="File to annotate")
    add_standard_flags(parser)


def main(args: argparse.Namespace) -> int:
    formatter = OutputFormatter(json_mode=getattr(args, "json", False))

    try:
        commands = open_commands(args)
        annotation = commands.annotate(resolve_path(args.path))

        if formatter.json_mode:
            formatter.json_output(
                {
                    "path": args.path,
                    "revisions": annotation.revisions(),
                    "lines": [
                        {
                            "line": line.line_number,
                            "revision": line.revision,
                            "author": line.author,
                            "date": line.date.isoformat(),
                            "content": line.content,
                        }
                        for line in annotation.lines
                    ],
                }
            )
        else:
            width = len(str(len(annotation))) if len(annotation) else 1
            for line in annotation.lines:
                formatter.text(
                    f"{line.revision[:8]} {line.author:<20.20} {line.date:%Y-%m-%d} "
                    f"{line.line_number:>{width}}) {line.content}"
                )
        return 0

    except Exception as e:
        formatter.error(e, error_code="annotate_error")
        return 1
