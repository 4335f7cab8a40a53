"""
gitbridge status command.

SUMMARY: Show staged, modified and untracked files
"""

from __future__ import annotations

import argparse

from gitbridge.cli import OutputFormatter, add_standard_flags, open_commands

SUMMARY = "Show staged, modified and untracked files"

_LIMIT = 10


def register_args(parser: argparse.ArgumentParser) -> None:
    add_standard_flags(parser)


def _section(formatter: OutputFormatter, title: str, marker: str, paths: list[str]) -> None:
    if not paths:
        return
    formatter.text(f"\n{title} ({len(paths)} files):")
    for p in paths[:_LIMIT]:
        formatter.text(f"  {marker} {p}")
    if len(paths) > _LIMIT:
        formatter.text(f"  ... and {len(paths) - _LIMIT} more")


def main(args: argparse.Namespace) -> int:
    formatter = OutputFormatter(json_mode=getattr(args, "json", False))

    try:
        commands = open_commands(args)
        staged = commands.cached_files()
        result = {
            "branch": commands.current_branch(),
            "staged": [{"path": f.path, "status": f.status.value} for f in staged],
            "modified": sorted(commands.uncached_files()),
            "untracked": sorted(commands.other_files()),
        }
        result["clean"] = not (result["staged"] or result["modified"] or result["untracked"])

        if formatter.json_mode:
            formatter.json_output(result)
        else:
            formatter.text_kv("Branch", result["branch"], prefix="")
            formatter.text_kv("Clean", result["clean"], prefix="")
            _section(formatter, "Staged", "+", [f"{s['status']}: {s['path']}" for s in result["staged"]])
            _section(formatter, "Modified", "M", result["modified"])
            _section(formatter, "Untracked", "?", result["untracked"])
        return 0

    except Exception as e:
        formatter.error(e, error_code="status_error")
        return 1
