"""
gitbridge watch command.

SUMMARY: Poll the repository and print dirty-scope notifications
"""

from __future__ import annotations

import argparse
import threading

from gitbridge.cli import OutputFormatter, add_standard_flags, get_repo_root, setup_logging
from gitbridge.core.git.invalidation import DirtyScope, InvalidationBus, ScopeKind
from gitbridge.core.git.scanner import BackgroundScanner
from gitbridge.core.workspace import Workspace

SUMMARY = "Poll the repository and print dirty-scope notifications"


def register_args(parser: argparse.ArgumentParser) -> None:
    parser.add_argument("--interval", type=float, default=None, help="Seconds between scans (default: scanner.interval_seconds)")
    parser.add_argument("--grace", type=float, default=None, help="Settle time before publishing (default: scanner.grace_seconds)")
    parser.add_argument("--cycles", type=int, default=0, help="Exit after this many scan cycles (default: run until interrupted)")
    add_standard_flags(parser)


def main(args: argparse.Namespace) -> int:
    formatter = OutputFormatter(json_mode=getattr(args, "json", False))

    try:
        root = get_repo_root(args)
        setup_logging(args, root)
        workspace = Workspace(root.name, [root])
        bus = InvalidationBus()
        scanner = BackgroundScanner(workspace, bus, interval=args.interval, grace=args.grace)
        done = threading.Event()
        cycles = 0

        def _on_scope(scope: DirtyScope) -> None:
            nonlocal cycles
            if done.is_set():
                return
            if scope.kind is ScopeKind.REFRESH:
                snap = scanner.snapshot(root)
                if formatter.json_mode:
                    formatter.json_output(
                        {
                            "event": scope.kind.value,
                            "modified": sorted(snap.uncached) if snap else [],
                            "untracked": sorted(snap.other) if snap else [],
                        }
                    )
                else:
                    modified = len(snap.uncached) if snap else 0
                    untracked = len(snap.other) if snap else 0
                    formatter.text(f"refresh: {modified} modified, {untracked} untracked")
                cycles += 1
                if args.cycles and cycles >= args.cycles:
                    done.set()
            elif not formatter.json_mode:
                formatter.text(f"{scope.kind.value}: {scope.path}")

        bus.subscribe(_on_scope)
        bus.start()
        scanner.start()
        try:
            while not done.wait(0.5):
                pass
        except KeyboardInterrupt:
            pass
        finally:
            scanner.stop_running()
            scanner.join(timeout=5)
            bus.stop(timeout=5)
        return 0

    except Exception as e:
        formatter.error(e, error_code="watch_error")
        return 1
