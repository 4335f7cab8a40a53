"""Shared helpers for CLI commands."""
from __future__ import annotations

import argparse
from pathlib import Path
from typing import Optional

from gitbridge.core.exceptions import GitBridgeError
from gitbridge.core.git.facade import GitCommands
from gitbridge.core.git.paths import find_repository_root
from gitbridge.core.stdlib_logging import configure_from_config

_VERBOSITY_LEVELS = {1: "INFO", 2: "DEBUG"}


def get_repo_root(args: argparse.Namespace) -> Path:
    """Repository root from ``--repo-root`` or the current directory.

    Raises:
        GitBridgeError: no repository contains the current directory
    """
    explicit = getattr(args, "repo_root", None)
    if explicit:
        return Path(explicit).expanduser().resolve()
    root = find_repository_root(Path.cwd())
    if root is None:
        raise GitBridgeError("Not inside a git repository", context={"cwd": str(Path.cwd())})
    return root


def setup_logging(args: argparse.Namespace, repo_root: Optional[Path]) -> None:
    verbose = int(getattr(args, "verbose", 0) or 0)
    console_level = _VERBOSITY_LEVELS.get(min(verbose, 2)) if verbose else None
    configure_from_config(repo_root, console_level=console_level)


def open_commands(args: argparse.Namespace) -> GitCommands:
    """Resolve the repository, configure logging and return its command facade."""
    root = get_repo_root(args)
    setup_logging(args, root)
    return GitCommands(root)


def resolve_path(path: str) -> Path:
    """Command-line path argument as an absolute path (relative to the cwd)."""
    return Path(path).expanduser().resolve()


__all__ = ["get_repo_root", "setup_logging", "open_commands", "resolve_path"]
