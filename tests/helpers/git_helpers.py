"""Git operation helpers for tests that need a real repository."""
from __future__ import annotations

import subprocess
from pathlib import Path
from typing import List

GIT_ENV = {
    "GIT_AUTHOR_NAME": "Test User",
    "GIT_AUTHOR_EMAIL": "test@example.com",
    "GIT_COMMITTER_NAME": "Test User",
    "GIT_COMMITTER_EMAIL": "test@example.com",
    "GIT_CONFIG_NOSYSTEM": "1",
}


def run_git(repo_path: Path, *args: str) -> str:
    """Run git in ``repo_path`` and return stdout; raises on failure."""
    result = subprocess.run(
        ["git", *args],
        cwd=repo_path,
        check=True,
        capture_output=True,
        text=True,
    )
    return result.stdout


def git_init(repo_path: Path, branch: str = "master") -> None:
    run_git(repo_path, "init", "-b", branch)


def git_commit(repo_path: Path, message: str, allow_empty: bool = False) -> str:
    """Stage everything, commit and return the new commit id."""
    run_git(repo_path, "add", "-A")
    cmd: List[str] = ["commit", "-m", message]
    if allow_empty:
        cmd.append("--allow-empty")
    run_git(repo_path, *cmd)
    return run_git(repo_path, "rev-parse", "HEAD").strip()


def head_message(repo_path: Path) -> str:
    return run_git(repo_path, "log", "-1", "--format=%B")
