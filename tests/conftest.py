import os
import shutil
import sys
from pathlib import Path

import pytest

# Keep the repository free of Python bytecode and __pycache__ artifacts during tests.
sys.dont_write_bytecode = True

TESTS_ROOT = Path(__file__).resolve().parent
REPO_ROOT = TESTS_ROOT.parent
SRC_ROOT = REPO_ROOT / "src"

# Make src/ importable as 'gitbridge' and tests/ importable as 'helpers'
for p in (SRC_ROOT, TESTS_ROOT):
    if str(p) not in sys.path:
        sys.path.insert(0, str(p))

from helpers.cache_utils import reset_gitbridge_caches  # noqa: E402
from helpers.git_helpers import GIT_ENV, git_commit, git_init  # noqa: E402


def pytest_collection_modifyitems(config, items):  # type: ignore[no-untyped-def]
    if shutil.which("git") is not None:
        return
    skip_git = pytest.mark.skip(reason="git binary not available")
    for item in items:
        if "requires_git" in item.keywords:
            item.add_marker(skip_git)


@pytest.fixture(autouse=True)
def _isolated_gitbridge_env(tmp_path_factory, monkeypatch):
    """Fresh caches, a private HOME and no inherited GITBRIDGE_/GIT_DIR variables."""
    home = tmp_path_factory.mktemp("home")
    monkeypatch.setenv("HOME", str(home))
    for key in list(os.environ):
        if key.startswith("GITBRIDGE_") or key in ("GIT_DIR", "GIT_WORK_TREE", "GIT_INDEX_FILE"):
            monkeypatch.delenv(key, raising=False)
    for key, value in GIT_ENV.items():
        monkeypatch.setenv(key, value)
    reset_gitbridge_caches()
    yield
    reset_gitbridge_caches()


@pytest.fixture
def git_repo(tmp_path: Path) -> Path:
    """An initialized repository on branch ``master`` with one commit."""
    repo = tmp_path / "repo"
    repo.mkdir()
    git_init(repo)
    (repo / "README.md").write_text("hello\n", encoding="utf-8")
    git_commit(repo, "initial")
    return repo


@pytest.fixture
def empty_repo(tmp_path: Path) -> Path:
    """An initialized repository without commits."""
    repo = tmp_path / "empty"
    repo.mkdir()
    git_init(repo)
    return repo
