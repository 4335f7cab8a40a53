from __future__ import annotations

from pathlib import Path

import pytest

from gitbridge.core.git.paths import (
    absolute_path,
    find_repository_root,
    is_metadata_path,
    relative_path,
)


@pytest.mark.parametrize(
    "path, root, expected",
    [
        ("/repo/src/a.py", "/repo", "src/a.py"),
        ("/repo/src/a.py", "/repo/", "src/a.py"),
        ("/repo", "/repo", "."),
        ("/repo/", "/repo", "."),
        ("C:\\work\\repo\\src\\a.py", "C:\\work\\repo", "src/a.py"),
        ("/other/file.txt", "/repo", "/other/file.txt"),
        ("C:\\other\\f.txt", "/repo", "C:/other/f.txt"),
    ],
)
def test_relative_path(path: str, root: str, expected: str) -> None:
    assert relative_path(path, root) == expected


def test_relative_path_does_not_match_sibling_prefix() -> None:
    # "/repo-old" shares a string prefix with "/repo" but is not inside it
    assert relative_path("/repo-old/x.py", "/repo") == "/repo-old/x.py"


def test_relative_path_accepts_path_objects(tmp_path: Path) -> None:
    assert relative_path(tmp_path / "a" / "b.txt", tmp_path) == "a/b.txt"


def test_absolute_path_joins_with_forward_slash() -> None:
    assert absolute_path("src/a.py", "/repo/") == "/repo/src/a.py"


def test_is_metadata_path() -> None:
    assert is_metadata_path("/repo/.git")
    assert is_metadata_path("/repo/.git/objects/ab/cdef")
    assert not is_metadata_path("/repo/src/.gitignore")
    assert not is_metadata_path("/repo/my.git.txt")


def test_find_repository_root_walks_parents(tmp_path: Path) -> None:
    (tmp_path / ".git").mkdir()
    nested = tmp_path / "a" / "b"
    nested.mkdir(parents=True)
    (nested / "f.txt").write_text("x", encoding="utf-8")

    assert find_repository_root(nested / "f.txt") == tmp_path
    assert find_repository_root(nested / "not-created-yet.txt") == tmp_path


def test_find_repository_root_none_outside_repository(tmp_path: Path) -> None:
    assert find_repository_root(tmp_path / "x") is None
