"""Path translation between host paths and repository-relative git paths."""
from __future__ import annotations

from pathlib import Path, PurePath
from typing import Optional, Union

PathLike = Union[str, PurePath]

DEFAULT_METADATA_DIR = ".git"


def _normalize(path: PathLike) -> str:
    return str(path).replace("\\", "/")


def relative_path(path: PathLike, root: PathLike) -> str:
    """Return ``path`` relative to ``root`` using forward slashes.

    - ``path == root`` gives ``"."``.
    - A path outside ``root`` comes back unchanged (only slash-normalized);
      callers that care must detect that case themselves.

    The prefix test is segment-aware, so ``/repo-old/x`` is not treated as
    being inside ``/repo``.
    """
    rpath = _normalize(path)
    base = _normalize(root)
    if len(base) > 1:
        base = base.rstrip("/")

    if rpath == base or rpath.rstrip("/") == base:
        return "."
    prefix = base if base.endswith("/") else base + "/"
    if not rpath.startswith(prefix):
        return rpath
    return rpath[len(prefix):]


def absolute_path(relative: str, root: PathLike) -> str:
    """Join a git-reported relative path onto ``root`` (forward slashes)."""
    base = _normalize(root).rstrip("/")
    return f"{base}/{relative}"


def is_metadata_path(path: PathLike, metadata_dir: str = DEFAULT_METADATA_DIR) -> bool:
    """True when ``path`` is git's control directory or lies inside it."""
    parts = PurePath(_normalize(path)).parts
    return metadata_dir in parts


def find_repository_root(path: PathLike, metadata_dir: str = DEFAULT_METADATA_DIR) -> Optional[Path]:
    """Return the nearest ancestor of ``path`` holding a ``.git`` entry.

    Walks parent directories without running git, so it is safe to call on
    paths that do not exist yet (e.g. a file about to be created).

    Returns:
        Optional[Path]: repository root, or None when no repository is found.
    """
    p = Path(path).expanduser().absolute()
    if p.is_file():
        p = p.parent
    for candidate in [p, *p.parents]:
        if (candidate / metadata_dir).exists():
            return candidate
    return None


__all__ = [
    "relative_path",
    "absolute_path",
    "is_metadata_path",
    "find_repository_root",
]
