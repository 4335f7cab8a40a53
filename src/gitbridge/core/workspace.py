"""The host-side view of a project: a name plus its content roots."""
from __future__ import annotations

import threading
from pathlib import Path
from typing import Iterable, Optional, Tuple, Union

from gitbridge.core.config.domains.git import GitConfig
from gitbridge.core.git.facade import GitCommands
from gitbridge.core.git.paths import find_repository_root

PathLike = Union[str, Path]


class Workspace:
    """A set of content roots that gitbridge keeps in sync with git.

    A content root is usually a repository root, but may also be a
    directory nested inside one. Lookups never run git.
    """

    def __init__(self, name: str, content_roots: Iterable[PathLike], *, config: Optional[GitConfig] = None) -> None:
        self.name = name
        self.content_roots: Tuple[Path, ...] = tuple(Path(r).expanduser().absolute() for r in content_roots)
        self._config = config

    @classmethod
    def from_path(cls, path: PathLike) -> "Workspace":
        """Workspace rooted at the repository containing ``path`` (or ``path`` itself)."""
        start = Path(path).expanduser().absolute()
        root = find_repository_root(start) or start
        return cls(root.name, [root])

    def git_config(self, root: Path) -> GitConfig:
        return self._config if self._config is not None else GitConfig(repo_root=root)

    def contains(self, path: PathLike) -> bool:
        p = Path(path).expanduser().absolute()
        return any(p == root or root in p.parents for root in self.content_roots)

    def root_for(self, path: PathLike) -> Optional[Path]:
        """Repository root for ``path``; None outside the workspace or any repository."""
        if not self.contains(path):
            return None
        config = self._config
        if config is None:
            return find_repository_root(path)
        return find_repository_root(path, config.metadata_dir)

    def commands(self, root: PathLike, *, interrupt: Optional[threading.Event] = None) -> GitCommands:
        """Command facade bound to ``root``."""
        root_path = Path(root)
        return GitCommands(root_path, self.git_config(root_path), interrupt=interrupt)

    def __repr__(self) -> str:
        return f"Workspace(name={self.name!r}, content_roots={[str(r) for r in self.content_roots]!r})"


__all__ = ["Workspace"]
