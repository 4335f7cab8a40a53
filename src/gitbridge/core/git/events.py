"""Keep the git index in step with file operations performed by the host.

The host calls into :class:`FileEventHandler` when files are edited,
created, copied, deleted, moved or renamed. Failures of the resulting git
commands are logged and never propagate, except for :meth:`rename`, whose
contract is a file-system operation and therefore raises ``OSError``.
"""
from __future__ import annotations

import logging
from enum import Enum
from pathlib import Path
from typing import Callable, List, Optional, Sequence, Union

from gitbridge.core.exceptions import GitError

from .facade import GitCommands
from .invalidation import DirtyScope, InvalidationBus
from .status_cache import StatusCache

logger = logging.getLogger(__name__)

PathLike = Union[str, Path]
# (action, candidate paths) -> the paths the user agreed to process
ConfirmCallback = Callable[[str, List[Path]], Sequence[PathLike]]


class ConfirmationPolicy(str, Enum):
    CONFIRM = "confirm"
    SILENT = "silent"
    NOTHING = "nothing"


class FileEventHandler:
    def __init__(
        self,
        workspace,
        cache: StatusCache,
        bus: InvalidationBus,
        *,
        add_policy: ConfirmationPolicy = ConfirmationPolicy.SILENT,
        delete_policy: ConfirmationPolicy = ConfirmationPolicy.SILENT,
        confirm: Optional[ConfirmCallback] = None,
        commands_factory: Optional[Callable[[Path], GitCommands]] = None,
    ) -> None:
        if confirm is None and ConfirmationPolicy.CONFIRM in (add_policy, delete_policy):
            raise ValueError("ConfirmationPolicy.CONFIRM requires a confirm callback")
        self.workspace = workspace
        self.cache = cache
        self.bus = bus
        self.add_policy = ConfirmationPolicy(add_policy)
        self.delete_policy = ConfirmationPolicy(delete_policy)
        self._confirm = confirm
        self._commands_factory = commands_factory or workspace.commands

    # ------------------------------------------------------------------
    # helpers
    # ------------------------------------------------------------------
    def _select(self, policy: ConfirmationPolicy, action: str, path: Path) -> Optional[List[Path]]:
        """Paths to act on; None when the policy says to do nothing at all."""
        if policy is ConfirmationPolicy.NOTHING:
            return None
        if policy is ConfirmationPolicy.SILENT:
            return [path]
        if self._confirm is None:
            raise ValueError(f"ConfirmationPolicy.CONFIRM for {action} requires a confirm callback")
        return [Path(p) for p in (self._confirm(action, [path]) or [])]

    def _commands_for(self, path: Path) -> Optional[GitCommands]:
        root = self.workspace.root_for(path)
        if root is None:
            return None
        return self._commands_factory(root)

    def _status_change(self, path: PathLike) -> None:
        p = Path(path)
        self.bus.publish(DirtyScope.tree(p) if p.is_dir() else DirtyScope.file(p))

    # ------------------------------------------------------------------
    # events
    # ------------------------------------------------------------------
    def contents_changed(self, path: PathLike, *, from_refresh: bool = False) -> None:
        """Re-stage a controlled file after its content changed."""
        if from_refresh:
            return
        p = Path(path)
        if not self.cache.is_controlled(p):
            return
        commands = self._commands_for(p)
        if commands is None:
            return
        try:
            commands.add([p])
        except GitError as exc:
            logger.error("Error syncing changes to git index for %s: %s", p, exc)
        self._status_change(p)

    def file_created(self, path: PathLike, *, from_refresh: bool = False) -> None:
        if from_refresh:
            return
        p = Path(path)
        if not self.workspace.contains(p):
            return
        selected = self._select(self.add_policy, "add", p)
        if selected is None:
            return
        if not selected:
            self.cache.set_control(p, False)
            return

        commands = self._commands_for(p)
        if commands is not None:
            try:
                commands.add(selected)
            except GitError as exc:
                logger.error("Error adding %s: %s", ", ".join(str(s) for s in selected), exc)
                for s in selected:
                    self.cache.invalidate(s)
            else:
                for s in selected:
                    self.cache.set_control(s, True)
        self._status_change(p)

    def file_copied(self, path: PathLike, *, from_refresh: bool = False) -> None:
        self.file_created(path, from_refresh=from_refresh)

    def before_file_deletion(self, path: PathLike, *, from_refresh: bool = False) -> None:
        if from_refresh:
            return
        p = Path(path)
        if not self.cache.is_controlled(p):
            return
        selected = self._select(self.delete_policy, "delete", p)
        if not selected:
            return
        commands = self._commands_for(p)
        if commands is None:
            return
        try:
            commands.delete(selected)
        except GitError as exc:
            logger.error("Error deleting %s: %s", p, exc)

    def file_deleted(self, path: PathLike) -> None:
        self.cache.invalidate(path)
        self._status_change(path)

    def before_file_move(self, path: PathLike, new_parent: PathLike, *, from_refresh: bool = False) -> None:
        if from_refresh:
            return
        p = Path(path)
        if not self.cache.is_controlled(p):
            return
        commands = self._commands_for(p)
        if commands is None:
            return
        try:
            commands.move(p, Path(new_parent) / p.name)
        except GitError as exc:
            logger.error("Error moving %s: %s", p, exc)

    def file_moved(self, old_path: PathLike, new_path: PathLike) -> None:
        old, new = Path(old_path), Path(new_path)
        self.cache.invalidate(old)
        self.cache.invalidate(new)
        self.bus.publish(DirtyScope.tree(old.parent))
        self.bus.publish(DirtyScope.tree(new.parent))

    def rename(self, path: PathLike, new_name: str) -> bool:
        """Rename through ``git mv``; False when the path is not ours to handle.

        Raises:
            OSError: git refused the rename
        """
        if not new_name:
            return False
        p = Path(path)
        if not self.workspace.contains(p):
            return False
        commands = self._commands_for(p)
        if commands is None:
            return False
        target = p.parent / new_name
        try:
            commands.move(p, target)
        except GitError as exc:
            raise OSError(f"Error renaming file!\n{exc}") from exc
        self.cache.invalidate(p)
        self.cache.invalidate(target)
        self._status_change(p.parent)
        return True


__all__ = ["ConfirmationPolicy", "FileEventHandler"]
