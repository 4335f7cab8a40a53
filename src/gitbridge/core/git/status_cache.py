"""Memoized answer to "is this path under git control?".

The first query for a path may run ``git ls-files``; later queries are served
from memory until the entry is overwritten, invalidated or evicted.
"""
from __future__ import annotations

import logging
import threading
from collections import OrderedDict
from enum import Enum
from pathlib import Path
from typing import Callable, Optional, Set, Union

from gitbridge.core.config.domains.status_cache import StatusCacheConfig
from gitbridge.core.exceptions import GitError

from .facade import GitCommands
from .paths import is_metadata_path

logger = logging.getLogger(__name__)

PathLike = Union[str, Path]
CommandsFactory = Callable[[Path], GitCommands]


class ControlState(str, Enum):
    CONTROLLED = "controlled"
    IGNORED = "ignored"
    NOT_CONTROLLED = "not-controlled"


def _key(path: PathLike) -> str:
    return str(Path(path).expanduser().absolute())


class StatusCache:
    """Per-workspace classification of paths into :class:`ControlState`.

    Each path is in at most one state. ``max_entries`` (0 = unbounded)
    turns the memo into an LRU. The internal lock only guards the memo;
    git is never run while holding it, so two threads missing on the same
    path may both query git and the later write wins.
    """

    def __init__(
        self,
        workspace,
        *,
        commands_factory: Optional[CommandsFactory] = None,
        config: Optional[StatusCacheConfig] = None,
        max_entries: Optional[int] = None,
    ) -> None:
        self.workspace = workspace
        self._commands_factory: CommandsFactory = commands_factory or workspace.commands
        if max_entries is None:
            cfg = config if config is not None else StatusCacheConfig(
                repo_root=workspace.content_roots[0] if workspace.content_roots else None
            )
            max_entries = cfg.max_entries
        self.max_entries = max(0, int(max_entries))
        self._entries: "OrderedDict[str, ControlState]" = OrderedDict()
        self._lock = threading.Lock()

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)

    def _get(self, key: str) -> Optional[ControlState]:
        with self._lock:
            state = self._entries.get(key)
            if state is not None:
                self._entries.move_to_end(key)
            return state

    def _put(self, key: str, state: ControlState) -> None:
        with self._lock:
            self._entries[key] = state
            self._entries.move_to_end(key)
            if self.max_entries:
                while len(self._entries) > self.max_entries:
                    evicted, _ = self._entries.popitem(last=False)
                    logger.debug("status cache evicted %s", evicted)

    def classify(self, path: PathLike) -> ControlState:
        key = _key(path)
        state = self._get(key)
        if state is not None:
            return state

        if is_metadata_path(key):
            self._put(key, ControlState.IGNORED)
            return ControlState.IGNORED

        root = self.workspace.root_for(key)
        if root is None:
            self._put(key, ControlState.NOT_CONTROLLED)
            return ControlState.NOT_CONTROLLED

        try:
            tracked = self._commands_factory(root).status(key)
        except GitError as exc:
            logger.debug("status query for %s failed: %s", key, exc)
            return ControlState.NOT_CONTROLLED

        state = ControlState.CONTROLLED if tracked else ControlState.NOT_CONTROLLED
        self._put(key, state)
        return state

    def is_controlled(self, path: PathLike) -> bool:
        return self.classify(path) is ControlState.CONTROLLED

    def is_ignored(self, path: PathLike) -> bool:
        return self.classify(path) is ControlState.IGNORED

    def set_control(self, path: PathLike, controlled: bool) -> None:
        """Record the caller's decision: CONTROLLED when True, IGNORED otherwise."""
        self._put(_key(path), ControlState.CONTROLLED if controlled else ControlState.IGNORED)

    def invalidate(self, path: PathLike) -> None:
        with self._lock:
            self._entries.pop(_key(path), None)

    def clear(self) -> None:
        with self._lock:
            self._entries.clear()

    def ignored_paths(self) -> Set[str]:
        with self._lock:
            return {k for k, v in self._entries.items() if v is ControlState.IGNORED}


__all__ = ["ControlState", "StatusCache"]
