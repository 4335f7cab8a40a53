"""Dirty-scope notifications from gitbridge to the host.

Producers (the background scanner, file-event handling) publish
:class:`DirtyScope` messages; a single consumer thread delivers them to the
subscribed listeners in publication order.
"""
from __future__ import annotations

import logging
import threading
from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from queue import Queue
from typing import Callable, List, Optional

logger = logging.getLogger(__name__)


class ScopeKind(str, Enum):
    FILE = "file"
    TREE = "tree"
    REFRESH = "refresh"


@dataclass(frozen=True)
class DirtyScope:
    """``FILE``/``TREE`` name a path whose status must be recomputed;
    ``REFRESH`` asks for a full change-list update and carries no path."""

    kind: ScopeKind
    path: Optional[Path] = None

    @classmethod
    def file(cls, path) -> "DirtyScope":
        return cls(ScopeKind.FILE, Path(path))

    @classmethod
    def tree(cls, path) -> "DirtyScope":
        return cls(ScopeKind.TREE, Path(path))

    @classmethod
    def refresh(cls) -> "DirtyScope":
        return cls(ScopeKind.REFRESH)


Listener = Callable[[DirtyScope], None]
_STOP = object()


class InvalidationBus:
    """Queue plus one consumer thread fanning messages out to listeners."""

    def __init__(self, name: str = "gitbridge-invalidation") -> None:
        self.name = name
        self._queue: "Queue[object]" = Queue()
        self._listeners: List[Listener] = []
        self._lock = threading.Lock()
        self._thread: Optional[threading.Thread] = None

    def subscribe(self, listener: Listener) -> Callable[[], None]:
        """Register ``listener``; returns a callable that unsubscribes it."""
        with self._lock:
            self._listeners.append(listener)

        def _unsubscribe() -> None:
            with self._lock:
                if listener in self._listeners:
                    self._listeners.remove(listener)

        return _unsubscribe

    def publish(self, scope: DirtyScope) -> None:
        self._queue.put(scope)

    @property
    def running(self) -> bool:
        return self._thread is not None and self._thread.is_alive()

    def start(self) -> None:
        with self._lock:
            if self._thread is not None and self._thread.is_alive():
                return
            self._thread = threading.Thread(target=self._consume, name=self.name, daemon=True)
            self._thread.start()

    def stop(self, timeout: Optional[float] = None) -> None:
        """Deliver what is already queued, then end the consumer thread."""
        with self._lock:
            thread = self._thread
            self._thread = None
        if thread is None:
            return
        self._queue.put(_STOP)
        thread.join(timeout)

    def join(self) -> None:
        """Block until every published message has been delivered."""
        self._queue.join()

    def _consume(self) -> None:
        while True:
            item = self._queue.get()
            try:
                if item is _STOP:
                    return
                self._deliver(item)  # type: ignore[arg-type]
            finally:
                self._queue.task_done()

    def _deliver(self, scope: DirtyScope) -> None:
        with self._lock:
            listeners = list(self._listeners)
        for listener in listeners:
            try:
                listener(scope)
            except Exception:
                logger.exception("invalidation listener %r failed for %s", listener, scope)


__all__ = ["ScopeKind", "DirtyScope", "InvalidationBus"]
