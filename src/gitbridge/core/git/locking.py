"""The write gate that serializes repository-mutating git commands.

git's index and ref lock files are not safe against concurrent mutation
from several invocations, so every mutating command runs under one
process-wide gate. Read-only commands never take it; a read can therefore
observe a half-finished write.
"""
from __future__ import annotations

import logging
import threading
from contextlib import contextmanager
from typing import Iterator, Optional

logger = logging.getLogger(__name__)


class WriteSerializer:
    """Re-entrant mutual-exclusion gate for mutating git commands.

    Re-entrancy lets a composite operation (commit = add + commit) hold the
    gate across its nested steps. The gate is coarse: it serializes writes
    even across unrelated repository roots.
    """

    def __init__(self) -> None:
        self._lock = threading.RLock()

    @contextmanager
    def guard(self, operation: str = "") -> Iterator[None]:
        """Hold the gate for the duration of the ``with`` block."""
        self._lock.acquire()
        try:
            if operation:
                logger.debug("write gate acquired for %s", operation)
            yield
        finally:
            self._lock.release()


_DEFAULT: Optional[WriteSerializer] = None
_DEFAULT_MUTEX = threading.Lock()


def default_write_serializer() -> WriteSerializer:
    """Return the process-wide gate shared by every command facade."""
    global _DEFAULT
    if _DEFAULT is None:
        with _DEFAULT_MUTEX:
            if _DEFAULT is None:
                _DEFAULT = WriteSerializer()
    return _DEFAULT


__all__ = ["WriteSerializer", "default_write_serializer"]
