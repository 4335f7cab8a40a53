"""Typed results produced from git output.

All models are immutable and rebuilt on every query; nothing here is
updated in place.
"""
from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Dict, List, Optional

from .status import FileStatus


@dataclass(frozen=True)
class TrackedFile:
    """A path reported by git together with its status."""

    path: str
    status: FileStatus


@dataclass(frozen=True)
class Branch:
    name: str
    active: bool = False
    remote: bool = False

    @property
    def remote_alias(self) -> Optional[str]:
        """``origin`` for ``origin/main``; None for local branches."""
        if not self.remote:
            return None
        return self.name.split("/", 1)[0]


@dataclass(frozen=True)
class Revision:
    """One commit from ``git log``; ``id`` is opaque to gitbridge."""

    id: str
    timestamp: datetime
    author: str
    message: str

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "timestamp": self.timestamp.isoformat(),
            "author": self.author,
            "message": self.message,
        }


@dataclass(frozen=True)
class ContentRevision:
    """Reference to a file's content at a given revision."""

    path: str
    revision: str


@dataclass(frozen=True)
class Change:
    """One entry of a commit's change set.

    ``before`` is None for additions, ``after`` is None for deletions.
    Copies and renames are reported as MODIFIED with differing paths.
    """

    before: Optional[ContentRevision]
    after: Optional[ContentRevision]
    status: FileStatus

    def to_dict(self) -> Dict[str, Any]:
        return {
            "status": self.status.value,
            "before": None if self.before is None else {"path": self.before.path, "revision": self.before.revision},
            "after": None if self.after is None else {"path": self.after.path, "revision": self.after.revision},
        }


@dataclass(frozen=True)
class AnnotationLine:
    revision: str
    author: str
    date: datetime
    line_number: int
    content: str


@dataclass
class FileAnnotation:
    """Per-line blame information for one file."""

    path: str
    lines: List[AnnotationLine] = field(default_factory=list)

    def append(self, line: AnnotationLine) -> None:
        self.lines.append(line)

    def revisions(self) -> List[str]:
        """Distinct revisions in order of first appearance."""
        seen: Dict[str, None] = {}
        for line in self.lines:
            seen.setdefault(line.revision, None)
        return list(seen)

    def __len__(self) -> int:
        return len(self.lines)


__all__ = [
    "TrackedFile",
    "Branch",
    "Revision",
    "ContentRevision",
    "Change",
    "AnnotationLine",
    "FileAnnotation",
]
