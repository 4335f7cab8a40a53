"""Classification of git's one-letter status codes."""
from __future__ import annotations

from enum import Enum


class FileStatus(str, Enum):
    MODIFIED = "modified"
    COPY = "copy"
    RENAME = "rename"
    ADDED = "added"
    DELETED = "deleted"
    UNMERGED = "unmerged"
    UNVERSIONED = "unversioned"
    UNMODIFIED = "unmodified"


_STATUS_CODES = {
    "M": FileStatus.MODIFIED,
    # "H" is the content-hash-match flavour of a modification.
    "H": FileStatus.MODIFIED,
    "C": FileStatus.COPY,
    "R": FileStatus.RENAME,
    "A": FileStatus.ADDED,
    "D": FileStatus.DELETED,
    "U": FileStatus.UNMERGED,
    "X": FileStatus.UNVERSIONED,
}


def classify_status(code: str) -> FileStatus:
    """Map a status code from ``--name-status``/``diff-tree`` output.

    Only the first letter counts, so scored codes like ``R100`` classify as
    renames. Unknown or empty codes fall back to UNMODIFIED instead of
    raising: git grows new letters (e.g. ``T`` for type changes) and callers
    treat anything unrecognized as "nothing to report".
    """
    if not code:
        return FileStatus.UNMODIFIED
    return _STATUS_CODES.get(code[0], FileStatus.UNMODIFIED)


__all__ = ["FileStatus", "classify_status"]
