"""Parsers that turn git's textual output into typed models.

stderr is merged into stdout by the invoker, so listing parsers skip lines
that do not look like data (e.g. ``warning: ...``). Structured formats
(log, blame, diff-tree) are strict and raise :class:`ParseError`.
"""
from __future__ import annotations

import logging
from datetime import datetime, timezone
from pathlib import PurePath
from typing import List, Optional, Set, Union

from gitbridge.core.exceptions import ParseError

from .models import AnnotationLine, Branch, Change, ContentRevision, FileAnnotation, Revision, TrackedFile
from .paths import absolute_path
from .status import FileStatus, classify_status

logger = logging.getLogger(__name__)

LOG_FIELD_SEPARATOR = "@@@"
LOG_FORMAT = f"--pretty=format:%H{LOG_FIELD_SEPARATOR}%an <%ae>{LOG_FIELD_SEPARATOR}%ct{LOG_FIELD_SEPARATOR}%s"
ANNOTATE_DATE_FORMAT = "%Y-%m-%d %H:%M:%S %z"
REVISION_ID_LENGTH = 40
DEFAULT_BRANCH = "master"

RootLike = Union[str, PurePath]


def _lines(output: str) -> List[str]:
    # Split on "\n" only: blamed file content may legitimately contain "\r".
    lines = output.split("\n")
    if lines and lines[-1] == "":
        lines.pop()
    return lines


def parse_branch_list(output: str) -> List[Branch]:
    """Parse ``git branch`` output.

    The current branch is prefixed with ``* ``; names containing ``/`` are
    treated as remote branches.
    """
    branches: List[Branch] = []
    for raw in _lines(output):
        name = raw.strip()
        if not name:
            continue
        active = False
        if name.startswith("* "):
            name = name[2:]
            active = True
        branches.append(Branch(name=name, active=active, remote="/" in name))
    return branches


def parse_current_branch(output: str, default: str = DEFAULT_BRANCH) -> str:
    for line in _lines(output):
        if line.startswith("*"):
            return line[2:].strip()
    return default


def parse_name_status(output: str, root: RootLike) -> List[TrackedFile]:
    """Parse ``--name-status`` lines (``<code>\\t<path>[\\t<path>]``)."""
    files: List[TrackedFile] = []
    for line in _lines(output):
        fields = line.split("\t")
        if len(fields) < 2 or not fields[0]:
            if line.strip():
                logger.debug("skipping non-status line: %r", line)
            continue
        # Renames/copies list source then destination; the destination is current.
        files.append(TrackedFile(path=absolute_path(fields[-1], root), status=classify_status(fields[0])))
    return files


def parse_file_list(output: str, root: RootLike) -> Set[str]:
    """Parse ``git ls-files`` output (one repository-relative path per line)."""
    return {absolute_path(line.strip(), root) for line in _lines(output) if line.strip()}


def parse_log(output: str) -> List[Revision]:
    """Parse log lines formatted with :data:`LOG_FORMAT`."""
    revisions: List[Revision] = []
    for line in _lines(output):
        if not line:
            continue
        values = line.split(LOG_FIELD_SEPARATOR, 3)
        if len(values) != 4:
            raise ParseError(f"Malformed log line, expected 4 fields: {line!r}")
        rev_id, author, seconds, subject = values
        try:
            timestamp = datetime.fromtimestamp(int(seconds), tz=timezone.utc)
        except (ValueError, OverflowError, OSError) as exc:
            raise ParseError(f"Malformed commit timestamp {seconds!r}") from exc
        revisions.append(Revision(id=rev_id, timestamp=timestamp, author=author, message=subject))
    return revisions


def parse_annotate(output: str, path: str = "") -> FileAnnotation:
    """Parse ``git blame -c -l`` output.

    Each line is ``<40-char id>\\t(<author>\\t<date>\\t<n>)<content>``.
    A leading ``^`` marks a boundary commit and is dropped.
    """
    annotation = FileAnnotation(path=path)
    for line in _lines(output):
        values = line.split("\t", 3)
        if len(values) != 4:
            raise ParseError("Framing error: unexpected number of values")

        revision, user, date_str, numbered_line = values
        revision = revision.lstrip("^")
        if len(revision) != REVISION_ID_LENGTH:
            raise ParseError(f"Framing error: Illegal revision number: {revision}")

        idx = numbered_line.find(")")
        if not user.startswith("(") or idx <= 0:
            continue
        try:
            line_number = int(numbered_line[:idx].strip())
            date = datetime.strptime(date_str.strip(), ANNOTATE_DATE_FORMAT)
        except ValueError as exc:
            raise ParseError(f"Failed to load annotations: {exc}") from exc

        annotation.append(
            AnnotationLine(
                revision=revision,
                author=user[1:].strip(),
                date=date,
                line_number=line_number,
                content=numbered_line[idx + 1:],
            )
        )
    return annotation


def parse_diff_tree(output: str, commit_id: str, root: RootLike) -> List[Change]:
    """Build the change set of ``commit_id`` from ``git diff-tree -r --root --pretty=format:%P``.

    The first line holds the parent id; it is empty for an initial commit,
    which may then only contain additions. Raw lines look like::

        :000000 100644 0000000... 984ca53... A\tsrc/file.py
        :100644 100644 1a2b3c4... 5d6e7f8... R100\told.py\tnew.py
    """
    changes: List[Change] = []
    if not output:
        return changes

    lines = _lines(output)
    if not lines:
        return changes

    parent_tokens = lines[0].split()
    parent: Optional[str] = parent_tokens[0] if parent_tokens else None

    for line in lines[1:]:
        if not line.strip():
            continue
        meta, _, rest = line.partition("\t")
        tokens = meta.split()
        paths = rest.split("\t") if rest else []
        if len(tokens) < 5 or not paths:
            raise ParseError(f"Malformed diff-tree line: {line!r}")

        status = classify_status(tokens[4])
        first = absolute_path(paths[0], root)
        second = absolute_path(paths[1], root) if len(paths) > 1 else None

        if parent is None and status is not FileStatus.ADDED:
            raise ParseError(
                f"Initial commit {commit_id} may only add files, found {status.value}: {paths[0]}"
            )

        if status is FileStatus.ADDED:
            changes.append(Change(None, ContentRevision(first, commit_id), FileStatus.ADDED))
        elif status is FileStatus.MODIFIED:
            changes.append(
                Change(ContentRevision(first, parent), ContentRevision(first, commit_id), FileStatus.MODIFIED)
            )
        elif status in (FileStatus.COPY, FileStatus.RENAME):
            if second is None:
                raise ParseError(f"{status.value} entry without destination path: {line!r}")
            changes.append(
                Change(ContentRevision(first, parent), ContentRevision(second, commit_id), FileStatus.MODIFIED)
            )
        elif status is FileStatus.DELETED:
            changes.append(Change(ContentRevision(first, parent), None, FileStatus.DELETED))
        else:
            logger.debug("ignoring %s entry in %s: %s", status.value, commit_id, paths[0])
    return changes


def parse_stash_list(output: str) -> List[str]:
    return [line for line in _lines(output) if line.strip()]


__all__ = [
    "LOG_FORMAT",
    "parse_branch_list",
    "parse_current_branch",
    "parse_name_status",
    "parse_file_list",
    "parse_log",
    "parse_annotate",
    "parse_diff_tree",
    "parse_stash_list",
]
