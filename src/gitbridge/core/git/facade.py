"""High-level git operations for one repository root.

:class:`GitCommands` turns host paths into repository-relative arguments,
runs the matching :class:`GitCommandKind` through a :class:`ProcessInvoker`
and parses the result. Every mutating kind runs under the shared
:class:`WriteSerializer`.
"""
from __future__ import annotations

import logging
import os
import tempfile
import threading
from pathlib import Path
from typing import Iterable, List, Optional, Sequence, Set, Union

from gitbridge.core.config.domains.git import GitConfig
from gitbridge.core.exceptions import ExecutionError

from .commands import GitCommandKind
from .invoker import ProcessInvoker
from .locking import WriteSerializer, default_write_serializer
from .models import Branch, Change, FileAnnotation, Revision, TrackedFile
from .parsers import (
    LOG_FORMAT,
    parse_annotate,
    parse_branch_list,
    parse_current_branch,
    parse_diff_tree,
    parse_file_list,
    parse_log,
    parse_name_status,
    parse_stash_list,
)
from .paths import absolute_path, relative_path
from .status import FileStatus

logger = logging.getLogger(__name__)

PathLike = Union[str, Path]
HEAD = "HEAD"


class GitCommands:
    """Facade over the git commands gitbridge runs against ``root``."""

    def __init__(
        self,
        root: PathLike,
        config: Optional[GitConfig] = None,
        *,
        invoker: Optional[ProcessInvoker] = None,
        serializer: Optional[WriteSerializer] = None,
        interrupt: Optional[threading.Event] = None,
    ) -> None:
        self.root = Path(root)
        self.config = config if config is not None else GitConfig(repo_root=self.root)
        self.invoker = invoker if invoker is not None else ProcessInvoker(
            self.root, self.config, interrupt=interrupt
        )
        self.serializer = serializer if serializer is not None else default_write_serializer()

    # ------------------------------------------------------------------
    # plumbing
    # ------------------------------------------------------------------
    def _rel(self, path: PathLike) -> str:
        return relative_path(path, self.root)

    def _execute(
        self,
        kind: GitCommandKind,
        options: Optional[Sequence[Optional[str]]] = None,
        args: Optional[Sequence[Optional[str]]] = None,
        *,
        silent: bool = False,
    ) -> str:
        if not kind.mutating:
            return self.invoker.execute(kind, options, args, silent=silent)
        with self.serializer.guard(kind.verb):
            output = self.invoker.execute(kind, options, args, silent=silent)
        if output.strip():
            logger.info("%s", output.rstrip())
        return output

    # ------------------------------------------------------------------
    # read-only
    # ------------------------------------------------------------------
    def version(self) -> str:
        return self._execute(GitCommandKind.VERSION).strip()

    def branch_list(self, remote_only: bool = False) -> List[Branch]:
        options = ["-r"] if remote_only else []
        return parse_branch_list(self._execute(GitCommandKind.BRANCH, options, silent=True))

    def current_branch(self) -> str:
        return parse_current_branch(self._execute(GitCommandKind.BRANCH, silent=True))

    def remote_url(self, branch: Branch) -> Optional[str]:
        """URL of the remote a remote branch tracks; None for local branches."""
        alias = branch.remote_alias
        if alias is None:
            return None
        return self._execute(
            GitCommandKind.CONFIG, ["--get"], [f"remote.{alias}.url"], silent=True
        ).strip()

    def cached_files(self) -> List[TrackedFile]:
        """Changes staged in the index."""
        output = self._execute(
            GitCommandKind.DIFF,
            ["--cached", "--name-status", "--diff-filter=ADMRUX", "--"],
            silent=True,
        )
        return parse_name_status(output, self.root)

    def uncached_files(self) -> Set[str]:
        """Absolute paths with unstaged modifications, renames or conflicts."""
        output = self._execute(
            GitCommandKind.DIFF, ["--name-status", "--diff-filter=MRU", "--"], silent=True
        )
        return {tracked.path for tracked in parse_name_status(output, self.root)}

    def other_files(self) -> Set[str]:
        """Untracked, non-ignored files."""
        output = self._execute(
            GitCommandKind.STATUS, ["--others", "--exclude-standard", "--"], silent=True
        )
        return parse_file_list(output, self.root)

    def ignored_files(self) -> Set[str]:
        output = self._execute(
            GitCommandKind.STATUS,
            ["--others", "--ignored", "--exclude-standard", "--"],
            silent=True,
        )
        return parse_file_list(output, self.root)

    def contents(self, path: PathLike, revision: Optional[str] = None) -> str:
        """Content of ``path`` at ``revision`` (HEAD when omitted).

        Returns ``""`` when git cannot produce the blob, e.g. for a path that
        does not exist at that revision.
        """
        spec = f"{revision or HEAD}:{self._rel(path)}"
        try:
            return self._execute(GitCommandKind.SHOW, None, [spec], silent=True)
        except ExecutionError as exc:
            logger.debug("git show %s failed: %s", spec, exc.output.strip())
            return ""

    def commit_template(self) -> Optional[str]:
        """Text of the configured ``commit.template`` file, if any."""
        try:
            name = self._execute(GitCommandKind.CONFIG, None, ["commit.template"], silent=True).strip()
        except ExecutionError:
            # git config exits 1 when the key is unset
            return None
        if not name:
            return None
        template = Path(os.path.expanduser(name))
        if not template.is_absolute():
            template = self.root / template
        if not template.is_file():
            return None
        try:
            return template.read_text(encoding=self.config.encoding)
        except OSError as exc:
            logger.warning("Cannot read commit template %s: %s", template, exc)
            return None

    def log(self, path: PathLike) -> List[Revision]:
        options = [
            "-C",
            "-l5",
            "--find-copies-harder",
            f"-n{self.config.log_limit}",
            LOG_FORMAT,
            "--",
        ]
        return parse_log(self._execute(GitCommandKind.LOG, options, [self._rel(path)], silent=True))

    def file_statuses(self, paths: Iterable[PathLike]) -> List[TrackedFile]:
        """Working-tree status of the given paths relative to the index."""
        args = [self._rel(p) for p in paths]
        output = self._execute(GitCommandKind.DIFF, ["--name-status", "--"], args, silent=True)
        return parse_name_status(output, self.root)

    def status(self, path: PathLike) -> bool:
        """True when git tracks ``path``."""
        rel = self._rel(path)
        output = self._execute(GitCommandKind.STATUS, None, [rel], silent=True)
        return bool(output) and rel in output

    def file_status(self, path: PathLike) -> Optional[FileStatus]:
        """Staged status of ``path``; None when nothing is staged for it."""
        rel = self._rel(path)
        output = self._execute(GitCommandKind.DIFF, ["--cached", "--name-status", "--"], [rel], silent=True)
        target = absolute_path(rel, self.root)
        for tracked in parse_name_status(output, self.root):
            if tracked.path == target:
                return tracked.status
        return None

    def stash_list(self) -> List[str]:
        return parse_stash_list(self._execute(GitCommandKind.STASH_LIST, ["list"], silent=True))

    def annotate(self, path: PathLike) -> FileAnnotation:
        output = self._execute(GitCommandKind.ANNOTATE, ["-c", "-C", "-l", "--"], [self._rel(path)])
        return parse_annotate(output, str(path))

    def resolve_revision(self, ref: str) -> str:
        """Full commit id that ``ref`` (a branch, tag, ``HEAD`` or short id) names now.

        Raises:
            ExecutionError: ``ref`` does not name a commit
        """
        output = self._execute(GitCommandKind.REV_PARSE, ["--verify"], [f"{ref}^{{commit}}"], silent=True)
        lines = [line.strip() for line in output.splitlines() if line.strip()]
        # An interrupted run yields no output; keep the caller's ref.
        return lines[-1] if lines else ref

    def changes_for_commit(self, commit_id: str) -> List[Change]:
        """Files changed by ``commit_id``, with revisions pinned to its full id."""
        commit_id = self.resolve_revision(commit_id)
        output = self._execute(
            GitCommandKind.DIFF_TREE, ["-r", "--root", "--pretty=format:%P"], [commit_id]
        )
        return parse_diff_tree(output, commit_id, self.root)

    # ------------------------------------------------------------------
    # mutating
    # ------------------------------------------------------------------
    def add(self, paths: Iterable[PathLike], *, deleted: Iterable[PathLike] = ()) -> str:
        """Stage ``paths``; entries also listed in ``deleted`` are skipped."""
        skip = {self._rel(p) for p in deleted}
        args = [rel for rel in (self._rel(p) for p in paths) if rel not in skip]
        if not args:
            return ""
        return self._execute(GitCommandKind.ADD, None, args)

    def commit(self, paths: Sequence[PathLike], message: str) -> str:
        """Stage ``paths`` and commit them with ``message``.

        Lines starting with ``#`` are dropped from the message. The message
        is handed to git through a temporary file that is always removed.
        """
        text = "".join(
            line + "\n" for line in message.split("\n") if not line.startswith("#")
        )
        fd, temp_name = tempfile.mkstemp(prefix="gitbridge-commit-", suffix=".txt")
        try:
            with os.fdopen(fd, "w", encoding=self.config.encoding) as handle:
                handle.write(text)
            rels = [self._rel(p) for p in paths]
            with self.serializer.guard("commit"):
                # Staging always runs, even for an empty selection.
                self._execute(GitCommandKind.ADD, None, rels)
                return self._execute(GitCommandKind.COMMIT, ["-F", temp_name], rels)
        finally:
            try:
                os.unlink(temp_name)
            except FileNotFoundError:
                pass

    def delete(self, paths: Iterable[PathLike]) -> str:
        return self._execute(GitCommandKind.DELETE, ["-f"], [self._rel(p) for p in paths])

    def checkout(self, branch: str, create: bool = False) -> str:
        options = ["--track", "-b"] if create else []
        return self._execute(GitCommandKind.CHECKOUT, options, [branch])

    def clone(self, source: str, target: PathLike) -> str:
        return self._execute(GitCommandKind.CLONE, None, [source, str(target)])

    def merge(self, branch: Optional[Branch] = None) -> str:
        return self._execute(GitCommandKind.MERGE, None, [branch.name] if branch else None)

    def move(self, old: PathLike, new: PathLike) -> str:
        return self._execute(GitCommandKind.MOVE, None, [self._rel(old), self._rel(new)])

    def gc(self) -> str:
        return self._execute(GitCommandKind.GC)

    def rebase(self) -> str:
        return self._execute(GitCommandKind.REBASE)

    def pull(self, url: str, merge: bool = True) -> str:
        """``pull`` (or ``fetch`` when ``merge`` is False), then the same with ``--tags``."""
        kind = GitCommandKind.PULL if merge else GitCommandKind.FETCH
        with self.serializer.guard(kind.verb):
            first = self._execute(kind, None, [url])
            return first + self._execute(kind, ["--tags"], [url])

    def fetch(self, url: str) -> str:
        return self.pull(url, merge=False)

    def push(self) -> str:
        with self.serializer.guard("push"):
            first = self._execute(GitCommandKind.PUSH)
            return first + self._execute(GitCommandKind.PUSH, ["--tags"])

    def revert(self, files: Iterable[TrackedFile]) -> str:
        """Discard changes: drop newly added files from the index, check out the rest from HEAD."""
        parts: List[str] = []
        with self.serializer.guard("revert"):
            for tracked in files:
                rel = self._rel(tracked.path)
                if tracked.status is FileStatus.ADDED:
                    parts.append(self._execute(GitCommandKind.UPDATE_INDEX, ["--force-remove", "--"], [rel]))
                else:
                    parts.append(self._execute(GitCommandKind.REVERT, [HEAD, "--"], [rel]))
        return "".join(parts)

    def tag(self, name: str) -> str:
        return self._execute(GitCommandKind.TAG, None, [name])

    def stash(self, name: str) -> str:
        return self._execute(GitCommandKind.STASH, ["push", "-m"], [name])

    def unstash(self, name: str) -> str:
        return self._execute(GitCommandKind.UNSTASH, ["apply"], [name])


__all__ = ["GitCommands", "HEAD"]
