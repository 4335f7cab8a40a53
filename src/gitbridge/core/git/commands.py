"""The closed set of git commands gitbridge is allowed to run.

Each kind knows its git verb, whether it mutates the repository (and must
therefore run under the write gate), and how to build its argument vector.
"""
from __future__ import annotations

from enum import Enum
from typing import Iterable, List, Optional


class GitCommandKind(str, Enum):
    # read-only
    VERSION = "version"
    BRANCH = "branch"
    CONFIG = "config"
    DIFF = "diff"
    STATUS = "status"
    SHOW = "show"
    LOG = "log"
    ANNOTATE = "annotate"
    DIFF_TREE = "diff-tree"
    STASH_LIST = "stash-list"
    REV_PARSE = "rev-parse"
    # mutating
    ADD = "add"
    COMMIT = "commit"
    DELETE = "delete"
    CHECKOUT = "checkout"
    CLONE = "clone"
    MERGE = "merge"
    MOVE = "move"
    GC = "gc"
    REBASE = "rebase"
    FETCH = "fetch"
    PULL = "pull"
    PUSH = "push"
    REVERT = "revert"
    UPDATE_INDEX = "update-index"
    TAG = "tag"
    STASH = "stash"
    UNSTASH = "unstash"

    @property
    def verb(self) -> str:
        """The git subcommand this kind runs."""
        return _VERBS.get(self, self.value)

    @property
    def mutating(self) -> bool:
        return self in _MUTATING

    @property
    def binds_repository(self) -> bool:
        """False for commands that create a repository rather than act on one."""
        return self is not GitCommandKind.CLONE

    @property
    def large_output(self) -> bool:
        """Commands that dump file contents start with a bigger capture buffer."""
        return self in (GitCommandKind.SHOW, GitCommandKind.ANNOTATE)

    @property
    def tolerates_empty_repository(self) -> bool:
        """``diff`` against HEAD in a repository without commits is an empty result."""
        return self is GitCommandKind.DIFF

    def build_argv(
        self,
        executable: str,
        options: Optional[Iterable[Optional[str]]] = None,
        args: Optional[Iterable[Optional[str]]] = None,
    ) -> List[str]:
        """executable, verb, options, args; ``None`` entries are skipped."""
        argv = [executable, self.verb]
        for part in (options or ()):
            if part is not None:
                argv.append(str(part))
        for part in (args or ()):
            if part is not None:
                argv.append(str(part))
        return argv


_VERBS = {
    GitCommandKind.STATUS: "ls-files",
    GitCommandKind.ANNOTATE: "blame",
    GitCommandKind.STASH_LIST: "stash",
    GitCommandKind.DELETE: "rm",
    GitCommandKind.MOVE: "mv",
    GitCommandKind.REVERT: "checkout",
    GitCommandKind.UNSTASH: "stash",
}

_MUTATING = frozenset(
    {
        GitCommandKind.ADD,
        GitCommandKind.COMMIT,
        GitCommandKind.DELETE,
        GitCommandKind.CHECKOUT,
        GitCommandKind.CLONE,
        GitCommandKind.MERGE,
        GitCommandKind.MOVE,
        GitCommandKind.GC,
        GitCommandKind.REBASE,
        GitCommandKind.FETCH,
        GitCommandKind.PULL,
        GitCommandKind.PUSH,
        GitCommandKind.REVERT,
        GitCommandKind.UPDATE_INDEX,
        GitCommandKind.TAG,
        GitCommandKind.STASH,
        GitCommandKind.UNSTASH,
    }
)


__all__ = ["GitCommandKind"]
