from __future__ import annotations

import threading
from pathlib import Path
from typing import Set

import pytest

from gitbridge.core.exceptions import ExecutionError
from gitbridge.core.git.commands import GitCommandKind
from gitbridge.core.git.facade import GitCommands
from gitbridge.core.git.locking import WriteSerializer
from gitbridge.core.git.status_cache import ControlState, StatusCache
from gitbridge.core.workspace import Workspace

from helpers.fakes import Call, FakeInvoker


def _tracked_responder(tracked: Set[str]):
    def respond(call: Call) -> str:
        return "".join(f"{a}\n" for a in call.args if a in tracked)

    return respond


@pytest.fixture
def workspace(tmp_path: Path) -> Workspace:
    (tmp_path / ".git").mkdir()
    return Workspace("ws", [tmp_path])


def _cache(workspace: Workspace, invoker: FakeInvoker, **kwargs) -> StatusCache:
    gate = WriteSerializer()
    return StatusCache(
        workspace,
        commands_factory=lambda root: GitCommands(root, invoker=invoker, serializer=gate),
        **kwargs,
    )


def test_classify_queries_once_then_memoizes(workspace: Workspace, tmp_path: Path) -> None:
    invoker = FakeInvoker(responses={GitCommandKind.STATUS: _tracked_responder({"a.txt"})})
    cache = _cache(workspace, invoker)

    assert cache.classify(tmp_path / "a.txt") is ControlState.CONTROLLED
    assert cache.classify(tmp_path / "a.txt") is ControlState.CONTROLLED
    assert cache.classify(tmp_path / "b.txt") is ControlState.NOT_CONTROLLED
    assert len(invoker.calls) == 2


def test_metadata_paths_are_ignored_without_git(workspace: Workspace, tmp_path: Path) -> None:
    invoker = FakeInvoker()
    cache = _cache(workspace, invoker)

    assert cache.is_ignored(tmp_path / ".git" / "index")
    assert tmp_path.joinpath(".git", "index").as_posix() in {Path(p).as_posix() for p in cache.ignored_paths()}
    assert invoker.calls == []


def test_paths_outside_any_repository(tmp_path: Path) -> None:
    outside = tmp_path / "plain"
    outside.mkdir()
    invoker = FakeInvoker()
    cache = _cache(Workspace("ws", [outside]), invoker)

    assert cache.classify(outside / "f.txt") is ControlState.NOT_CONTROLLED
    assert invoker.calls == []


def test_failed_query_is_not_memoized(workspace: Workspace, tmp_path: Path) -> None:
    invoker = FakeInvoker(responses={GitCommandKind.STATUS: ExecutionError("fatal: index locked")})
    cache = _cache(workspace, invoker)

    assert cache.classify(tmp_path / "a.txt") is ControlState.NOT_CONTROLLED
    assert len(cache) == 0

    invoker.responses[GitCommandKind.STATUS] = _tracked_responder({"a.txt"})
    assert cache.is_controlled(tmp_path / "a.txt")


def test_set_control_and_invalidate(workspace: Workspace, tmp_path: Path) -> None:
    invoker = FakeInvoker(responses={GitCommandKind.STATUS: _tracked_responder({"a.txt"})})
    cache = _cache(workspace, invoker)
    path = tmp_path / "a.txt"

    cache.set_control(path, False)
    assert cache.classify(path) is ControlState.IGNORED
    cache.set_control(path, True)
    assert cache.classify(path) is ControlState.CONTROLLED
    assert invoker.calls == []

    cache.invalidate(path)
    assert cache.classify(path) is ControlState.CONTROLLED
    assert len(invoker.calls) == 1


def test_lru_bound_evicts_oldest(workspace: Workspace, tmp_path: Path) -> None:
    cache = _cache(workspace, FakeInvoker(), max_entries=2)

    cache.set_control(tmp_path / "a", True)
    cache.set_control(tmp_path / "b", True)
    cache.classify(tmp_path / "a")  # refresh a
    cache.set_control(tmp_path / "c", True)

    assert len(cache) == 2
    assert cache.is_controlled(tmp_path / "a")
    assert cache.is_controlled(tmp_path / "c")


def test_max_entries_from_config(workspace: Workspace, monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("GITBRIDGE_status_cache__max_entries", "7")
    assert _cache(workspace, FakeInvoker()).max_entries == 7


def test_concurrent_classification(workspace: Workspace, tmp_path: Path) -> None:
    tracked = {f"f{i}.txt" for i in range(0, 40, 2)}
    invoker = FakeInvoker(responses={GitCommandKind.STATUS: _tracked_responder(tracked)})
    cache = _cache(workspace, invoker)
    errors = []

    def worker() -> None:
        for i in range(40):
            expected = ControlState.CONTROLLED if i % 2 == 0 else ControlState.NOT_CONTROLLED
            if cache.classify(tmp_path / f"f{i}.txt") is not expected:
                errors.append(i)

    threads = [threading.Thread(target=worker) for _ in range(4)]
    for t in threads:
        t.start()
    for t in threads:
        t.join()

    assert errors == []
    assert len(cache) == 40
