from __future__ import annotations

import sys
import threading
import time
from pathlib import Path
from typing import Callable

import pytest

from gitbridge.core.config.domains.git import GitConfig
from gitbridge.core.exceptions import ExecutionError, ScannerStateError
from gitbridge.core.git.commands import GitCommandKind
from gitbridge.core.git.facade import GitCommands
from gitbridge.core.git.invalidation import DirtyScope, InvalidationBus, ScopeKind
from gitbridge.core.git.locking import WriteSerializer
from gitbridge.core.git.scanner import BackgroundScanner, ScannerRegistry, ScannerState
from gitbridge.core.workspace import Workspace

from helpers.fakes import FakeInvoker


def _wait_for(predicate: Callable[[], bool], timeout: float = 5.0) -> bool:
    deadline = time.monotonic() + timeout
    while time.monotonic() < deadline:
        if predicate():
            return True
        time.sleep(0.01)
    return predicate()


def _fake_factory(invoker: FakeInvoker):
    gate = WriteSerializer()

    def factory(root, interrupt=None):
        return GitCommands(root, invoker=invoker, serializer=gate, interrupt=interrupt)

    return factory


@pytest.fixture
def roots(tmp_path: Path):
    a, b = tmp_path / "a", tmp_path / "b"
    for r in (a, b):
        (r / ".git").mkdir(parents=True)
    return a, b


def test_check_replaces_snapshots_and_publishes(roots) -> None:
    a, b = roots
    invoker = FakeInvoker(
        responses={GitCommandKind.DIFF: "M\tx.py\n", GitCommandKind.STATUS: "new.txt\n"}
    )
    bus = InvalidationBus()
    received = []
    bus.subscribe(received.append)
    scanner = BackgroundScanner(
        Workspace("ws", [a, b]), bus, commands_factory=_fake_factory(invoker), interval=60, grace=0
    )

    bus.start()
    try:
        scanner.check()
        bus.join()
    finally:
        bus.stop(timeout=5)

    a_root = str(a).replace("\\", "/")
    assert scanner.uncached_files(a) == frozenset({f"{a_root}/x.py"})
    assert scanner.other_files(a) == frozenset({f"{a_root}/new.txt"})
    assert scanner.snapshot(b) is not None
    assert received == [DirtyScope.tree(a), DirtyScope.tree(b), DirtyScope.refresh()]
    assert scanner.cycles == 1


def test_unscanned_root_has_no_snapshot(roots) -> None:
    scanner = BackgroundScanner(Workspace("ws", [roots[0]]), InvalidationBus(), interval=60, grace=0)
    assert scanner.uncached_files(roots[0]) is None
    assert scanner.other_files(roots[0]) is None


def test_lifecycle(roots) -> None:
    scanner = BackgroundScanner(
        Workspace("ws", [roots[0]]), commands_factory=_fake_factory(FakeInvoker()), interval=60, grace=60
    )
    assert scanner.state is ScannerState.NEW

    scanner.start()
    scanner.start()  # idempotent while running
    assert scanner.running

    scanner.stop_running()
    assert scanner.join(timeout=5)
    assert scanner.state is ScannerState.STOPPED

    with pytest.raises(ScannerStateError):
        scanner.start()


def test_stop_wakes_waits_promptly(roots) -> None:
    invoker = FakeInvoker()
    scanner = BackgroundScanner(
        Workspace("ws", [roots[0]]), commands_factory=_fake_factory(invoker), interval=60, grace=60
    )
    scanner.start()
    assert _wait_for(lambda: len(invoker.calls) >= 2)

    start = time.monotonic()
    scanner.stop_running()
    assert scanner.join(timeout=5)
    assert time.monotonic() - start < 2
    # stopped during the grace wait: nothing was published
    assert scanner.cycles == 0


def test_stop_interrupts_running_git(roots) -> None:
    root = roots[0]
    (root / "diff").write_text("import time\nprint('partial', flush=True)\ntime.sleep(30)\n", encoding="utf-8")

    def factory(r, interrupt=None):
        cfg = GitConfig(repo_root=r, overrides={"executable": sys.executable})
        return GitCommands(r, cfg, interrupt=interrupt)

    scanner = BackgroundScanner(Workspace("ws", [root]), commands_factory=factory, interval=60, grace=0)
    scanner.start()
    time.sleep(0.5)

    start = time.monotonic()
    scanner.stop_running()
    assert scanner.join(timeout=10)
    assert time.monotonic() - start < 5
    assert scanner.snapshot(root) is None


def test_git_failures_do_not_end_the_loop(roots) -> None:
    invoker = FakeInvoker(responses={GitCommandKind.DIFF: ExecutionError("fatal: index.lock exists")})
    scanner = BackgroundScanner(
        Workspace("ws", [roots[0]]), commands_factory=_fake_factory(invoker), interval=0.01, grace=0
    )
    scanner.start()
    try:
        assert _wait_for(lambda: len(invoker.calls) >= 3)
        assert scanner.cycles == 0

        invoker.responses[GitCommandKind.DIFF] = "M\tx.py\n"
        assert _wait_for(lambda: scanner.cycles >= 1)
    finally:
        scanner.stop_running()
        scanner.join(timeout=5)


def test_unexpected_errors_are_logged_and_survived(roots, caplog: pytest.LogCaptureFixture) -> None:
    calls = []

    def factory(root, interrupt=None):
        calls.append(root)
        raise RuntimeError("boom")

    scanner = BackgroundScanner(Workspace("ws", [roots[0]]), commands_factory=factory, interval=0.01, grace=0)
    scanner.start()
    try:
        assert _wait_for(lambda: len(calls) >= 2)
    finally:
        scanner.stop_running()
        scanner.join(timeout=5)
    assert "unexpected error in background scan" in caplog.text


class TestRegistry:
    def test_get_instance_is_per_workspace(self, roots) -> None:
        registry = ScannerRegistry()
        ws1, ws2 = Workspace("one", [roots[0]]), Workspace("two", [roots[1]])

        s1 = registry.get_instance(ws1)
        assert registry.get_instance(ws1) is s1
        assert registry.get_instance(ws2) is not s1
        assert len(registry) == 2

        assert registry.remove_instance(ws1) is s1
        assert registry.remove_instance(ws1) is None
        assert registry.get_instance(ws1) is not s1

    def test_shutdown_stops_scanners(self, roots) -> None:
        def factory(ws, bus=None):
            return BackgroundScanner(ws, bus, commands_factory=_fake_factory(FakeInvoker()), interval=60, grace=60)

        registry = ScannerRegistry(factory)
        scanner = registry.get_instance(Workspace("one", [roots[0]]))
        scanner.start()

        registry.shutdown(timeout=5)

        assert scanner.state is ScannerState.STOPPED
        assert len(registry) == 0

    def test_concurrent_get_instance(self, roots) -> None:
        registry = ScannerRegistry()
        ws = Workspace("one", [roots[0]])
        results = []
        threads = [threading.Thread(target=lambda: results.append(registry.get_instance(ws))) for _ in range(8)]
        for t in threads:
            t.start()
        for t in threads:
            t.join()
        assert len({id(s) for s in results}) == 1


@pytest.mark.requires_git
def test_scans_a_real_repository(git_repo: Path) -> None:
    (git_repo / "README.md").write_text("changed\n", encoding="utf-8")
    (git_repo / "untracked.txt").write_text("x", encoding="utf-8")
    bus = InvalidationBus()
    kinds = []
    bus.subscribe(lambda s: kinds.append(s.kind))
    scanner = BackgroundScanner(Workspace("repo", [git_repo]), bus, interval=60, grace=0)

    bus.start()
    try:
        scanner.check()
        bus.join()
    finally:
        bus.stop(timeout=5)

    root = str(git_repo.absolute()).replace("\\", "/")
    assert scanner.uncached_files(git_repo) == frozenset({f"{root}/README.md"})
    assert f"{root}/untracked.txt" in scanner.other_files(git_repo)
    assert kinds == [ScopeKind.TREE, ScopeKind.REFRESH]
