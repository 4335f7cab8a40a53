"""Background polling of uncached and untracked files.

A :class:`BackgroundScanner` runs one daemon thread per workspace. Every
cycle it asks git, per content root, which files differ from the index and
which are untracked, stores the answer as a :class:`ScanSnapshot`, waits a
short grace period and publishes dirty scopes so the host recomputes state.

Stopping is cooperative: the stop event wakes both waits and is handed to
every invoker as its interrupt, so an in-flight git call returns ``""``
instead of blocking shutdown.
"""
from __future__ import annotations

import logging
import threading
from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from typing import Callable, Dict, FrozenSet, Optional

from gitbridge.core.config.domains.scanner import ScannerConfig
from gitbridge.core.exceptions import GitBridgeError, GitError, ScannerStateError

from .facade import GitCommands
from .invalidation import DirtyScope, InvalidationBus

logger = logging.getLogger(__name__)

CommandsFactory = Callable[..., GitCommands]


class ScanInterrupted(GitBridgeError):
    """The current cycle was abandoned because the scanner is stopping."""


@dataclass(frozen=True)
class ScanSnapshot:
    uncached: FrozenSet[str] = frozenset()
    other: FrozenSet[str] = frozenset()


class ScannerState(str, Enum):
    NEW = "new"
    RUNNING = "running"
    STOPPED = "stopped"


class BackgroundScanner:
    """Periodic poller for one workspace. Stopped is terminal."""

    def __init__(
        self,
        workspace,
        bus: Optional[InvalidationBus] = None,
        *,
        config: Optional[ScannerConfig] = None,
        commands_factory: Optional[CommandsFactory] = None,
        interval: Optional[float] = None,
        grace: Optional[float] = None,
    ) -> None:
        self.workspace = workspace
        self._owns_bus = bus is None
        self.bus = bus if bus is not None else InvalidationBus(f"gitbridge-invalidation-{workspace.name}")
        cfg = config if config is not None else ScannerConfig(
            repo_root=workspace.content_roots[0] if workspace.content_roots else None
        )
        self.interval = cfg.interval_seconds if interval is None else float(interval)
        self.grace = cfg.grace_seconds if grace is None else float(grace)
        self._commands_factory: CommandsFactory = commands_factory or workspace.commands

        self.state = ScannerState.NEW
        self.cycles = 0
        self._stop = threading.Event()
        self._lock = threading.Lock()
        self._snapshots: Dict[Path, ScanSnapshot] = {}
        self._thread: Optional[threading.Thread] = None

    # ------------------------------------------------------------------
    # lifecycle
    # ------------------------------------------------------------------
    @property
    def running(self) -> bool:
        return self.state is ScannerState.RUNNING

    def start(self) -> None:
        """Start polling; a no-op while running, an error once stopped."""
        with self._lock:
            if self.state is ScannerState.RUNNING:
                return
            if self.state is ScannerState.STOPPED:
                raise ScannerStateError(
                    "Background scanner cannot be restarted after stop",
                    context={"workspace": self.workspace.name},
                )
            self.state = ScannerState.RUNNING
            self._thread = threading.Thread(
                target=self._run, name=f"gitbridge-scanner-{self.workspace.name}", daemon=True
            )
        if self._owns_bus:
            self.bus.start()
        self._thread.start()
        logger.debug("background scanner started for %s", self.workspace.name)

    def stop_running(self) -> None:
        """Ask the loop to end; does not wait for it."""
        with self._lock:
            self.state = ScannerState.STOPPED
        self._stop.set()

    def join(self, timeout: Optional[float] = None) -> bool:
        """Wait for the scanner thread; True when it has exited."""
        thread = self._thread
        if thread is not None:
            thread.join(timeout)
            if thread.is_alive():
                return False
        if self._owns_bus:
            self.bus.stop(timeout)
        return True

    # ------------------------------------------------------------------
    # snapshot access
    # ------------------------------------------------------------------
    def snapshot(self, root) -> Optional[ScanSnapshot]:
        with self._lock:
            return self._snapshots.get(Path(root))

    def uncached_files(self, root) -> Optional[FrozenSet[str]]:
        """Paths last reported as modified but not staged; None before the first scan of ``root``."""
        snap = self.snapshot(root)
        return None if snap is None else snap.uncached

    def other_files(self, root) -> Optional[FrozenSet[str]]:
        snap = self.snapshot(root)
        return None if snap is None else snap.other

    # ------------------------------------------------------------------
    # loop
    # ------------------------------------------------------------------
    def _run(self) -> None:
        while not self._stop.is_set():
            try:
                self.check()
            except ScanInterrupted:
                logger.debug("scan of %s interrupted", self.workspace.name)
            except GitError as exc:
                logger.warning("background scan of %s failed: %s", self.workspace.name, exc)
            except Exception:
                logger.exception("unexpected error in background scan of %s", self.workspace.name)
            if self._stop.wait(self.interval):
                break
        logger.debug("background scanner for %s exited", self.workspace.name)

    def check(self) -> None:
        """Run one scan cycle over every content root."""
        roots = list(self.workspace.content_roots)
        for root in roots:
            if self._stop.is_set():
                raise ScanInterrupted("Check interrupted")
            commands = self._commands_factory(root, interrupt=self._stop)
            uncached = commands.uncached_files()
            other = commands.other_files()
            # An interrupted invocation yields empty output; keep the last good snapshot.
            if self._stop.is_set():
                raise ScanInterrupted("Check interrupted")
            snap = ScanSnapshot(frozenset(uncached), frozenset(other))
            with self._lock:
                self._snapshots[root] = snap

        if self._stop.wait(self.grace):
            raise ScanInterrupted("Check interrupted")

        for root in roots:
            self.bus.publish(DirtyScope.tree(root))
        self.bus.publish(DirtyScope.refresh())
        self.cycles += 1


class ScannerRegistry:
    """One scanner per workspace, created on demand."""

    def __init__(self, factory: Optional[Callable[..., BackgroundScanner]] = None) -> None:
        self._factory = factory or BackgroundScanner
        self._instances: Dict[int, BackgroundScanner] = {}
        self._lock = threading.Lock()

    def get_instance(self, workspace, bus: Optional[InvalidationBus] = None) -> BackgroundScanner:
        with self._lock:
            scanner = self._instances.get(id(workspace))
            if scanner is None or scanner.workspace is not workspace:
                scanner = self._factory(workspace, bus)
                self._instances[id(workspace)] = scanner
            return scanner

    def remove_instance(self, workspace) -> Optional[BackgroundScanner]:
        """Forget the workspace's scanner without stopping it."""
        with self._lock:
            scanner = self._instances.get(id(workspace))
            if scanner is not None and scanner.workspace is workspace:
                del self._instances[id(workspace)]
                return scanner
            return None

    def shutdown(self, timeout: Optional[float] = None) -> None:
        """Stop and join every registered scanner."""
        with self._lock:
            scanners = list(self._instances.values())
            self._instances.clear()
        for scanner in scanners:
            scanner.stop_running()
        for scanner in scanners:
            if not scanner.join(timeout):
                logger.warning("scanner for %s did not stop within %ss", scanner.workspace.name, timeout)

    def __len__(self) -> int:
        with self._lock:
            return len(self._instances)


__all__ = [
    "ScanInterrupted",
    "ScanSnapshot",
    "ScannerState",
    "BackgroundScanner",
    "ScannerRegistry",
]
