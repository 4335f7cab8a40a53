"""Run git as a child process and capture its combined output.

This module provides the single execution path for every git call:
- Argument vectors come from :class:`GitCommandKind` (no shell, ever)
- stderr is merged into stdout; the combined text is the only diagnostic
- Output is captured into a doubling buffer with a hard ceiling
- An optional watchdog terminates the process group on timeout
- An optional interrupt event abandons the wait and yields an empty result
"""
from __future__ import annotations

import logging
import os
import signal
import subprocess
import threading
import time
from pathlib import Path
from typing import IO, Any, Dict, Iterable, Optional

from gitbridge.core.config.domains.git import GitConfig
from gitbridge.core.exceptions import (
    CommandTimeoutError,
    ExecutionError,
    LaunchError,
    OutputLimitExceeded,
)

from .commands import GitCommandKind

logger = logging.getLogger(__name__)


class OutputBuffer:
    """Byte buffer that doubles its capacity on overflow.

    Growth copies the bytes read so far into a buffer twice the size, so a
    capture of ``n`` bytes costs O(log n) reallocations. Growing past
    ``max_capacity`` raises :class:`OutputLimitExceeded`.
    """

    def __init__(self, initial_capacity: int, max_capacity: int) -> None:
        if initial_capacity <= 0:
            raise ValueError("initial_capacity must be positive")
        self._buf = bytearray(initial_capacity)
        self._size = 0
        self.max_capacity = max_capacity
        self.grow_count = 0

    @property
    def capacity(self) -> int:
        return len(self._buf)

    def __len__(self) -> int:
        return self._size

    def append(self, chunk: bytes) -> None:
        needed = self._size + len(chunk)
        while needed > len(self._buf):
            new_capacity = len(self._buf) * 2
            if new_capacity > self.max_capacity:
                raise OutputLimitExceeded(
                    f"git command output limit exceeded ({self.max_capacity} bytes), cannot process"
                )
            grown = bytearray(new_capacity)
            grown[: self._size] = memoryview(self._buf)[: self._size]
            self._buf = grown
            self.grow_count += 1
        self._buf[self._size:needed] = chunk
        self._size = needed

    def getvalue(self) -> bytes:
        return bytes(memoryview(self._buf)[: self._size])


def _popen_process_group_kwargs() -> dict[str, Any]:
    if os.name == "posix":
        return {"start_new_session": True}
    if os.name == "nt":
        creationflags = getattr(subprocess, "CREATE_NEW_PROCESS_GROUP", None)
        if isinstance(creationflags, int):
            return {"creationflags": creationflags}
    return {}


def _terminate_process_group(proc: subprocess.Popen[Any]) -> None:
    """SIGTERM the child's process group, escalating to SIGKILL."""
    if proc.poll() is not None:
        return
    if os.name == "posix":
        try:
            os.killpg(proc.pid, signal.SIGTERM)
        except OSError:
            proc.terminate()
        try:
            proc.wait(timeout=0.2)
            return
        except subprocess.TimeoutExpired:
            pass
        try:
            os.killpg(proc.pid, signal.SIGKILL)
        except OSError:
            proc.kill()
    else:
        proc.kill()
    try:
        proc.wait(timeout=0.2)
    except subprocess.TimeoutExpired:
        logger.warning("git process %s did not exit after SIGKILL", proc.pid)


class _Watchdog:
    """Ends the process group on timeout or when the interrupt event is set.

    Killing the child closes its end of the pipe, which unblocks the reader.
    """

    def __init__(
        self,
        proc: subprocess.Popen[Any],
        timeout: Optional[float],
        interrupt: Optional[threading.Event],
        poll: float,
    ) -> None:
        self.fired = False
        self.interrupted = False
        self._proc = proc
        self._done = threading.Event()
        self._thread: Optional[threading.Thread] = None
        if timeout is None and interrupt is None:
            return
        deadline = None if timeout is None else time.monotonic() + timeout
        self._thread = threading.Thread(
            target=self._watch, args=(deadline, interrupt, poll), name="gitbridge-watchdog", daemon=True
        )
        self._thread.start()

    def _watch(self, deadline: Optional[float], interrupt: Optional[threading.Event], poll: float) -> None:
        while True:
            step = poll if interrupt is not None else None
            if deadline is not None:
                remaining = max(0.0, deadline - time.monotonic())
                step = remaining if step is None else min(step, remaining)
            if self._done.wait(step):
                return
            if self._proc.poll() is not None:
                return
            if interrupt is not None and interrupt.is_set():
                self.interrupted = True
                _terminate_process_group(self._proc)
                return
            if deadline is not None and time.monotonic() >= deadline:
                self.fired = True
                _terminate_process_group(self._proc)
                return

    def cancel(self) -> None:
        self._done.set()


class ProcessInvoker:
    """Executes git commands for one repository root."""

    def __init__(
        self,
        root: Path,
        config: Optional[GitConfig] = None,
        *,
        interrupt: Optional[threading.Event] = None,
    ) -> None:
        self.root = Path(root)
        self.config = config if config is not None else GitConfig(repo_root=self.root)
        self.interrupt = interrupt

    def build_environment(self, kind: GitCommandKind) -> Dict[str, str]:
        """Inherit the host environment and make sure git finds the repository."""
        env = dict(os.environ)
        var = self.config.metadata_env
        if kind.binds_repository and not env.get(var):
            env[var] = str(self.root.absolute() / self.config.metadata_dir)
        return env

    def execute(
        self,
        kind: GitCommandKind,
        options: Optional[Iterable[Optional[str]]] = None,
        args: Optional[Iterable[Optional[str]]] = None,
        *,
        silent: bool = False,
    ) -> str:
        """Run one git command and return its combined output.

        Returns:
            The captured text as-is, or ``""`` when git printed nothing, when
            ``diff`` reports a repository without commits, or when the wait
            was interrupted.

        Raises:
            LaunchError: git could not be started
            OutputLimitExceeded: output grew past ``git.max_output_bytes``
            CommandTimeoutError: git ran longer than ``git.timeout_seconds``
            ExecutionError: git exited non-zero
        """
        cfg = self.config
        argv = kind.build_argv(cfg.executable, options, args)
        cwd = str(self.root)

        if not silent:
            logger.info("git %s", " ".join(argv[1:]))
        logger.debug("exec in %s: %s", cwd, argv)

        capacity = cfg.initial_buffer_bytes
        if kind.large_output:
            capacity *= cfg.large_output_multiplier
        buffer = OutputBuffer(capacity, cfg.max_output_bytes)

        try:
            proc = subprocess.Popen(
                argv,
                cwd=cwd,
                env=self.build_environment(kind),
                stdin=subprocess.DEVNULL,
                stdout=subprocess.PIPE,
                stderr=subprocess.STDOUT,
                **_popen_process_group_kwargs(),
            )
        except OSError as exc:
            raise LaunchError(f"Cannot run {cfg.executable}: {exc}", argv=argv, cwd=cwd) from exc

        watchdog = _Watchdog(proc, cfg.timeout_seconds, self.interrupt, cfg.wait_poll_seconds)
        try:
            if proc.stdout is not None:
                self._drain(proc.stdout, buffer, chunk_size=capacity)
            if not self._wait(proc):
                watchdog.interrupted = True
        finally:
            watchdog.cancel()
            if proc.stdout is not None:
                proc.stdout.close()
            _terminate_process_group(proc)

        if watchdog.interrupted:
            logger.debug("%s interrupted; returning empty output", argv)
            return ""

        if watchdog.fired:
            partial = buffer.getvalue().decode(cfg.encoding, errors="replace")
            raise CommandTimeoutError(
                f"git {kind.verb} timed out after {cfg.timeout_seconds}s",
                timeout=float(cfg.timeout_seconds or 0),
                output=partial,
                argv=argv,
                cwd=cwd,
            )

        if len(buffer) == 0:
            return ""
        output = buffer.getvalue().decode(cfg.encoding, errors="replace")

        if kind.tolerates_empty_repository and any(
            marker in output for marker in cfg.empty_repository_markers
        ):
            return ""

        if proc.returncode != 0:
            raise ExecutionError(output, returncode=proc.returncode, argv=argv, cwd=cwd)
        return output

    def _drain(self, stream: IO[bytes], buffer: OutputBuffer, *, chunk_size: int) -> None:
        read = getattr(stream, "read1", stream.read)
        while True:
            chunk = read(chunk_size)
            if not chunk:
                return
            buffer.append(chunk)

    def _wait(self, proc: subprocess.Popen[Any]) -> bool:
        """Block until ``proc`` exits; False when the interrupt event fired first."""
        if self.interrupt is None:
            proc.wait()
            return True
        poll = self.config.wait_poll_seconds
        while True:
            try:
                proc.wait(timeout=poll)
                return True
            except subprocess.TimeoutExpired:
                if self.interrupt.is_set():
                    return False


__all__ = ["OutputBuffer", "ProcessInvoker"]
