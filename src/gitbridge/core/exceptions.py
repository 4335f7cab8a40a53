from __future__ import annotations

from typing import Any, Dict, Mapping, Optional, Sequence


class GitBridgeError(Exception):
    """Base exception for gitbridge."""

    context: Dict[str, Any]

    def __init__(self, message: str = "", *, context: Mapping[str, Any] | None = None) -> None:
        super().__init__(message)
        if context is not None:
            # Store a shallow copy to avoid accidental mutation.
            self.context = dict(context)
        else:
            self.context = {}

    def to_json_error(self) -> Dict[str, Any]:
        """Return a JSON-serializable error payload."""
        return {
            "message": str(self),
            "code": self.__class__.__name__,
            "context": self.context,
        }


class ConfigError(GitBridgeError, ValueError):
    """Raised when the merged configuration is invalid."""

    def __init__(self, message: str = "", *, context: Mapping[str, Any] | None = None) -> None:
        GitBridgeError.__init__(self, message, context=context)
        ValueError.__init__(self, message)


class GitError(GitBridgeError):
    """Base class for failures raised by the version-control layer."""

    def __init__(
        self,
        message: str = "",
        *,
        argv: Optional[Sequence[str]] = None,
        cwd: Optional[str] = None,
        context: Mapping[str, Any] | None = None,
    ) -> None:
        ctx = dict(context or {})
        if argv is not None:
            ctx["argv"] = list(argv)
        if cwd is not None:
            ctx["cwd"] = cwd
        super().__init__(message, context=ctx)


class LaunchError(GitError):
    """Raised when the git process cannot be started."""


class OutputLimitExceeded(GitError):
    """Raised when captured output grows past the configured ceiling."""


class ExecutionError(GitError):
    """Raised when git exits non-zero.

    The message is the full combined stdout/stderr text, which is the only
    diagnostic git gives us.
    """

    def __init__(
        self,
        output: str,
        *,
        returncode: Optional[int] = None,
        argv: Optional[Sequence[str]] = None,
        cwd: Optional[str] = None,
    ) -> None:
        ctx: Dict[str, Any] = {}
        if returncode is not None:
            ctx["returncode"] = returncode
        super().__init__(output, argv=argv, cwd=cwd, context=ctx)
        self.output = output
        self.returncode = returncode


class CommandTimeoutError(GitError, TimeoutError):
    """Raised when git did not finish within the configured timeout."""

    def __init__(
        self,
        message: str,
        *,
        timeout: float,
        output: str = "",
        argv: Optional[Sequence[str]] = None,
        cwd: Optional[str] = None,
    ) -> None:
        GitError.__init__(self, message, argv=argv, cwd=cwd, context={"timeout": timeout})
        self.timeout = timeout
        self.output = output


class ParseError(GitError):
    """Raised when git output does not match the expected structure."""


class ScannerStateError(GitBridgeError, RuntimeError):
    """Raised for illegal background scanner lifecycle transitions."""

    def __init__(self, message: str = "", *, context: Mapping[str, Any] | None = None) -> None:
        GitBridgeError.__init__(self, message, context=context)
        RuntimeError.__init__(self, message)


__all__ = [
    "GitBridgeError",
    "ConfigError",
    "GitError",
    "LaunchError",
    "OutputLimitExceeded",
    "ExecutionError",
    "CommandTimeoutError",
    "ParseError",
    "ScannerStateError",
]
