"""gitbridge core: configuration, logging and the git integration layer."""
from __future__ import annotations

from .exceptions import (
    CommandTimeoutError,
    ConfigError,
    ExecutionError,
    GitBridgeError,
    GitError,
    LaunchError,
    OutputLimitExceeded,
    ParseError,
    ScannerStateError,
)

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
