"""Typed accessors for each configuration section."""
from __future__ import annotations

from .git import GitConfig
from .logging import LoggingConfig
from .scanner import ScannerConfig
from .status_cache import StatusCacheConfig

__all__ = [
    "GitConfig",
    "LoggingConfig",
    "ScannerConfig",
    "StatusCacheConfig",
]
