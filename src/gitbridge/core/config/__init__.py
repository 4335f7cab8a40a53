"""Layered YAML configuration for gitbridge."""
from __future__ import annotations

from .base import BaseDomainConfig
from .cache import clear_all_caches, get_cached_config
from .domains import GitConfig, LoggingConfig, ScannerConfig, StatusCacheConfig
from .manager import ConfigManager

__all__ = [
    "BaseDomainConfig",
    "ConfigManager",
    "GitConfig",
    "LoggingConfig",
    "ScannerConfig",
    "StatusCacheConfig",
    "clear_all_caches",
    "get_cached_config",
]
