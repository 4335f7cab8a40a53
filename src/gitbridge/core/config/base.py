"""Base class for domain-specific configuration accessors.

Provides a standardized pattern for all domain configs with:
- Centralized caching via cache.py
- Consistent repo_root handling
- Optional in-memory overrides (handy for embedding hosts and tests)
"""
from __future__ import annotations

from abc import ABC, abstractmethod
from functools import cached_property
from pathlib import Path
from typing import Any, Dict, Mapping, Optional

from .cache import get_cached_config
from .manager import merge_overrides


class BaseDomainConfig(ABC):
    """Abstract base class for domain-specific configuration accessors.

    Usage:
        class MyConfig(BaseDomainConfig):
            def _config_section(self) -> str:
                return "my_section"

            @cached_property
            def my_setting(self) -> str:
                return self.section.get("my_setting", "default")

        cfg = MyConfig(repo_root=Path("/path/to/repo"))
        print(cfg.my_setting)
    """

    def __init__(
        self,
        repo_root: Optional[Path] = None,
        *,
        overrides: Optional[Mapping[str, Any]] = None,
    ) -> None:
        """Initialize domain config.

        Args:
            repo_root: Repository root path. Uses auto-detection if None.
            overrides: Values merged over this domain's section, e.g.
                ``{"timeout_seconds": 5}``.
        """
        self._repo_root = repo_root
        self._config = get_cached_config(repo_root=repo_root)
        self._overrides = dict(overrides or {})

    @property
    def repo_root(self) -> Optional[Path]:
        return self._repo_root

    @abstractmethod
    def _config_section(self) -> str:
        """Return the top-level config key for this domain."""
        ...

    @cached_property
    def section(self) -> Dict[str, Any]:
        """This domain's configuration section with overrides applied."""
        base = self._config.get(self._config_section(), {}) or {}
        return merge_overrides(dict(base), self._overrides)


__all__ = ["BaseDomainConfig"]
