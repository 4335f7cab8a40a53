"""Domain-specific configuration for the path classification cache."""
from __future__ import annotations

from functools import cached_property

from ..base import BaseDomainConfig


class StatusCacheConfig(BaseDomainConfig):
    def _config_section(self) -> str:
        return "status_cache"

    @cached_property
    def max_entries(self) -> int:
        """LRU bound on memoized paths; 0 keeps every entry."""
        return int(self.section.get("max_entries", 0) or 0)


__all__ = ["StatusCacheConfig"]
