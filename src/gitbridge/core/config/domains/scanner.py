"""Domain-specific configuration for the background status scanner."""
from __future__ import annotations

from functools import cached_property

from ..base import BaseDomainConfig


class ScannerConfig(BaseDomainConfig):
    def _config_section(self) -> str:
        return "scanner"

    @cached_property
    def interval_seconds(self) -> float:
        """Pause between two scan cycles."""
        return float(self.section.get("interval_seconds", 60))

    @cached_property
    def grace_seconds(self) -> float:
        """Settle time between scanning the roots and publishing invalidations."""
        return float(self.section.get("grace_seconds", 5))


__all__ = ["ScannerConfig"]
