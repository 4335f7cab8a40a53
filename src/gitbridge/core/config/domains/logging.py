"""Domain-specific configuration for gitbridge logging."""
from __future__ import annotations

from functools import cached_property
from pathlib import Path
from typing import Optional

from ..base import BaseDomainConfig


class LoggingConfig(BaseDomainConfig):
    def _config_section(self) -> str:
        return "logging"

    @cached_property
    def level(self) -> str:
        return str(self.section.get("level", "INFO") or "INFO")

    @cached_property
    def path(self) -> Optional[Path]:
        """Log file path; relative paths resolve against the repository root."""
        raw = str(self.section.get("path", "") or "").strip()
        if not raw:
            return None
        p = Path(raw).expanduser()
        if not p.is_absolute() and self.repo_root is not None:
            p = Path(self.repo_root) / p
        return p

    @cached_property
    def format(self) -> str:
        return str(
            self.section.get("format") or "%(asctime)s %(levelname)s %(name)s: %(message)s"
        )


__all__ = ["LoggingConfig"]
