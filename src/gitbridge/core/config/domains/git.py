"""Domain-specific configuration for git invocation.

Provides cached access to the executable, output-capture limits and
timeouts used by the process invoker and the command facade.
"""
from __future__ import annotations

from functools import cached_property
from typing import List, Optional

from ..base import BaseDomainConfig


class GitConfig(BaseDomainConfig):
    """Typed accessor for the ``git`` configuration section."""

    def _config_section(self) -> str:
        return "git"

    @cached_property
    def executable(self) -> str:
        return str(self.section.get("executable") or "git")

    @cached_property
    def metadata_dir(self) -> str:
        """Name of git's control directory (``.git``)."""
        return str(self.section.get("metadata_dir") or ".git")

    @cached_property
    def metadata_env(self) -> str:
        """Environment variable that designates the control directory."""
        return str(self.section.get("metadata_env") or "GIT_DIR")

    @cached_property
    def encoding(self) -> str:
        return str(self.section.get("encoding") or "utf-8")

    @cached_property
    def initial_buffer_bytes(self) -> int:
        return int(self.section.get("initial_buffer_bytes", 16 * 1024))

    @cached_property
    def large_output_multiplier(self) -> int:
        return int(self.section.get("large_output_multiplier", 8))

    @cached_property
    def max_output_bytes(self) -> int:
        return int(self.section.get("max_output_bytes", 128 * 1024 * 1024))

    @cached_property
    def timeout_seconds(self) -> Optional[float]:
        """Process timeout; ``None`` when disabled (unset or 0)."""
        raw = self.section.get("timeout_seconds")
        if raw is None:
            return None
        value = float(raw)
        return value if value > 0 else None

    @cached_property
    def wait_poll_seconds(self) -> float:
        return float(self.section.get("wait_poll_seconds", 0.05))

    @cached_property
    def log_limit(self) -> int:
        return int(self.section.get("log_limit", 50))

    @cached_property
    def empty_repository_markers(self) -> List[str]:
        markers = self.section.get("empty_repository_markers") or []
        return [str(m) for m in markers if str(m).strip()]


__all__ = ["GitConfig"]
