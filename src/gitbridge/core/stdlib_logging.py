from __future__ import annotations

import logging
import sys
from pathlib import Path
from typing import Optional

from gitbridge.core.config.domains.logging import LoggingConfig

_CONFIGURED_LOG_PATH: str | None = None
_FILE_HANDLER: logging.Handler | None = None
_CONSOLE_HANDLER: logging.Handler | None = None

DEFAULT_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"


def _level_from_name(name: str) -> int:
    level = logging.getLevelName(str(name).upper())
    return level if isinstance(level, int) else logging.INFO


def configure_stdlib_logging(*, log_path: Path, level: str = "INFO", fmt: str = DEFAULT_FORMAT) -> None:
    """Route Python stdlib logging to ``log_path``.

    Idempotent per-process: if already configured for the same file, no-op.
    """
    global _CONFIGURED_LOG_PATH, _FILE_HANDLER

    resolved = str(Path(log_path).resolve())
    if _CONFIGURED_LOG_PATH == resolved and _FILE_HANDLER is not None:
        return

    Path(resolved).parent.mkdir(parents=True, exist_ok=True)

    root = logging.getLogger()
    root.setLevel(_level_from_name(level))

    # Replace the handler we installed earlier when switching paths.
    if _FILE_HANDLER is not None:
        root.removeHandler(_FILE_HANDLER)
        _FILE_HANDLER.close()
        _FILE_HANDLER = None

    fh = logging.FileHandler(resolved, encoding="utf-8")
    fh.setLevel(_level_from_name(level))
    fh.setFormatter(logging.Formatter(fmt))
    root.addHandler(fh)

    _FILE_HANDLER = fh
    _CONFIGURED_LOG_PATH = resolved


def configure_console_logging(level: str = "WARNING", fmt: str = DEFAULT_FORMAT) -> None:
    """Install (once) a stderr handler on the root logger."""
    global _CONSOLE_HANDLER

    root = logging.getLogger()
    if _CONSOLE_HANDLER is None:
        _CONSOLE_HANDLER = logging.StreamHandler(sys.stderr)
        root.addHandler(_CONSOLE_HANDLER)
    _CONSOLE_HANDLER.setFormatter(logging.Formatter(fmt))
    _CONSOLE_HANDLER.setLevel(_level_from_name(level))
    if root.level == logging.NOTSET or root.level > _level_from_name(level):
        root.setLevel(_level_from_name(level))


def configure_from_config(repo_root: Optional[Path] = None, *, console_level: Optional[str] = None) -> None:
    """Apply the ``logging`` config section.

    A configured ``logging.path`` gets a file handler; ``console_level`` (used
    by the CLI ``--verbose`` flag) adds a stderr handler.
    """
    cfg = LoggingConfig(repo_root=repo_root)
    if cfg.path is not None:
        configure_stdlib_logging(log_path=cfg.path, level=cfg.level, fmt=cfg.format)
    if console_level:
        configure_console_logging(console_level, fmt=cfg.format)


def reset_stdlib_logging_for_tests() -> None:
    """Test-only: remove the handlers installed by this module."""
    global _CONFIGURED_LOG_PATH, _FILE_HANDLER, _CONSOLE_HANDLER
    root = logging.getLogger()
    for h in (_FILE_HANDLER, _CONSOLE_HANDLER):
        if h is not None:
            root.removeHandler(h)
            h.close()
    root.setLevel(logging.WARNING)
    _CONFIGURED_LOG_PATH = None
    _FILE_HANDLER = None
    _CONSOLE_HANDLER = None


__all__ = [
    "configure_stdlib_logging",
    "configure_console_logging",
    "configure_from_config",
    "reset_stdlib_logging_for_tests",
]
