"""Centralized configuration caching.

All domain configs load through :func:`get_cached_config` so a long-running
process (for example a background scanner polling every minute) does not
re-read YAML on every git invocation.
"""
from __future__ import annotations

import hashlib
import os
import threading
from pathlib import Path
from typing import Any, Dict, List, Optional, Tuple

from gitbridge.core.utils.yaml_io import iter_yaml_files

_config_cache: Dict[str, Dict[str, Any]] = {}
_cache_lock = threading.Lock()


def _normalize_repo_root(repo_root: Optional[Path]) -> Path:
    if repo_root is None:
        from .manager import ConfigManager

        return ConfigManager().repo_root.expanduser().resolve()
    return Path(repo_root).expanduser().resolve()


def _fingerprint_dir(d: Path) -> List[Tuple[str, int, int]]:
    files: List[Tuple[str, int, int]] = []
    for p in iter_yaml_files(d):
        try:
            st = p.stat()
            files.append((p.name, int(st.st_mtime_ns), int(st.st_size)))
        except OSError:
            files.append((p.name, 0, 0))
    return files


def _cache_key(repo_root: Path) -> str:
    """Build a cache key that changes when env overrides or YAML files change."""
    from .manager import ENV_PREFIX, ConfigManager

    env_items = sorted((k, v) for k, v in os.environ.items() if k.startswith(ENV_PREFIX))
    env_fp = hashlib.sha256(repr(env_items).encode("utf-8")).hexdigest()[:12]

    mgr = ConfigManager(repo_root)
    cfg_files = [_fingerprint_dir(d) for d in mgr.config_dirs()[1:]]
    cfg_fp = hashlib.sha256(repr(cfg_files).encode("utf-8")).hexdigest()[:12]

    return f"{repo_root}:env={env_fp}:cfg={cfg_fp}"


def get_cached_config(repo_root: Optional[Path] = None, validate: bool = True) -> Dict[str, Any]:
    """Get configuration with caching.

    Returns the same config dict instance for the same repo_root while
    neither the environment overrides nor the YAML layers change.
    """
    from .manager import ConfigManager

    normalized_root = _normalize_repo_root(repo_root)
    key = _cache_key(normalized_root)

    with _cache_lock:
        cached = _config_cache.get(key)
    if cached is not None:
        return cached

    cfg = ConfigManager(normalized_root).load_config(validate=validate)
    with _cache_lock:
        return _config_cache.setdefault(key, cfg)


def clear_all_caches() -> None:
    """Drop every cached configuration (used by tests and config reloads)."""
    with _cache_lock:
        _config_cache.clear()


__all__ = ["get_cached_config", "clear_all_caches"]
