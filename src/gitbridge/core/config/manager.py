"""
gitbridge configuration management (layered YAML + environment overrides).
"""
from __future__ import annotations

import json
import logging
import os
import re
from pathlib import Path
from typing import Any, Dict, Iterator, List, Optional, Tuple, Union

import yaml
from jsonschema import Draft202012Validator

from gitbridge.core.exceptions import ConfigError
from gitbridge.core.utils.merge import deep_merge
from gitbridge.core.utils.yaml_io import merge_yaml_directory
from gitbridge.data import get_data_path, read_yaml as read_bundled_yaml

logger = logging.getLogger(__name__)

ENV_PREFIX = "GITBRIDGE_"
PROJECT_CONFIG_DIRNAME = ".gitbridge"


def get_project_config_dir(repo_root: Path) -> Path:
    return Path(repo_root) / PROJECT_CONFIG_DIRNAME


def get_user_config_dir() -> Path:
    return Path.home() / PROJECT_CONFIG_DIRNAME


class ConfigManager:
    """Load, merge, and validate gitbridge configuration.

    Configuration sources (highest to lowest priority):
    1. Environment variables: GITBRIDGE_<section>__<key>
    2. Project-local config: <repo>/.gitbridge/config.local/*.yaml (uncommitted)
    3. Project config: <repo>/.gitbridge/config/*.yaml
    4. User config: ~/.gitbridge/config/*.yaml
    5. Bundled defaults: gitbridge.data/config/*.yaml

    Files inside each directory are merged in alphabetical order.
    """

    def __init__(self, repo_root: Optional[Path] = None) -> None:
        self.repo_root = Path(repo_root) if repo_root is not None else self._find_repo_root()

        project_root_dir = get_project_config_dir(self.repo_root)

        self.core_config_dir = get_data_path("config")
        self.user_config_dir = get_user_config_dir() / "config"
        self.project_config_dir = project_root_dir / "config"
        self.project_local_config_dir = project_root_dir / "config.local"

    def _find_repo_root(self) -> Path:
        # Lazy import: git.paths is a sibling package that imports config lazily too.
        from gitbridge.core.git.paths import find_repository_root

        cwd = Path.cwd()
        return find_repository_root(cwd) or cwd

    def config_dirs(self) -> List[Path]:
        """Return the YAML directories in low→high precedence order."""
        return [
            self.core_config_dir,
            self.user_config_dir,
            self.project_config_dir,
            self.project_local_config_dir,
        ]

    # ========== Environment overrides ==========

    def _as_bool(self, v: str) -> Optional[bool]:
        low = v.strip().lower()
        if low in {"true", "false"}:
            return low == "true"
        return None

    def _as_int(self, v: str) -> Optional[int]:
        if re.fullmatch(r"[-+]?\d+", v.strip() or " "):
            return int(v)
        return None

    def _as_float(self, v: str) -> Optional[float]:
        s = v.strip()
        if re.fullmatch(r"[-+]?\d*\.\d+", s) or re.fullmatch(r"[-+]?\d+\.\d*", s):
            return float(s)
        return None

    def _as_json(self, v: str) -> Optional[Any]:
        s = v.strip()
        if (s.startswith("{") and s.endswith("}")) or (s.startswith("[") and s.endswith("]")):
            try:
                return json.loads(s)
            except ValueError:
                return None
        return None

    def _coerce_type(self, value: str) -> Any:
        for caster in (self._as_bool, self._as_int, self._as_float, self._as_json):
            result = caster(value)
            if result is not None:
                return result
        return value.strip()

    def _parse_env_key(self, raw: str) -> List[str]:
        segs = raw.split("__") if "__" in raw else raw.split("_")
        if any(seg == "" for seg in segs):
            return []
        # Lowercase so env overrides land on canonical keys.
        return [seg.lower() for seg in segs]

    def _iter_env_overrides(self) -> Iterator[Tuple[List[str], Any]]:
        for key in sorted(os.environ.keys()):
            if not key.startswith(ENV_PREFIX):
                continue
            path = self._parse_env_key(key[len(ENV_PREFIX):])
            if not path:
                logger.warning("Ignoring malformed configuration override %s", key)
                continue
            yield path, self._coerce_type(os.environ[key])

    def _set_nested(self, root: Dict[str, Any], path: List[str], value: Any) -> None:
        cur: Union[Dict[str, Any], Any] = root
        for part in path[:-1]:
            if not isinstance(cur, dict):
                raise ConfigError(f"Cannot apply override {'.'.join(path)}: path traverses a non-mapping")
            nxt = cur.get(part)
            if nxt is None:
                nxt = {}
                cur[part] = nxt
            cur = nxt
        if not isinstance(cur, dict):
            raise ConfigError(f"Cannot apply override {'.'.join(path)}: path traverses a non-mapping")
        cur[path[-1]] = value

    def apply_env_overrides(self, cfg: Dict[str, Any]) -> None:
        for path, typed_value in self._iter_env_overrides():
            self._set_nested(cfg, path, typed_value)

    # ========== Loading ==========

    def validate_schema(self, config: Dict[str, Any]) -> None:
        schema = read_bundled_yaml("schemas", "config.yaml")
        validator = Draft202012Validator(schema)
        errors = sorted(validator.iter_errors(config), key=lambda e: list(e.path))
        if errors:
            first = errors[0]
            where = ".".join(str(p) for p in first.path) or "<root>"
            raise ConfigError(
                f"Invalid configuration at {where}: {first.message}",
                context={"errors": [e.message for e in errors]},
            )

    def load_config(self, validate: bool = True) -> Dict[str, Any]:
        """Load and merge configuration from every layer (uncached).

        Args:
            validate: If True, validate the merged result against the bundled schema

        Returns:
            Merged configuration dictionary
        """
        cfg: Dict[str, Any] = {}
        for directory in self.config_dirs():
            try:
                cfg = merge_yaml_directory(cfg, directory)
            except (OSError, ValueError, yaml.YAMLError) as exc:
                raise ConfigError(f"Failed to load configuration from {directory}: {exc}") from exc

        self.apply_env_overrides(cfg)

        if validate:
            self.validate_schema(cfg)
        return cfg


def merge_overrides(cfg: Dict[str, Any], overrides: Optional[Dict[str, Any]]) -> Dict[str, Any]:
    """Return ``cfg`` with in-memory ``overrides`` deep-merged on top."""
    if not overrides:
        return cfg
    return deep_merge(cfg, overrides)


__all__ = [
    "ConfigManager",
    "get_project_config_dir",
    "get_user_config_dir",
    "merge_overrides",
]
