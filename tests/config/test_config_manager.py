from __future__ import annotations

import logging
from pathlib import Path

import pytest

from gitbridge.core.config import (
    ConfigManager,
    GitConfig,
    LoggingConfig,
    ScannerConfig,
    StatusCacheConfig,
    get_cached_config,
)
from gitbridge.core.exceptions import ConfigError
from gitbridge.core.stdlib_logging import configure_from_config


def _write(path: Path, text: str) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(text, encoding="utf-8")


def test_bundled_defaults(tmp_path: Path) -> None:
    cfg = GitConfig(repo_root=tmp_path)

    assert cfg.executable == "git"
    assert cfg.metadata_dir == ".git"
    assert cfg.metadata_env == "GIT_DIR"
    assert cfg.timeout_seconds == 300
    assert cfg.log_limit == 50
    assert cfg.empty_repository_markers == ["No HEAD commit to compare with"]
    assert ScannerConfig(repo_root=tmp_path).interval_seconds == 60
    assert ScannerConfig(repo_root=tmp_path).grace_seconds == 5
    assert StatusCacheConfig(repo_root=tmp_path).max_entries == 0


def test_layers_apply_in_precedence_order(tmp_path: Path) -> None:
    _write(Path.home() / ".gitbridge" / "config" / "git.yaml", "git:\n  log_limit: 10\n  executable: /opt/git\n")
    _write(tmp_path / ".gitbridge" / "config" / "git.yaml", "git:\n  log_limit: 20\n")
    _write(tmp_path / ".gitbridge" / "config.local" / "git.yaml", "git:\n  encoding: latin-1\n")

    cfg = GitConfig(repo_root=tmp_path)

    assert cfg.log_limit == 20
    assert cfg.executable == "/opt/git"
    assert cfg.encoding == "latin-1"
    assert cfg.timeout_seconds == 300


def test_environment_overrides_are_typed(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("GITBRIDGE_GIT__LOG_LIMIT", "7")
    monkeypatch.setenv("GITBRIDGE_GIT__WAIT_POLL_SECONDS", "0.5")
    monkeypatch.setenv("GITBRIDGE_GIT__EMPTY_REPOSITORY_MARKERS", '["a", "b"]')
    monkeypatch.setenv("GITBRIDGE_LOGGING__LEVEL", "DEBUG")

    cfg = ConfigManager(tmp_path).load_config()

    assert cfg["git"]["log_limit"] == 7
    assert cfg["git"]["wait_poll_seconds"] == 0.5
    assert cfg["git"]["empty_repository_markers"] == ["a", "b"]
    assert cfg["logging"]["level"] == "DEBUG"


def test_env_change_invalidates_cache(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    first = get_cached_config(tmp_path)
    assert get_cached_config(tmp_path) is first

    monkeypatch.setenv("GITBRIDGE_GIT__LOG_LIMIT", "3")
    assert get_cached_config(tmp_path)["git"]["log_limit"] == 3


def test_yaml_change_invalidates_cache(tmp_path: Path) -> None:
    target = tmp_path / ".gitbridge" / "config" / "scanner.yaml"
    _write(target, "scanner:\n  interval_seconds: 1\n")
    assert get_cached_config(tmp_path)["scanner"]["interval_seconds"] == 1

    _write(tmp_path / ".gitbridge" / "config" / "zz.yaml", "scanner:\n  interval_seconds: 2\n")
    assert get_cached_config(tmp_path)["scanner"]["interval_seconds"] == 2


def test_schema_violation_raises(tmp_path: Path) -> None:
    _write(tmp_path / ".gitbridge" / "config" / "git.yaml", "git:\n  log_limit: 0\n")

    with pytest.raises(ConfigError, match="git.log_limit"):
        ConfigManager(tmp_path).load_config()


def test_invalid_yaml_raises_config_error(tmp_path: Path) -> None:
    _write(tmp_path / ".gitbridge" / "config" / "git.yaml", "git: [unclosed\n")

    with pytest.raises(ConfigError, match="Failed to load configuration"):
        ConfigManager(tmp_path).load_config()


def test_non_mapping_yaml_raises_config_error(tmp_path: Path) -> None:
    _write(tmp_path / ".gitbridge" / "config" / "git.yaml", "- a\n- b\n")

    with pytest.raises(ConfigError):
        ConfigManager(tmp_path).load_config()


@pytest.mark.parametrize("raw", ["0", "null"])
def test_timeout_can_be_disabled(tmp_path: Path, raw: str) -> None:
    _write(tmp_path / ".gitbridge" / "config" / "git.yaml", f"git:\n  timeout_seconds: {raw}\n")
    assert GitConfig(repo_root=tmp_path).timeout_seconds is None


def test_in_memory_overrides(tmp_path: Path) -> None:
    cfg = GitConfig(repo_root=tmp_path, overrides={"timeout_seconds": 5, "executable": "/usr/bin/git"})

    assert cfg.timeout_seconds == 5
    assert cfg.executable == "/usr/bin/git"
    assert GitConfig(repo_root=tmp_path).executable == "git"


def test_logging_path_resolves_against_repo(tmp_path: Path) -> None:
    assert LoggingConfig(repo_root=tmp_path).path is None

    cfg = LoggingConfig(repo_root=tmp_path, overrides={"path": "logs/gitbridge.log"})
    assert cfg.path == tmp_path / "logs" / "gitbridge.log"


def test_configure_from_config_writes_log_file(tmp_path: Path) -> None:
    _write(tmp_path / ".gitbridge" / "config" / "logging.yaml", "logging:\n  path: out/gb.log\n  level: INFO\n")

    configure_from_config(tmp_path)
    logging.getLogger("gitbridge.test").info("hello from test")
    for handler in logging.getLogger().handlers:
        handler.flush()

    assert "hello from test" in (tmp_path / "out" / "gb.log").read_text(encoding="utf-8")
