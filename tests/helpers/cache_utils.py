"""Cache reset utilities for test isolation."""
from __future__ import annotations


def reset_gitbridge_caches() -> None:
    from gitbridge.core.config import clear_all_caches
    from gitbridge.core.stdlib_logging import reset_stdlib_logging_for_tests
    from gitbridge.data import clear_caches
    from gitbridge.cli._dispatcher import discover_commands

    clear_all_caches()
    clear_caches()
    discover_commands.cache_clear()
    reset_stdlib_logging_for_tests()
