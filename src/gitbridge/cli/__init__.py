"""
gitbridge CLI package.

Commands live in ``cli/commands/*.py`` and are discovered automatically;
each module exposes ``SUMMARY``, ``register_args(parser)`` and
``main(args) -> int``.
"""
from ._args import add_json_flag, add_repo_root_flag, add_standard_flags, add_verbose_flag
from ._output import OutputFormatter
from ._utils import get_repo_root, open_commands, resolve_path, setup_logging

__all__ = [
    # Output formatting
    "OutputFormatter",
    # Argument helpers
    "add_json_flag",
    "add_repo_root_flag",
    "add_verbose_flag",
    "add_standard_flags",
    # Utilities
    "get_repo_root",
    "open_commands",
    "resolve_path",
    "setup_logging",
]
