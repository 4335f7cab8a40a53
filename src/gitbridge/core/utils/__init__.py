"""Shared helpers for gitbridge core."""
from __future__ import annotations

from .merge import deep_merge, merge_arrays
from .yaml_io import iter_yaml_files, merge_yaml_directory, read_yaml

__all__ = [
    "deep_merge",
    "merge_arrays",
    "iter_yaml_files",
    "merge_yaml_directory",
    "read_yaml",
]
