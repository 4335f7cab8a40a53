"""Test helper modules for the gitbridge test suite.

- git_helpers: creating throwaway repositories with a fixed identity
- fakes: in-memory invoker doubles for deterministic unit tests
- cache_utils: cache reset utilities for test isolation
"""
from __future__ import annotations
