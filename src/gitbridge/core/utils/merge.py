"""Dictionary merging used by the layered configuration loader.

Arrays follow override semantics:
  - Default: the overriding layer replaces the array
  - First element "+": append the remaining items to the base array
  - First element "=": explicit replace
"""
from __future__ import annotations

from typing import Any, Dict, List


def deep_merge(base: Dict[str, Any], override: Dict[str, Any]) -> Dict[str, Any]:
    """Recursively merge ``override`` into ``base`` without mutating either.

    Example:
        >>> deep_merge({"git": {"log_limit": 50}}, {"git": {"executable": "git2"}})
        {'git': {'log_limit': 50, 'executable': 'git2'}}
    """
    result: Dict[str, Any] = dict(base)
    for key, value in (override or {}).items():
        current = result.get(key)
        if isinstance(current, dict) and isinstance(value, dict):
            result[key] = deep_merge(current, value)
        elif isinstance(current, list) and isinstance(value, list):
            result[key] = merge_arrays(current, value)
        else:
            result[key] = value
    return result


def merge_arrays(base: List[Any], override: List[Any]) -> List[Any]:
    """Merge two config arrays.

    Example:
        >>> merge_arrays(["a"], ["+", "b"])
        ['a', 'b']
        >>> merge_arrays(["a"], ["b"])
        ['b']
    """
    if not override:
        return base
    head = override[0]
    if isinstance(head, str):
        if head == "+":
            return [*base, *override[1:]]
        if head == "=":
            return list(override[1:])
    return list(override)


__all__ = ["deep_merge", "merge_arrays"]
