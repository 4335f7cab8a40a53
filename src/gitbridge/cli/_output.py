"""CLI output formatting.

Every command renders through :class:`OutputFormatter`, which supports a
human-readable text mode and a ``--json`` mode.
"""
from __future__ import annotations

import json
import sys
from typing import Any, Dict, Optional

from gitbridge.core.exceptions import GitBridgeError


class OutputFormatter:
    """Unified output formatter for CLI commands."""

    def __init__(self, json_mode: bool = False, indent: int = 2):
        self.json_mode = json_mode
        self.indent = indent

    def success(
        self,
        data: Dict[str, Any],
        message: str,
        *,
        status: str = "success",
    ) -> None:
        """Print ``message`` in text mode, ``{"status": ..., **data}`` in JSON mode."""
        if self.json_mode:
            output = {"status": status, **data}
            print(json.dumps(output, indent=self.indent, default=str))
        else:
            print(message)

    def error(
        self,
        error: Exception,
        message: Optional[str] = None,
        *,
        error_code: str = "error",
    ) -> None:
        """Report ``error`` on stderr.

        gitbridge errors carry a ``context`` mapping (argv, cwd, return
        code) that is included in JSON mode.
        """
        msg = message or str(error).strip() or error.__class__.__name__
        if self.json_mode:
            output: Dict[str, Any] = {
                "error": error_code,
                "message": msg,
            }
            if isinstance(error, GitBridgeError):
                payload = error.to_json_error()
                output["type"] = payload["code"]
                output["context"] = payload["context"]
            print(json.dumps(output, indent=self.indent, default=str), file=sys.stderr)
        else:
            print(f"Error: {msg}", file=sys.stderr)

    def json_output(self, data: Any) -> None:
        print(json.dumps(data, indent=self.indent, default=str))

    def text(self, message: str) -> None:
        print(message)

    def text_kv(self, key: str, value: Any, prefix: str = "  ") -> None:
        if not self.json_mode:
            print(f"{prefix}{key}: {value}")


__all__ = ["OutputFormatter"]
