"""CLI output formatting.

Every command prints through :class:`OutputFormatter`, which writes either
human-readable text or a single JSON document.
"""
from __future__ import annotations

import json
import sys
from typing import Any, Optional

from wsrepos.core.exceptions import WsReposError


class OutputFormatter:
    """Unified output formatter for CLI commands."""

    def __init__(self, json_mode: bool = False, indent: int = 2):
        """Initialize formatter.

        Args:
            json_mode: If True, output JSON; otherwise output text
            indent: JSON indentation level
        """
        self.json_mode = json_mode
        self.indent = indent

    def error(
        self,
        error: Exception,
        message: Optional[str] = None,
        *,
        hint: Optional[str] = None,
    ) -> None:
        """Output error result to stderr.

        Args:
            error: The exception that occurred
            message: Optional human-readable message (defaults to str(error))
            hint: Extra line printed after the message in text mode
        """
        msg = message or str(error)
        if self.json_mode:
            if isinstance(error, WsReposError):
                output = {"status": "error", **error.to_json_error()}
                output["message"] = msg
            else:
                output = {"status": "error", "code": type(error).__name__, "message": msg}
            print(json.dumps(output, indent=self.indent, default=str), file=sys.stderr)
        else:
            print(f"Error: {msg}", file=sys.stderr)
            if hint:
                print(hint, file=sys.stderr)

    def warning(self, message: str) -> None:
        """Output a warning line to stderr (text mode only)."""
        if not self.json_mode:
            print(f"Warning: {message}", file=sys.stderr)

    def json_output(self, data: Any) -> None:
        """Output raw JSON data.

        Args:
            data: Data to serialize as JSON
        """
        print(json.dumps(data, indent=self.indent, default=str))

    def text(self, message: str) -> None:
        """Output plain text message."""
        if not self.json_mode:
            print(message)

    def text_kv(self, key: str, value: Any, prefix: str = "  ") -> None:
        """Output key-value pair in text mode.

        Args:
            key: Key name
            value: Value to display
            prefix: Line prefix (default: two spaces for indentation)
        """
        if not self.json_mode:
            print(f"{prefix}{key}: {value}")


__all__ = ["OutputFormatter"]
