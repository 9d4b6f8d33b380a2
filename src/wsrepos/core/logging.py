"""Logging setup for wsrepos commands.

Modules log through ``logging.getLogger(__name__)`` and never configure
handlers themselves. A command run configures logging once:

- when ``.wsrepos/config.yaml`` sets ``logging.path``, records go to that
  file (relative to the repository root) instead of stderr, at
  ``logging.level``;
- with ``--json``, a NullHandler keeps rule warnings out of stderr so the
  error document stays parseable.
"""
from __future__ import annotations

import logging
import sys
from pathlib import Path

from wsrepos.core.utils.io import ensure_directory

LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"

_file_handler: logging.FileHandler | None = None
_null_handler: logging.NullHandler | None = None


def _level(name: str) -> int:
    level = logging.getLevelName(str(name).upper())
    return level if isinstance(level, int) else logging.INFO


def _drop_console_handlers(root: logging.Logger) -> None:
    # FileHandler subclasses StreamHandler; only stdout/stderr streams go.
    for handler in list(root.handlers):
        if isinstance(handler, logging.StreamHandler) and handler.stream in (sys.stdout, sys.stderr):
            root.removeHandler(handler)
            handler.close()


def configure_stdlib_logging(*, log_path: Path, level: str = "INFO") -> None:
    """Send wsrepos log records to ``log_path``.

    Calling it again with the same file is a no-op; a different file
    replaces the previous handler.
    """
    global _file_handler

    target = Path(log_path).resolve()
    if _file_handler is not None and Path(_file_handler.baseFilename) == target:
        return

    ensure_directory(target.parent)
    root = logging.getLogger()
    root.setLevel(_level(level))
    _drop_console_handlers(root)
    if _file_handler is not None:
        root.removeHandler(_file_handler)
        _file_handler.close()

    handler = logging.FileHandler(target, encoding="utf-8")
    handler.setLevel(_level(level))
    handler.setFormatter(logging.Formatter(LOG_FORMAT))
    root.addHandler(handler)
    _file_handler = handler


def suppress_lastresort_in_json_mode() -> None:
    """Keep ``logging.lastResort`` from printing warnings in ``--json`` runs.

    Only needed when the root logger has no handler of its own.
    """
    global _null_handler

    root = logging.getLogger()
    if root.handlers or _null_handler is not None:
        return
    _null_handler = logging.NullHandler()
    root.addHandler(_null_handler)


def reset_stdlib_logging_for_tests() -> None:
    """Remove the handlers installed by this module."""
    global _file_handler, _null_handler

    root = logging.getLogger()
    for handler in (_file_handler, _null_handler):
        if handler is not None:
            root.removeHandler(handler)
            handler.close()
    _file_handler = None
    _null_handler = None


__all__ = [
    "LOG_FORMAT",
    "configure_stdlib_logging",
    "reset_stdlib_logging_for_tests",
    "suppress_lastresort_in_json_mode",
]
