"""Go language support for update-repos."""
from __future__ import annotations

from wsrepos.language.go.config import GO, GoConfig, GoLanguage

__all__ = ["GO", "GoConfig", "GoLanguage"]
