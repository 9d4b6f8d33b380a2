from __future__ import annotations

from typing import Any, Dict, Mapping


class WsReposError(Exception):
    """Base exception for wsrepos."""

    context: Dict[str, Any]
    exit_code: int = 1

    def __init__(self, message: str = "", *, context: Mapping[str, Any] | None = None) -> None:
        super().__init__(message)
        if context is not None:
            # Store a shallow copy to avoid accidental mutation.
            self.context = dict(context)
        else:
            self.context = {}

    def to_json_error(self) -> Dict[str, Any]:
        """Return a JSON-serializable error payload."""
        return {
            "message": str(self),
            "code": self.__class__.__name__,
            "context": self.context,
        }


class ConfigurationError(WsReposError, ValueError):
    """Raised when flags or project settings are invalid."""

    exit_code = 2

    def __init__(self, message: str = "", *, context: Mapping[str, Any] | None = None) -> None:
        WsReposError.__init__(self, message, context=context)
        ValueError.__init__(self, message)


class UsageError(ConfigurationError):
    """Raised for an invalid combination of flags and positional arguments."""


class FlagFormatError(ConfigurationError):
    """Raised when a single flag value is malformed."""

    def __init__(self, message: str, *, value: str, flag: str | None = None) -> None:
        ctx: Dict[str, Any] = {"value": value}
        if flag:
            ctx["flag"] = flag
        super().__init__(message, context=ctx)
        self.value = value


class LoadError(WsReposError):
    """Raised when a build file or manifest cannot be read or parsed."""

    def __init__(
        self,
        message: str,
        *,
        path: str | None = None,
        line: int | None = None,
        context: Mapping[str, Any] | None = None,
    ) -> None:
        ctx = dict(context or {})
        if path:
            ctx["path"] = path
        if line:
            ctx["line"] = line
        super().__init__(message, context=ctx)
        self.path = path
        self.line = line


class SaveError(WsReposError):
    """Raised when an updated build file cannot be written back."""

    def __init__(self, message: str, *, path: str | None = None) -> None:
        super().__init__(message, context={"path": path} if path else None)
        self.path = path


class ResolutionWarning(WsReposError):
    """A single manifest entry or existing rule that could not be used.

    Never raised by wsrepos itself: instances are collected, logged and
    reported alongside the result while processing continues.
    """

    def __init__(self, message: str, *, subject: str = "", source: str = "") -> None:
        ctx: Dict[str, Any] = {}
        if subject:
            ctx["subject"] = subject
        if source:
            ctx["source"] = source
        super().__init__(message, context=ctx)
        self.subject = subject
        self.source = source


__all__ = [
    "WsReposError",
    "ConfigurationError",
    "UsageError",
    "FlagFormatError",
    "LoadError",
    "SaveError",
    "ResolutionWarning",
]
