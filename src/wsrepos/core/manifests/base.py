"""Manifest parser interface and registry.

A manifest parser turns a dependency lock file into desired repositories.
Parsers are looked up by the manifest's file name.
"""
from __future__ import annotations

from abc import ABC, abstractmethod
from pathlib import Path

from wsrepos.core.exceptions import LoadError
from wsrepos.core.repos.models import ManifestResult
from wsrepos.core.utils.io import read_text


class ManifestParser(ABC):
    """Base class for manifest parsers."""

    format_name: str = ""

    @abstractmethod
    def matches(self, path: Path) -> bool:
        """Return True if this parser understands ``path``."""
        ...

    @abstractmethod
    def parse(self, path: Path) -> ManifestResult:
        """Parse ``path`` into desired repositories.

        Raises:
            LoadError: If the file can't be read or is not a valid manifest
        """
        ...

    def read(self, path: Path) -> str:
        try:
            return read_text(path)
        except FileNotFoundError as exc:
            raise LoadError(f"{path}: file not found", path=str(path)) from exc
        except (OSError, UnicodeDecodeError) as exc:
            raise LoadError(f"{path}: {exc}", path=str(path)) from exc


_PARSER_REGISTRY: dict[str, ManifestParser] = {}


def register_parser(parser: ManifestParser) -> None:
    """Register a manifest parser.

    Args:
        parser: Parser instance; replaces any parser with the same format name
    """
    name = parser.format_name.strip()
    if not name:
        raise ValueError(f"Cannot register parser {type(parser).__name__} with empty format_name")
    _PARSER_REGISTRY[name] = parser


def get_parser_for(path: Path) -> ManifestParser:
    """Return the parser for ``path``.

    Raises:
        LoadError: If no registered parser understands the file
    """
    for parser in _PARSER_REGISTRY.values():
        if parser.matches(path):
            return parser
    supported = ", ".join(sorted(_PARSER_REGISTRY)) or "none"
    raise LoadError(
        f"{path}: unsupported manifest file (supported formats: {supported})",
        path=str(path),
    )


__all__ = ["ManifestParser", "register_parser", "get_parser_for"]
