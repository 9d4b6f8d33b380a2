"""Dependency manifest parsers.

Supported formats:
- go.mod (checksums from the sibling go.sum)
- Gopkg.lock (dep)
- *.lock.yaml / *.yaml (wsrepos lock file)
"""
from __future__ import annotations

from pathlib import Path

from wsrepos.core.manifests.base import (
    ManifestParser,
    get_parser_for,
    register_parser,
)
from wsrepos.core.manifests.go_mod import GoModParser
from wsrepos.core.manifests.gopkg_lock import GopkgLockParser
from wsrepos.core.manifests.yaml_lock import YamlLockParser
from wsrepos.core.repos.models import ManifestResult


def _register_builtin_parsers() -> None:
    register_parser(GoModParser())
    register_parser(GopkgLockParser())
    register_parser(YamlLockParser())


_register_builtin_parsers()


def parse_manifest(path: Path | str) -> ManifestResult:
    """Parse a manifest with the parser registered for its file name.

    Raises:
        LoadError: If the format is unsupported or the file is invalid
    """
    path = Path(path)
    return get_parser_for(path).parse(path)


__all__ = [
    "ManifestParser",
    "GoModParser",
    "GopkgLockParser",
    "YamlLockParser",
    "get_parser_for",
    "parse_manifest",
    "register_parser",
]
