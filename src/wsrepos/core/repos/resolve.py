"""Resolution of command-line import paths into desired repositories.

Resolution proper (querying a module proxy or a VCS for the latest
version and its checksum) is left to :class:`RepoResolver`
implementations. The default :class:`PassthroughResolver` returns records
unchanged, so import paths given without a version are declared without
one.
"""
from __future__ import annotations

from typing import Protocol, runtime_checkable

from wsrepos.core.repos.models import DesiredRepository


@runtime_checkable
class RepoResolver(Protocol):
    """Completes a desired repository (version, checksum, remote...)."""

    def resolve(self, repo: DesiredRepository) -> DesiredRepository:
        ...


class PassthroughResolver:
    """Resolver that trusts its input."""

    def resolve(self, repo: DesiredRepository) -> DesiredRepository:
        return repo


def parse_import_path_arg(arg: str) -> DesiredRepository:
    """Parse a positional ``import-path[@version]`` argument.

    >>> parse_import_path_arg("example.com/pkg@v1.2.0").version
    'v1.2.0'
    >>> parse_import_path_arg("example.com/pkg").source_coordinate
    'example.com/pkg'
    """
    path, sep, version = arg.rpartition("@")
    if not sep:
        return DesiredRepository(source_coordinate=arg)
    return DesiredRepository(source_coordinate=path, version=version)


__all__ = ["PassthroughResolver", "RepoResolver", "parse_import_path_arg"]
