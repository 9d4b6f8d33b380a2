"""Repository data models.

Provides immutable dataclasses for repositories found in build files,
repositories requested by the user or a manifest, and run results.
"""
from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

from wsrepos.core.exceptions import ResolutionWarning


@dataclass(frozen=True, slots=True)
class RepositoryDescriptor:
    """A go_repository rule as seen by the reconciler.

    Attributes:
        name: Rule name; unique within one run
        source_coordinate: Go import path (the ``importpath`` attribute)
        checksum: Module checksum (``sum``), "" when unset
        resolved_version: Normalized version (see ``normalize_version``)
    """

    name: str
    source_coordinate: str
    checksum: str = ""
    resolved_version: str = ""

    def to_dict(self) -> dict[str, Any]:
        """Serialize to dictionary."""
        return {
            "name": self.name,
            "source_coordinate": self.source_coordinate,
            "checksum": self.checksum,
            "resolved_version": self.resolved_version,
        }


@dataclass(frozen=True, slots=True)
class KnownRepo:
    """Import-path ownership record used by dependency resolution.

    Attributes:
        name: Rule name
        go_prefix: Import path prefix served by the repository
        remote: VCS remote override, if any
        vcs: VCS type override (``git``, ``hg``...), if any
    """

    name: str
    go_prefix: str
    remote: str = ""
    vcs: str = ""


@dataclass(frozen=True, slots=True)
class DesiredRepository:
    """A repository that should be declared after the run.

    Only ``source_coordinate`` is required. Empty strings mean "not known";
    they never overwrite existing attribute values.
    """

    source_coordinate: str
    name: str = ""
    checksum: str = ""
    version: str = ""
    commit: str = ""
    remote: str = ""
    vcs: str = ""
    replace: str = ""

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> DesiredRepository:
        """Create from a manifest entry dictionary."""
        return cls(
            source_coordinate=str(data.get("importpath") or data.get("source_coordinate") or ""),
            name=str(data.get("name") or ""),
            checksum=str(data.get("sum") or data.get("checksum") or ""),
            version=str(data.get("version") or ""),
            commit=str(data.get("commit") or ""),
            remote=str(data.get("remote") or ""),
            vcs=str(data.get("vcs") or ""),
            replace=str(data.get("replace") or ""),
        )


@dataclass(frozen=True, slots=True)
class ManifestResult:
    """Repositories read from a manifest plus the entries that were skipped."""

    repos: tuple[DesiredRepository, ...] = ()
    warnings: tuple[ResolutionWarning, ...] = ()


@dataclass(slots=True)
class ReconcileResult:
    """Outcome of one reconciliation.

    Attributes:
        inserted: Names of rules added to the destination
        updated: Names of existing rules whose attributes changed
        unchanged: Names of matched rules that already matched
        removed: Names of rules deleted by pruning
        warnings: Non-fatal problems encountered
    """

    inserted: list[str] = field(default_factory=list)
    updated: list[str] = field(default_factory=list)
    unchanged: list[str] = field(default_factory=list)
    removed: list[str] = field(default_factory=list)
    warnings: list[ResolutionWarning] = field(default_factory=list)

    @property
    def changed(self) -> bool:
        return bool(self.inserted or self.updated or self.removed)

    def to_dict(self) -> dict[str, Any]:
        """Serialize to dictionary."""
        return {
            "inserted": list(self.inserted),
            "updated": list(self.updated),
            "unchanged": list(self.unchanged),
            "removed": list(self.removed),
            "warnings": [w.to_json_error() for w in self.warnings],
        }


__all__ = [
    "RepositoryDescriptor",
    "KnownRepo",
    "DesiredRepository",
    "ManifestResult",
    "ReconcileResult",
]
