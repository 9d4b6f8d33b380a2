"""dep's Gopkg.lock manifests."""
from __future__ import annotations

import logging
import tomllib
from pathlib import Path

from wsrepos.core.exceptions import LoadError, ResolutionWarning
from wsrepos.core.manifests.base import ManifestParser
from wsrepos.core.repos.models import DesiredRepository, ManifestResult

logger = logging.getLogger(__name__)


class GopkgLockParser(ManifestParser):
    """Parser for Gopkg.lock files.

    Each ``[[projects]]`` entry becomes a repository pinned to its
    ``revision``; a ``source`` override becomes a git ``remote``.
    """

    format_name = "Gopkg.lock"

    def matches(self, path: Path) -> bool:
        return path.name == "Gopkg.lock"

    def parse(self, path: Path) -> ManifestResult:
        try:
            data = tomllib.loads(self.read(path))
        except tomllib.TOMLDecodeError as exc:
            raise LoadError(f"{path}: {exc}", path=str(path)) from exc

        projects = data.get("projects", [])
        if not isinstance(projects, list):
            raise LoadError(f"{path}: 'projects' must be an array of tables", path=str(path))

        repos: list[DesiredRepository] = []
        warnings: list[ResolutionWarning] = []
        for index, project in enumerate(projects):
            name = str(project.get("name") or "") if isinstance(project, dict) else ""
            if not name:
                warnings.append(
                    ResolutionWarning(
                        f"projects[{index}]: missing name",
                        subject=f"projects[{index}]",
                        source=str(path),
                    )
                )
                continue
            revision = str(project.get("revision") or "")
            if not revision:
                warnings.append(
                    ResolutionWarning(f"{name}: no revision; commit left unset", subject=name, source=str(path))
                )
            source = str(project.get("source") or "")
            repos.append(
                DesiredRepository(
                    source_coordinate=name,
                    commit=revision,
                    remote=source,
                    vcs="git" if source else "",
                )
            )

        for warning in warnings:
            logger.warning("%s", warning)
        return ManifestResult(repos=tuple(repos), warnings=tuple(warnings))


__all__ = ["GopkgLockParser"]
