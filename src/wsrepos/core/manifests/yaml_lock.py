"""YAML repository lock files (``*.lock.yaml``).

Example::

    repositories:
      - importpath: example.com/pkg
        sum: h1:abc...
        version: v1.2.0
"""
from __future__ import annotations

import logging
from pathlib import Path

import yaml

from wsrepos.core.exceptions import LoadError, ResolutionWarning
from wsrepos.core.manifests.base import ManifestParser
from wsrepos.core.repos.models import DesiredRepository, ManifestResult
from wsrepos.core.schemas import schema_errors

logger = logging.getLogger(__name__)

SCHEMA_NAME = "repos-lock"


class YamlLockParser(ManifestParser):
    """Parser for wsrepos' own YAML lock format."""

    format_name = "yaml"

    def matches(self, path: Path) -> bool:
        return path.suffix in (".yaml", ".yml")

    def parse(self, path: Path) -> ManifestResult:
        try:
            data = yaml.safe_load(self.read(path))
        except yaml.YAMLError as exc:
            raise LoadError(f"{path}: {exc}", path=str(path)) from exc

        errors = schema_errors(data, SCHEMA_NAME)
        if errors:
            raise LoadError(f"{path}: invalid lock file: {'; '.join(errors)}", path=str(path))

        repos: list[DesiredRepository] = []
        warnings: list[ResolutionWarning] = []
        for index, item in enumerate(data["repositories"]):
            repo = DesiredRepository.from_dict(item)
            if not repo.source_coordinate:
                warnings.append(
                    ResolutionWarning(
                        f"repositories[{index}]: missing importpath",
                        subject=repo.name or f"repositories[{index}]",
                        source=str(path),
                    )
                )
                continue
            repos.append(repo)

        for warning in warnings:
            logger.warning("%s", warning)
        return ManifestResult(repos=tuple(repos), warnings=tuple(warnings))


__all__ = ["YamlLockParser"]
