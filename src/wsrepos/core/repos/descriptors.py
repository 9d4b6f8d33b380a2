"""Repository descriptors extracted from go_repository rules."""
from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Iterable

from wsrepos.core.exceptions import ResolutionWarning
from wsrepos.core.repos.models import KnownRepo, RepositoryDescriptor
from wsrepos.core.repos.version import normalize_version
from wsrepos.core.rules.file import Rule

logger = logging.getLogger(__name__)

GO_REPOSITORY_KIND = "go_repository"


@dataclass(slots=True)
class ExtractedRepos:
    """Two views of the same go_repository rules, plus the skipped ones.

    Attributes:
        descriptors: One descriptor per usable rule, in declaration order
        known_repos: Legacy records (import path, remote, vcs) for the same rules
        rules: The usable rules, keyed by name
        warnings: Rules that were skipped and why
    """

    descriptors: list[RepositoryDescriptor] = field(default_factory=list)
    known_repos: list[KnownRepo] = field(default_factory=list)
    rules: dict[str, Rule] = field(default_factory=dict)
    warnings: list[ResolutionWarning] = field(default_factory=list)


def extract_descriptor(rule: Rule) -> RepositoryDescriptor:
    """Build a descriptor from a go_repository rule's attributes."""
    return RepositoryDescriptor(
        name=rule.attr_string("name"),
        source_coordinate=rule.attr_string("importpath"),
        checksum=rule.attr_string("sum"),
        resolved_version=normalize_version(rule.attr_string("version")),
    )


def extract_repositories(
    rules: Iterable[Rule],
    *,
    kind: str = GO_REPOSITORY_KIND,
    required_attrs: Iterable[str] = (),
) -> ExtractedRepos:
    """Extract descriptors for every rule of ``kind``.

    Rules missing a ``name``, an ``importpath`` or any of ``required_attrs``
    as a string attribute, and repeated names, are skipped with a warning.
    """
    required = ("name", "importpath", *sorted(set(required_attrs) - {"name", "importpath"}))
    result = ExtractedRepos()
    for rule in rules:
        if rule.kind != kind or rule.deleted:
            continue
        descriptor = extract_descriptor(rule)
        missing = [attr for attr in required if not rule.attr_string(attr)]
        if missing:
            warning = ResolutionWarning(
                f"skipping {kind} rule {descriptor.name or '<unnamed>'}: "
                f"missing {', '.join(missing)}",
                subject=descriptor.name or descriptor.source_coordinate,
            )
            logger.warning("%s", warning)
            result.warnings.append(warning)
            continue
        if descriptor.name in result.rules:
            warning = ResolutionWarning(
                f"skipping duplicate {kind} rule {descriptor.name}",
                subject=descriptor.name,
            )
            logger.warning("%s", warning)
            result.warnings.append(warning)
            continue

        result.descriptors.append(descriptor)
        result.known_repos.append(
            KnownRepo(
                name=rule.name,
                go_prefix=rule.attr_string("importpath"),
                remote=rule.attr_string("remote"),
                vcs=rule.attr_string("vcs"),
            )
        )
        result.rules[descriptor.name] = rule
    return result


__all__ = [
    "GO_REPOSITORY_KIND",
    "ExtractedRepos",
    "extract_descriptor",
    "extract_repositories",
]
