"""Repository descriptors and reconciliation.

Key components:
- RepositoryDescriptor / DesiredRepository: What exists and what should exist
- extract_repositories: Descriptors from go_repository rules
- RepoReconciler: Update / insert / prune decisions
- UpdateReposManager: Full update-repos run (see ``wsrepos.core.repos.update``)
"""
from __future__ import annotations

from wsrepos.core.repos.descriptors import (
    GO_REPOSITORY_KIND,
    ExtractedRepos,
    extract_descriptor,
    extract_repositories,
)
from wsrepos.core.repos.models import (
    DesiredRepository,
    KnownRepo,
    ManifestResult,
    ReconcileResult,
    RepositoryDescriptor,
)
from wsrepos.core.repos.naming import import_path_to_repo_name, validate_source_coordinate
from wsrepos.core.repos.reconcile import RepoReconciler, desired_attrs
from wsrepos.core.repos.resolve import PassthroughResolver, RepoResolver, parse_import_path_arg
from wsrepos.core.repos.version import normalize_version

__all__ = [
    "GO_REPOSITORY_KIND",
    "DesiredRepository",
    "ExtractedRepos",
    "KnownRepo",
    "ManifestResult",
    "PassthroughResolver",
    "ReconcileResult",
    "RepoReconciler",
    "RepoResolver",
    "RepositoryDescriptor",
    "desired_attrs",
    "extract_descriptor",
    "extract_repositories",
    "import_path_to_repo_name",
    "normalize_version",
    "parse_import_path_arg",
    "validate_source_coordinate",
]
