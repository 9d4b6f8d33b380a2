"""Merge desired repositories into existing go_repository rules.

Existing rules are keyed by name and by their match attributes (the import
path for go_repository). Each desired repository either updates the rule it
matches in place (the rule keeps its position and formatting unless an
attribute actually changes) or becomes a new rule at the end of the
destination file. With pruning, rules no desired repository matched are
deleted from the file that declares them.
"""
from __future__ import annotations

import logging
from typing import Any, Iterable, Mapping

from wsrepos.core.exceptions import ResolutionWarning
from wsrepos.core.repos.descriptors import GO_REPOSITORY_KIND, extract_repositories
from wsrepos.core.repos.models import DesiredRepository, ReconcileResult
from wsrepos.core.repos.naming import import_path_to_repo_name, validate_source_coordinate
from wsrepos.core.repos.version import normalize_version
from wsrepos.core.rules.file import Rule, RuleFile
from wsrepos.core.rules.kinds import KindInfo

logger = logging.getLogger(__name__)

# Optional DesiredRepository fields copied verbatim to attributes of the same name.
_PASSTHROUGH_ATTRS = ("commit", "remote", "vcs", "replace")

_DEFAULT_MATCH_ATTRS = ("importpath",)


def desired_attrs(repo: DesiredRepository, stamp: Mapping[str, Any] | None = None) -> dict[str, Any]:
    """Attributes a rule for ``repo`` should carry (``name`` excluded)."""
    attrs: dict[str, Any] = {"importpath": repo.source_coordinate}
    if repo.checksum:
        attrs["sum"] = repo.checksum
    if repo.version:
        attrs["version"] = normalize_version(repo.version)
    for key in _PASSTHROUGH_ATTRS:
        value = getattr(repo, key)
        if value:
            attrs[key] = value
    for key, value in (stamp or {}).items():
        if value is not None and value != "":
            attrs[key] = value
    return attrs


class RepoReconciler:
    """Computes and applies the rule edits for one update-repos run.

    Edits are applied to the :class:`Rule` objects and files in memory;
    nothing is written until the caller saves the files.
    """

    def __init__(
        self,
        *,
        kind: str = GO_REPOSITORY_KIND,
        kind_info: KindInfo | None = None,
        stamp_attrs: Mapping[str, Any] | None = None,
    ) -> None:
        """Initialize reconciler.

        Args:
            kind: Rule kind holding repository declarations
            kind_info: Metadata for ``kind``; when given, only its
                mergeable attributes are overwritten on existing rules, its
                match attributes pair desired repositories with rules, and
                rules missing a non-empty attribute are skipped
            stamp_attrs: Attributes set on every inserted or updated rule
                (contributed by language configurers)
        """
        self.kind = kind
        self.kind_info = kind_info
        self.stamp_attrs = dict(stamp_attrs or {})
        self.match_attrs: tuple[str, ...] = (
            kind_info.match_attrs if kind_info is not None and kind_info.match_attrs else _DEFAULT_MATCH_ATTRS
        )
        self.required_attrs = kind_info.non_empty_attrs if kind_info is not None else frozenset()

    def reconcile(
        self,
        existing: Iterable[Rule],
        desired: Iterable[DesiredRepository],
        *,
        destination: RuleFile,
        repo_file_map: Mapping[str, RuleFile] | None = None,
        prune: bool = False,
    ) -> ReconcileResult:
        """Merge ``desired`` into ``existing``.

        Args:
            existing: Rules currently declared across the workspace
            desired: Repositories that should be declared
            destination: File (or macro) receiving new rules
            repo_file_map: Rule name to declaring file, for reporting removals
            prune: Delete existing rules that no desired repository matches

        Returns:
            What was inserted, updated, left alone and removed
        """
        extracted = extract_repositories(existing, kind=self.kind, required_attrs=self.required_attrs)
        result = ReconcileResult(warnings=list(extracted.warnings))
        by_name = dict(extracted.rules)
        by_attr: dict[tuple[str, str], Rule] = {}
        for rule in extracted.rules.values():
            for attr in self.match_attrs:
                value = rule.attr_string(attr)
                if value:
                    by_attr.setdefault((attr, value), rule)

        matched: set[str] = set()
        for repo in desired:
            problem = validate_source_coordinate(repo.source_coordinate)
            if problem is not None:
                self._warn(result, f"skipping repository: {problem}", subject=repo.source_coordinate)
                continue

            attrs = desired_attrs(repo, self.stamp_attrs)
            rule = self._match(repo, attrs, by_name, by_attr)
            if rule is not None:
                name = rule.name
            else:
                name = repo.name or import_path_to_repo_name(repo.source_coordinate)
            if name in matched:
                self._warn(
                    result,
                    f"skipping duplicate repository {repo.source_coordinate} (rule {name})",
                    subject=repo.source_coordinate,
                )
                continue
            matched.add(name)

            if rule is None:
                new_rule = Rule(self.kind, {"name": name, **attrs})
                destination.insert_rule(new_rule)
                by_name[name] = new_rule
                result.inserted.append(name)
                logger.info("adding %s %s (%s)", self.kind, name, repo.source_coordinate)
            elif self._update(rule, attrs, repo):
                result.updated.append(name)
                logger.info("updating %s %s", self.kind, name)
            else:
                result.unchanged.append(name)

        if prune:
            file_map = repo_file_map or {}
            for name, rule in extracted.rules.items():
                if name in matched:
                    continue
                rule.delete()
                result.removed.append(name)
                declared_in = file_map.get(name)
                logger.info(
                    "removing %s %s from %s",
                    self.kind,
                    name,
                    declared_in.path if declared_in is not None else "<unknown>",
                )

        return result

    def _match(
        self,
        repo: DesiredRepository,
        attrs: Mapping[str, Any],
        by_name: Mapping[str, Rule],
        by_attr: Mapping[tuple[str, str], Rule],
    ) -> Rule | None:
        if repo.name and repo.name in by_name:
            return by_name[repo.name]
        for attr in self.match_attrs:
            value = attrs.get(attr)
            if isinstance(value, str) and (attr, value) in by_attr:
                return by_attr[(attr, value)]
        if not repo.name:
            return by_name.get(import_path_to_repo_name(repo.source_coordinate))
        return None

    def _update(self, rule: Rule, attrs: Mapping[str, Any], repo: DesiredRepository) -> bool:
        attrs = {k: v for k, v in attrs.items() if self._mergeable(k)}
        # The same pin may be spelled as a full pseudo-version or its last segment.
        if "version" in attrs and normalize_version(rule.attr_string("version")) == attrs["version"]:
            del attrs["version"]
        version_changed = "version" in attrs

        changed = False
        for key, value in attrs.items():
            changed = rule.set_attr(key, value) or changed

        stale: set[str] = set()
        # A sum only vouches for the version it was computed for.
        if version_changed and not repo.checksum:
            stale.add("sum")
        # A rule is pinned either to a module version or to a commit, never both.
        if repo.commit and not repo.version:
            stale.add("version")
            if not repo.checksum:
                stale.add("sum")
        elif repo.version and not repo.commit:
            stale.add("commit")
        for key in sorted(stale):
            if self._mergeable(key):
                changed = rule.del_attr(key) or changed
        return changed

    def _mergeable(self, key: str) -> bool:
        return self.kind_info is None or key in self.kind_info.mergeable_attrs

    @staticmethod
    def _warn(result: ReconcileResult, message: str, *, subject: str) -> None:
        warning = ResolutionWarning(message, subject=subject)
        logger.warning("%s", warning)
        result.warnings.append(warning)


__all__ = ["RepoReconciler", "desired_attrs"]
