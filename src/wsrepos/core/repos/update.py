"""update-repos orchestration.

Ties the validated configuration to the reconciler: gathers the desired
repositories, picks the destination file, reconciles, wires a macro
destination into the workspace, and writes every changed file back.
"""
from __future__ import annotations

import difflib
import logging
import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

from wsrepos.core.config.base import Config
from wsrepos.core.config.registry import load_for_kind
from wsrepos.core.config.update_repos import UpdateReposConfig, ValidationState, get_update_repos_config
from wsrepos.core.exceptions import ResolutionWarning, SaveError, UsageError
from wsrepos.core.manifests import parse_manifest
from wsrepos.core.repos.descriptors import GO_REPOSITORY_KIND
from wsrepos.core.repos.models import DesiredRepository, ReconcileResult
from wsrepos.core.repos.reconcile import RepoReconciler
from wsrepos.core.repos.resolve import PassthroughResolver, RepoResolver, parse_import_path_arg
from wsrepos.core.rules.file import Rule, RuleFile, empty_macro_file, load_macro_file
from wsrepos.core.rules.repositories import (
    REPOSITORY_MACRO_DIRECTIVE,
    find_macro_file,
    macro_label,
)
from wsrepos.core.utils.io import StagedWrites

logger = logging.getLogger(__name__)


@dataclass(slots=True)
class UpdateReposResult:
    """Outcome of :meth:`UpdateReposManager.run`.

    Attributes:
        reconcile: Per-rule outcome
        changed_files: Files whose content changed (written unless dry run)
        diff: Unified diff of every changed file
        dry_run: Whether writing was skipped
    """

    reconcile: ReconcileResult
    changed_files: list[Path] = field(default_factory=list)
    diff: str = ""
    dry_run: bool = False

    def to_dict(self) -> dict[str, Any]:
        """Serialize to dictionary."""
        return {
            **self.reconcile.to_dict(),
            "changed_files": [str(p) for p in self.changed_files],
            "dry_run": self.dry_run,
        }


class UpdateReposManager:
    """Runs update-repos against a validated :class:`Config`."""

    def __init__(
        self,
        config: Config,
        *,
        resolver: RepoResolver | None = None,
        kind: str = GO_REPOSITORY_KIND,
    ) -> None:
        self.config = config
        self.uc: UpdateReposConfig = get_update_repos_config(config)
        self.resolver = resolver or PassthroughResolver()
        self.kind = kind

    def desired_repositories(self) -> tuple[list[DesiredRepository], list[ResolutionWarning]]:
        """Repositories from the manifest, or from the positional import paths.

        Raises:
            LoadError: If the manifest cannot be read
        """
        if self.uc.repo_file_path:
            manifest = parse_manifest(self.uc.repo_file_path)
            logger.info("read %d repositories from %s", len(manifest.repos), self.uc.repo_file_path)
            repos = list(manifest.repos)
            warnings = list(manifest.warnings)
        else:
            repos = [parse_import_path_arg(arg) for arg in self.uc.import_paths]
            warnings = []
        return [self.resolver.resolve(repo) for repo in repos], warnings

    def destination(self) -> RuleFile:
        """File receiving new rules: the workspace, or the ``--to-macro`` def."""
        workspace = self._workspace()
        if not self.uc.uses_macro:
            return workspace
        path = self.config.repo_root / self.uc.macro_file_name
        existing = find_macro_file(self.uc.macro_files, path, self.uc.macro_def_name)
        if existing is not None:
            return existing
        if path.exists():
            return load_macro_file(path, self.uc.macro_def_name)
        return empty_macro_file(path, self.uc.macro_def_name)

    def run(self, *, dry_run: bool = False) -> UpdateReposResult:
        """Reconcile and (unless ``dry_run``) write the changed files.

        Raises:
            UsageError: If the configuration was not validated
            LoadError: If the manifest or macro file cannot be read
            SaveError: If a file cannot be written
        """
        if self.uc.state is not ValidationState.VALIDATED:
            raise UsageError(f"update-repos configuration is {self.uc.state.value}; run check_flags first")
        workspace = self._workspace()

        desired, manifest_warnings = self.desired_repositories()
        destination = self.destination()

        existing = list(self.config.repos)
        repo_file_map = dict(self.uc.repo_file_map)
        files: list[RuleFile] = [workspace, *self.uc.macro_files]
        if all(f is not destination for f in files):
            # A macro file not yet referenced by the workspace still holds rules.
            existing.extend(destination.rules)
            for rule in destination.rules:
                if rule.name:
                    repo_file_map.setdefault(rule.name, destination)
            files.append(destination)

        reconciler = RepoReconciler(
            kind=self.kind,
            kind_info=self.config.kinds.get(self.kind),
            stamp_attrs=self.config.attr_stamps.get(self.kind),
        )
        result = reconciler.reconcile(
            existing,
            desired,
            destination=destination,
            repo_file_map=repo_file_map,
            prune=self.uc.prune_rules,
        )
        result.warnings[:0] = manifest_warnings

        if result.inserted:
            load = load_for_kind(self.config.loads, self.kind)
            if load is not None:
                destination.ensure_load(load.name, self.kind)
        if self.uc.uses_macro:
            self._wire_macro(workspace)

        return self._write(result, files, dry_run=dry_run)

    def _workspace(self) -> RuleFile:
        if self.uc.workspace is None:
            raise UsageError("workspace has not been loaded; run check_flags first")
        return self.uc.workspace

    def _wire_macro(self, workspace: RuleFile) -> None:
        file_name, def_name = self.uc.macro_file_name, self.uc.macro_def_name
        value = f"{file_name}%{def_name}"
        if workspace.has_directive(REPOSITORY_MACRO_DIRECTIVE, value):
            return
        logger.info("wiring %s into %s", value, workspace.path)
        workspace.ensure_load(macro_label(file_name), def_name)
        workspace.add_directive(REPOSITORY_MACRO_DIRECTIVE, value)
        if not workspace.rules_of_kind(def_name):
            workspace.insert_rule(Rule(def_name))

    def _write(self, result: ReconcileResult, files: list[RuleFile], *, dry_run: bool) -> UpdateReposResult:
        rendered: list[tuple[RuleFile, str]] = []
        diff: list[str] = []
        for rule_file in files:
            content = rule_file.format()
            if content == rule_file.content and rule_file.path.exists():
                continue
            rendered.append((rule_file, content))
            name = _display_path(rule_file.path, self.config.repo_root)
            diff.extend(
                difflib.unified_diff(
                    rule_file.content.splitlines(keepends=True),
                    content.splitlines(keepends=True),
                    fromfile=f"a/{name}",
                    tofile=f"b/{name}",
                )
            )

        update = UpdateReposResult(
            reconcile=result,
            changed_files=[f.path for f, _ in rendered],
            diff="".join(diff),
            dry_run=dry_run,
        )
        if dry_run:
            logger.info("dry run: %d files would change", len(rendered))
            return update
        self._save_all(rendered)
        return update

    def _save_all(self, rendered: list[tuple[RuleFile, str]]) -> None:
        """Replace every changed file, or none of them.

        Macro files are renamed into place before the workspace that loads
        them.
        """
        workspace = self.uc.workspace
        ordered = sorted(rendered, key=lambda item: item[0] is workspace)
        with StagedWrites() as staged:
            for rule_file, content in ordered:
                try:
                    staged.stage(rule_file.path, content)
                except OSError as exc:
                    raise SaveError(f"writing {rule_file.path}: {exc}", path=str(rule_file.path)) from exc
            try:
                staged.commit()
            except OSError as exc:
                path = exc.filename or ""
                raise SaveError(f"replacing {path}: {exc}", path=str(path)) from exc
        for rule_file, content in ordered:
            rule_file.mark_saved(content)


def _display_path(path: Path, root: Path) -> str:
    try:
        return path.resolve().relative_to(root.resolve()).as_posix()
    except ValueError:
        return os.fspath(path)


__all__ = ["UpdateReposManager", "UpdateReposResult"]
