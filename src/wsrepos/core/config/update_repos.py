"""Configuration for the update-repos command.

Desired repositories come from exactly one source: import paths given as
positional arguments, or a manifest named with ``--from-file``. New rules
go to the WORKSPACE file unless ``--to-macro`` names a macro definition.
"""
from __future__ import annotations

import argparse
import enum
import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Sequence

from wsrepos.core.config.base import Config, ExtensionKey
from wsrepos.core.config.registry import BaseConfigurer
from wsrepos.core.exceptions import FlagFormatError, UsageError, WsReposError
from wsrepos.core.rules.file import RuleFile, load_workspace_file
from wsrepos.core.rules.repositories import list_repositories, load_repository_macros

logger = logging.getLogger(__name__)

USAGE_HINT = "Try --help for more information."


class ValidationState(enum.Enum):
    UNVALIDATED = "unvalidated"
    VALIDATED = "validated"
    ERROR = "error"


@dataclass
class UpdateReposConfig:
    """State owned by :class:`UpdateReposConfigurer`.

    Attributes:
        repo_file_path: Manifest to read desired repositories from, or ""
        import_paths: Import paths given on the command line
        macro_file_name: File receiving new rules when writing to a macro
        macro_def_name: Macro definition receiving new rules
        prune_rules: Remove rules missing from the manifest
        workspace: The parsed WORKSPACE file (set during validation)
        macro_files: Macro files referenced by the workspace
        repo_file_map: Rule name to the file declaring it
        state: Validation progress
    """

    repo_file_path: str = ""
    import_paths: tuple[str, ...] = ()
    macro_file_name: str = ""
    macro_def_name: str = ""
    prune_rules: bool = False
    workspace: RuleFile | None = None
    macro_files: list[RuleFile] = field(default_factory=list)
    repo_file_map: dict[str, RuleFile] = field(default_factory=dict)
    state: ValidationState = ValidationState.UNVALIDATED

    @property
    def uses_macro(self) -> bool:
        return bool(self.macro_file_name)

    def validate(self) -> None:
        """Check the source, destination and prune combination.

        Raises:
            UsageError: On an invalid combination
        """
        if self.repo_file_path:
            if self.import_paths:
                raise UsageError(
                    "unexpected positional arguments: got "
                    f"{len(self.import_paths)} with --from-file; wanted 0",
                    context={"args": list(self.import_paths)},
                )
        else:
            if not self.import_paths:
                raise UsageError("no repositories specified")
            if self.prune_rules:
                raise UsageError("prune requires a manifest source (--prune can only be used with --from-file)")
        if bool(self.macro_file_name) != bool(self.macro_def_name):
            raise UsageError("--to-macro needs both a file and a definition name")


UPDATE_REPOS = ExtensionKey("_update-repos", UpdateReposConfig)


def get_update_repos_config(config: Config) -> UpdateReposConfig:
    return config.ext(UPDATE_REPOS)


def parse_macro_flag(value: str) -> tuple[str, str]:
    """Parse a ``--to-macro`` value of the form ``<file>%<def>``.

    Raises:
        FlagFormatError: If there isn't exactly one ``%``, either part is
            empty, or the file starts with ``..``
    """
    args = value.split("%")
    if len(args) != 2 or not args[0] or not args[1]:
        raise FlagFormatError(
            f"Failure parsing to_macro: {value}, expected format is macroFile%defName",
            value=value,
            flag="--to-macro",
        )
    if args[0].startswith(".."):
        raise FlagFormatError(
            f'Failure parsing to_macro: {value}, macro file path {args[0]} should not start with ".."',
            value=value,
            flag="--to-macro",
        )
    return args[0], args[1]


class MacroFlagAction(argparse.Action):
    """Parses ``--to-macro`` as soon as the flag is seen.

    :class:`FlagFormatError` propagates out of ``parse_args`` unchanged.
    """

    def __call__(
        self,
        parser: argparse.ArgumentParser,
        namespace: argparse.Namespace,
        values: str | Sequence[Any] | None,
        option_string: str | None = None,
    ) -> None:
        setattr(namespace, self.dest, parse_macro_flag(str(values)))


class UpdateReposConfigurer(BaseConfigurer):
    """Flags and validation for ``update-repos``."""

    name = "update-repos"

    def register_flags(self, parser: argparse.ArgumentParser, command: str, config: Config) -> None:
        config.set_ext(UPDATE_REPOS, UpdateReposConfig())
        parser.add_argument(
            "import_paths",
            nargs="*",
            metavar="import-path",
            help="Go import path to add or update, optionally with @version",
        )
        parser.add_argument(
            "--from-file",
            "--from_file",
            dest="repo_file_path",
            default="",
            metavar="PATH",
            help=(
                "Translate repositories listed in this file into repository rules in WORKSPACE "
                "or a .bzl macro function. go.mod, Gopkg.lock and *.lock.yaml files are supported"
            ),
        )
        parser.add_argument(
            "--to-macro",
            "--to_macro",
            dest="to_macro",
            action=MacroFlagAction,
            default=None,
            metavar="MACRO",
            help=(
                "Write repository rules into a .bzl macro function rather than the WORKSPACE file. "
                "The expected format is: macroFile%%defName"
            ),
        )
        parser.add_argument(
            "--prune",
            action="store_true",
            help=(
                "Remove rules that no longer have equivalent repos in the manifest. "
                "Can only be used with --from-file."
            ),
        )

    def check_flags(self, args: argparse.Namespace, config: Config) -> None:
        uc = get_update_repos_config(config)
        try:
            self._check(args, config, uc)
        except WsReposError:
            uc.state = ValidationState.ERROR
            raise
        uc.state = ValidationState.VALIDATED

    def _check(self, args: argparse.Namespace, config: Config, uc: UpdateReposConfig) -> None:
        uc.import_paths = tuple(getattr(args, "import_paths", None) or ())
        uc.repo_file_path = getattr(args, "repo_file_path", "") or ""
        macro = getattr(args, "to_macro", None)
        if macro:
            uc.macro_file_name, uc.macro_def_name = macro
        uc.prune_rules = bool(getattr(args, "prune", False))
        uc.validate()

        if uc.repo_file_path:
            manifest = Path(uc.repo_file_path).expanduser()
            if not manifest.is_absolute():
                manifest = config.repo_root / manifest
            uc.repo_file_path = str(manifest)

        uc.workspace = load_workspace_file(config.workspace_path)
        uc.macro_files = load_repository_macros(uc.workspace)
        config.repos, uc.repo_file_map = list_repositories(uc.workspace, uc.macro_files)
        logger.debug(
            "loaded %d rules from %s and %d macro files",
            len(config.repos),
            uc.workspace.path,
            len(uc.macro_files),
        )


__all__ = [
    "UPDATE_REPOS",
    "USAGE_HINT",
    "MacroFlagAction",
    "UpdateReposConfig",
    "UpdateReposConfigurer",
    "ValidationState",
    "get_update_repos_config",
    "parse_macro_flag",
]
