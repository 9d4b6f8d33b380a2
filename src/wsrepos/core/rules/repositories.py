"""Enumerate the rules of a workspace split across several files.

A WORKSPACE file may delegate repository declarations to macros in other
files. Such macros are declared with a directive naming the file (relative
to the workspace directory) and the function::

    # wsrepos:repository_macro third_party/go_deps.bzl%go_dependencies
"""
from __future__ import annotations

import logging
from pathlib import Path
from typing import Iterable

from wsrepos.core.exceptions import LoadError
from wsrepos.core.rules.file import Rule, RuleFile, load_macro_file

logger = logging.getLogger(__name__)

REPOSITORY_MACRO_DIRECTIVE = "repository_macro"


def parse_macro_spec(value: str) -> tuple[str, str] | None:
    """Split ``<file>%<def>`` into its parts, or return None if malformed."""
    parts = value.split("%")
    if len(parts) != 2 or not parts[0] or not parts[1]:
        return None
    return parts[0], parts[1]


def macro_label(file_name: str) -> str:
    """Label used to ``load()`` a macro file from the workspace root."""
    path = Path(file_name)
    package = path.parent.as_posix()
    if package in ("", "."):
        return f"//:{path.name}"
    return f"//{package}:{path.name}"


def load_repository_macros(workspace: RuleFile) -> list[RuleFile]:
    """Load the macro files named by ``repository_macro`` directives.

    Raises:
        LoadError: If a directive is malformed or a macro file can't be parsed
    """
    macros: list[RuleFile] = []
    seen: set[tuple[str, str]] = set()
    root = workspace.path.parent
    for directive in workspace.directives:
        if directive.key != REPOSITORY_MACRO_DIRECTIVE:
            continue
        spec = parse_macro_spec(directive.value)
        if spec is None:
            raise LoadError(
                f"{workspace.path}: invalid {REPOSITORY_MACRO_DIRECTIVE} directive "
                f"{directive.value!r}; expected <file>%<def>",
                path=str(workspace.path),
            )
        if spec in seen:
            continue
        seen.add(spec)
        file_name, def_name = spec
        macro = load_macro_file(root / file_name, def_name)
        logger.debug("loaded macro %s%%%s: %d rules", file_name, def_name, len(macro.rules))
        macros.append(macro)
    return macros


def list_repositories(
    workspace: RuleFile,
    macros: list[RuleFile] | None = None,
) -> tuple[list[Rule], dict[str, RuleFile]]:
    """List every rule declared in ``workspace`` and its repository macros.

    Args:
        workspace: The parsed WORKSPACE file
        macros: Macro files already loaded with :func:`load_repository_macros`;
            loaded from the workspace directives when omitted

    Returns:
        The rules in declaration order (workspace first, then each macro in
        directive order) and a map from rule name to the file declaring it.

    Raises:
        LoadError: If a directive is malformed or a macro file can't be parsed
    """
    if macros is None:
        macros = load_repository_macros(workspace)

    rules: list[Rule] = []
    file_map: dict[str, RuleFile] = {}
    for rule_file in (workspace, *macros):
        for rule in rule_file.rules:
            rules.append(rule)
            name = rule.name
            if not name:
                continue
            if name in file_map and file_map[name] is not rule_file:
                logger.warning(
                    "repository %r declared in both %s and %s; keeping %s",
                    name,
                    file_map[name].path,
                    rule_file.path,
                    file_map[name].path,
                )
                continue
            file_map[name] = rule_file

    return rules, file_map


def find_macro_file(files: Iterable[RuleFile], path: Path, def_name: str) -> RuleFile | None:
    """Return an already loaded macro file for ``path``/``def_name``, if any."""
    target = path.resolve()
    for rule_file in files:
        if rule_file.def_name == def_name and rule_file.path.resolve() == target:
            return rule_file
    return None


__all__ = [
    "REPOSITORY_MACRO_DIRECTIVE",
    "find_macro_file",
    "list_repositories",
    "load_repository_macros",
    "macro_label",
    "parse_macro_spec",
]
