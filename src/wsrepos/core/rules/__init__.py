"""Build file abstraction.

Key components:
- RuleFile: A parsed WORKSPACE or .bzl macro file with span-preserving edits
- Rule / Load / Directive: The statements wsrepos understands
- list_repositories: Rules across a workspace and its repository macros
- KindInfo / LoadInfo: Rule-kind metadata contributed by configurers
"""
from __future__ import annotations

from wsrepos.core.rules.file import (
    Directive,
    Load,
    RawExpr,
    Rule,
    RuleFile,
    empty_macro_file,
    load_file,
    load_macro_file,
    load_workspace_file,
)
from wsrepos.core.rules.kinds import KindInfo, LoadInfo
from wsrepos.core.rules.repositories import (
    REPOSITORY_MACRO_DIRECTIVE,
    find_macro_file,
    list_repositories,
    load_repository_macros,
    macro_label,
    parse_macro_spec,
)

__all__ = [
    # Files
    "RuleFile",
    "Rule",
    "Load",
    "Directive",
    "RawExpr",
    "load_file",
    "load_workspace_file",
    "load_macro_file",
    "empty_macro_file",
    # Workspace layout
    "REPOSITORY_MACRO_DIRECTIVE",
    "list_repositories",
    "load_repository_macros",
    "find_macro_file",
    "macro_label",
    "parse_macro_spec",
    # Metadata
    "KindInfo",
    "LoadInfo",
]
