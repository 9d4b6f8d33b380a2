"""go.mod manifests.

Requirements come from ``require`` directives (block and single-line form),
``replace`` directives redirect a module to another module path and
version, and checksums come from the ``go.sum`` file next to ``go.mod``.
"""
from __future__ import annotations

import logging
import re
import shlex
from pathlib import Path

from wsrepos.core.exceptions import LoadError, ResolutionWarning
from wsrepos.core.manifests.base import ManifestParser
from wsrepos.core.repos.models import DesiredRepository, ManifestResult

logger = logging.getLogger(__name__)

_BLOCK_START_RE = re.compile(r"^(require|replace|exclude|retract)\s*\($")


def _strip_comment(line: str) -> str:
    idx = line.find("//")
    return (line[:idx] if idx >= 0 else line).strip()


def _fields(line: str, path: Path, lineno: int) -> list[str]:
    try:
        return shlex.split(line, posix=True)
    except ValueError as exc:
        raise LoadError(f"{path}:{lineno}: {exc}", path=str(path), line=lineno) from exc


def parse_go_mod(content: str, path: Path) -> tuple[list[tuple[str, str]], dict[str, tuple[str, str]]]:
    """Return ``(requirements, replacements)`` declared in a go.mod file.

    ``requirements`` is a list of ``(module, version)``; ``replacements``
    maps a module path to ``(new_path, new_version)``. A replacement of a
    specific version is keyed as ``module@version``.
    """
    requires: list[tuple[str, str]] = []
    replaces: dict[str, tuple[str, str]] = {}
    block: str | None = None

    for lineno, raw in enumerate(content.splitlines(), start=1):
        line = _strip_comment(raw)
        if not line:
            continue
        if block is not None:
            if line == ")":
                block = None
                continue
            verb, rest = block, line
        else:
            m = _BLOCK_START_RE.match(line)
            if m:
                block = m.group(1)
                continue
            verb, _, rest = line.partition(" ")
            rest = rest.strip()

        if verb == "require":
            fields = _fields(rest, path, lineno)
            if len(fields) != 2:
                raise LoadError(
                    f"{path}:{lineno}: usage: require module/path v1.2.3",
                    path=str(path),
                    line=lineno,
                )
            requires.append((fields[0], fields[1]))
        elif verb == "replace":
            old, arrow, new = rest.partition("=>")
            old_fields = _fields(old, path, lineno)
            new_fields = _fields(new, path, lineno)
            if not arrow or len(old_fields) not in (1, 2) or len(new_fields) not in (1, 2):
                raise LoadError(
                    f"{path}:{lineno}: usage: replace module/path [v1.2.3] => other/module v1.4.5",
                    path=str(path),
                    line=lineno,
                )
            key = "@".join(old_fields)
            replaces[key] = (new_fields[0], new_fields[1] if len(new_fields) == 2 else "")

    if block is not None:
        raise LoadError(f"{path}: unterminated {block} block", path=str(path))
    return requires, replaces


def parse_go_sum(content: str) -> dict[tuple[str, str], str]:
    """Map ``(module, version)`` to its ``h1:`` checksum."""
    sums: dict[tuple[str, str], str] = {}
    for line in content.splitlines():
        fields = line.split()
        if len(fields) != 3 or fields[1].endswith("/go.mod"):
            continue
        sums[(fields[0], fields[1])] = fields[2]
    return sums


class GoModParser(ManifestParser):
    """Parser for go.mod (+ go.sum) files."""

    format_name = "go.mod"

    def matches(self, path: Path) -> bool:
        return path.name == "go.mod"

    def parse(self, path: Path) -> ManifestResult:
        requires, replaces = parse_go_mod(self.read(path), path)
        sum_path = path.with_name("go.sum")
        sums = parse_go_sum(self.read(sum_path)) if sum_path.exists() else {}

        repos: list[DesiredRepository] = []
        warnings: list[ResolutionWarning] = []
        for module, version in requires:
            replace = replaces.get(f"{module}@{version}") or replaces.get(module)
            target, target_version = module, version
            if replace is not None:
                target, target_version = replace
                if target.startswith((".", "/")) or not target_version:
                    warnings.append(
                        ResolutionWarning(
                            f"{module}: replaced by local path {target}; not a repository",
                            subject=module,
                            source=str(path),
                        )
                    )
                    continue

            checksum = sums.get((target, target_version), "")
            if not checksum:
                warnings.append(
                    ResolutionWarning(
                        f"{module}@{version}: no go.sum entry; sum left unset",
                        subject=module,
                        source=str(sum_path),
                    )
                )
            repos.append(
                DesiredRepository(
                    source_coordinate=module,
                    checksum=checksum,
                    version=target_version,
                    replace=target if target != module else "",
                )
            )

        for warning in warnings:
            logger.warning("%s", warning)
        return ManifestResult(repos=tuple(repos), warnings=tuple(warnings))


__all__ = ["GoModParser", "parse_go_mod", "parse_go_sum"]
