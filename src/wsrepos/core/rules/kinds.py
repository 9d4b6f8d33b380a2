"""Rule-kind and load-statement metadata declared by configurers."""
from __future__ import annotations

from dataclasses import dataclass, field


@dataclass(frozen=True, slots=True)
class KindInfo:
    """What wsrepos needs to know about a rule kind.

    Attributes:
        non_empty_attrs: Attributes a rule must set before wsrepos reconciles it
        mergeable_attrs: Attributes wsrepos may overwrite on an existing rule
        match_attrs: Attributes used to match a rule when names differ
    """

    non_empty_attrs: frozenset[str] = frozenset()
    mergeable_attrs: frozenset[str] = frozenset()
    match_attrs: tuple[str, ...] = ()


@dataclass(frozen=True, slots=True)
class LoadInfo:
    """A ``load`` statement that makes rule kinds available.

    Attributes:
        name: Label of the .bzl file (e.g. ``@bazel_gazelle//:deps.bzl``)
        symbols: Symbols the file exports
    """

    name: str
    symbols: tuple[str, ...] = field(default_factory=tuple)

    def provides(self, symbol: str) -> bool:
        return symbol in self.symbols


__all__ = ["KindInfo", "LoadInfo"]
