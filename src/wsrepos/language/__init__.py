"""Language configurers.

Languages are assembled here, in the order their flags are registered and
checked. Adding a language means adding it to :func:`languages`.
"""
from __future__ import annotations

from wsrepos.core.config.registry import Configurer


def languages() -> list[Configurer]:
    """Fresh instances of every supported language configurer."""
    from wsrepos.language.go import GoLanguage

    return [GoLanguage()]


__all__ = ["languages"]
