"""Version string normalization."""
from __future__ import annotations


def normalize_version(raw: str) -> str:
    """Reduce a composite version identifier to its last ``-`` segment.

    Pseudo-versions such as ``v0.0.0-20200101000000-abcdef123456`` end with
    the commit they were cut from; that suffix is what identifies the
    revision, so it is what gets compared and written back.

    >>> normalize_version("v1.2.3")
    'v1.2.3'
    >>> normalize_version("v0.0.0-20200101000000-abcdef123456")
    'abcdef123456'
    >>> normalize_version("")
    ''
    """
    return raw.split("-")[-1]


__all__ = ["normalize_version"]
