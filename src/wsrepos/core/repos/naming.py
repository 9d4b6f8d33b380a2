"""Bazel repository names derived from Go import paths."""
from __future__ import annotations

import re

_INVALID_COORDINATE_RE = re.compile(r"\s|\\|\.\.|//")


def import_path_to_repo_name(import_path: str) -> str:
    """Return the conventional repository name for ``import_path``.

    The host labels are reversed and every path component is joined with
    ``_``; ``-`` and ``.`` become ``_``.

    >>> import_path_to_repo_name("example.com/pkg")
    'com_example_pkg'
    >>> import_path_to_repo_name("github.com/Foo/bar-baz")
    'com_github_foo_bar_baz'
    """
    components = import_path.lower().split("/")
    labels = components[0].split(".")
    repo = "_".join([*reversed(labels), *components[1:]])
    return repo.replace("-", "_").replace(".", "_")


def validate_source_coordinate(coordinate: str) -> str | None:
    """Return why ``coordinate`` is not a usable import path, or None."""
    if not coordinate:
        return "empty import path"
    if coordinate.startswith(("-", "/", ".")):
        return f"import path {coordinate!r} must not start with '-', '/' or '.'"
    if coordinate.endswith("/"):
        return f"import path {coordinate!r} must not end with '/'"
    if _INVALID_COORDINATE_RE.search(coordinate):
        return f"import path {coordinate!r} contains whitespace, a backslash, '..' or '//'"
    return None


__all__ = ["import_path_to_repo_name", "validate_source_coordinate"]
