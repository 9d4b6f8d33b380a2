"""Tests for version normalization and repository naming."""
from __future__ import annotations

import pytest


class TestNormalizeVersion:
    @pytest.mark.parametrize(
        ("raw", "expected"),
        [
            ("v1.2.3", "v1.2.3"),
            ("v0.0.0-20200101000000-abcdef123456", "abcdef123456"),
            ("v1.2.0-pre-deadbeef01", "deadbeef01"),
            ("", ""),
            ("v1.0.0-", ""),
        ],
    )
    def test_last_segment(self, raw: str, expected: str) -> None:
        from wsrepos.core.repos import normalize_version

        assert normalize_version(raw) == expected


class TestRepoNames:
    @pytest.mark.parametrize(
        ("import_path", "name"),
        [
            ("example.com/pkg", "com_example_pkg"),
            ("github.com/Foo/bar-baz", "com_github_foo_bar_baz"),
            ("golang.org/x/net", "org_golang_x_net"),
            ("gopkg.in/yaml.v3", "in_gopkg_yaml_v3"),
            ("example.com", "com_example"),
        ],
    )
    def test_import_path_to_repo_name(self, import_path: str, name: str) -> None:
        from wsrepos.core.repos import import_path_to_repo_name

        assert import_path_to_repo_name(import_path) == name

    @pytest.mark.parametrize("coordinate", ["example.com/pkg", "github.com/a/b/v2"])
    def test_valid_coordinates(self, coordinate: str) -> None:
        from wsrepos.core.repos import validate_source_coordinate

        assert validate_source_coordinate(coordinate) is None

    @pytest.mark.parametrize(
        "coordinate",
        ["", "/abs/path", "./local", "-flag", "example.com/", "example.com//x", "example.com/a b", "a/../b"],
    )
    def test_invalid_coordinates(self, coordinate: str) -> None:
        from wsrepos.core.repos import validate_source_coordinate

        assert validate_source_coordinate(coordinate) is not None
