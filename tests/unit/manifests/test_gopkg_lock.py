"""Tests for Gopkg.lock parsing."""
from __future__ import annotations

from pathlib import Path

import pytest

from helpers.workspace import write_file


class TestGopkgLockParser:
    def test_projects_become_repositories(self, tmp_path: Path) -> None:
        from wsrepos.core.manifests import parse_manifest
        from wsrepos.core.repos import DesiredRepository

        path = write_file(
            tmp_path / "Gopkg.lock",
            """
            [[projects]]
              name = "example.com/a"
              packages = ["."]
              revision = "abc123"
              version = "v1.0.0"

            [[projects]]
              name = "example.com/b"
              revision = "def456"
              source = "https://git.example.com/b-mirror"

            [solve-meta]
              analyzer-name = "dep"
            """,
        )

        result = parse_manifest(path)

        assert result.repos == (
            DesiredRepository(source_coordinate="example.com/a", commit="abc123"),
            DesiredRepository(
                source_coordinate="example.com/b",
                commit="def456",
                remote="https://git.example.com/b-mirror",
                vcs="git",
            ),
        )
        assert result.warnings == ()

    def test_project_without_name_is_skipped(self, tmp_path: Path) -> None:
        from wsrepos.core.manifests import parse_manifest

        path = write_file(
            tmp_path / "Gopkg.lock",
            """
            [[projects]]
              revision = "abc123"
            """,
        )

        result = parse_manifest(path)

        assert result.repos == ()
        assert "missing name" in str(result.warnings[0])

    def test_invalid_toml(self, tmp_path: Path) -> None:
        from wsrepos.core.exceptions import LoadError
        from wsrepos.core.manifests import parse_manifest

        path = write_file(tmp_path / "Gopkg.lock", "[[projects]\nname = \n")

        with pytest.raises(LoadError):
            parse_manifest(path)
