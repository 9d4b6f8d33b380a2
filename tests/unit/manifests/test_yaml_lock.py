"""Tests for YAML lock file parsing."""
from __future__ import annotations

from pathlib import Path

import pytest

from helpers.workspace import write_file


class TestYamlLockParser:
    def test_entries_become_repositories(self, tmp_path: Path) -> None:
        from wsrepos.core.manifests import parse_manifest
        from wsrepos.core.repos import DesiredRepository

        path = write_file(
            tmp_path / "repos.lock.yaml",
            """
            repositories:
              - importpath: example.com/pkg
                sum: h1:abc
                version: v1.2.0-pre-deadbeef01
              - importpath: example.com/named
                name: named
                vcs: git
                remote: https://git.example.com/named
            """,
        )

        result = parse_manifest(path)

        assert result.repos == (
            DesiredRepository(source_coordinate="example.com/pkg", checksum="h1:abc", version="v1.2.0-pre-deadbeef01"),
            DesiredRepository(
                source_coordinate="example.com/named",
                name="named",
                vcs="git",
                remote="https://git.example.com/named",
            ),
        )

    def test_entry_without_importpath_is_a_warning(self, tmp_path: Path) -> None:
        from wsrepos.core.manifests import parse_manifest

        path = write_file(
            tmp_path / "repos.lock.yaml",
            """
            repositories:
              - name: orphan
              - importpath: example.com/a
            """,
        )

        result = parse_manifest(path)

        assert [r.source_coordinate for r in result.repos] == ["example.com/a"]
        assert result.warnings[0].subject == "orphan"

    @pytest.mark.parametrize(
        "content",
        [
            "repos: []\n",
            "repositories:\n  - importpath: example.com/a\n    unknown: 1\n",
            "repositories:\n  - importpath: example.com/a\n    vcs: cvs\n",
        ],
    )
    def test_schema_violations(self, tmp_path: Path, content: str) -> None:
        from wsrepos.core.exceptions import LoadError
        from wsrepos.core.manifests import parse_manifest

        path = write_file(tmp_path / "repos.lock.yaml", content)

        with pytest.raises(LoadError, match="invalid lock file"):
            parse_manifest(path)
