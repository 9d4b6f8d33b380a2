"""Tests for atomic and staged file writes."""
from __future__ import annotations

from pathlib import Path

import pytest


class TestAtomicWrite:
    def test_write_text_creates_parents(self, tmp_path: Path) -> None:
        from wsrepos.core.utils.io import read_text, write_text

        target = tmp_path / "a" / "b" / "deps.bzl"
        write_text(target, "def go_deps():\n    pass\n")

        assert read_text(target) == "def go_deps():\n    pass\n"
        assert sorted(p.name for p in target.parent.iterdir()) == ["deps.bzl"]

    def test_write_text_keeps_file_mode(self, tmp_path: Path) -> None:
        from wsrepos.core.utils.io import write_text

        target = tmp_path / "WORKSPACE"
        target.write_text("old\n", encoding="utf-8")
        target.chmod(0o640)

        write_text(target, "new\n")

        assert target.stat().st_mode & 0o777 == 0o640


class TestStagedWrites:
    def test_commit_replaces_every_file(self, tmp_path: Path) -> None:
        from wsrepos.core.utils.io import StagedWrites

        first = tmp_path / "deps.bzl"
        second = tmp_path / "WORKSPACE"
        second.write_text("old\n", encoding="utf-8")

        with StagedWrites() as staged:
            staged.stage(first, "macro\n")
            staged.stage(second, "workspace\n")
            staged.commit()

        assert first.read_text(encoding="utf-8") == "macro\n"
        assert second.read_text(encoding="utf-8") == "workspace\n"
        assert sorted(p.name for p in tmp_path.iterdir()) == ["WORKSPACE", "deps.bzl"]

    def test_uncommitted_writes_are_discarded(self, tmp_path: Path) -> None:
        from wsrepos.core.utils.io import StagedWrites

        target = tmp_path / "WORKSPACE"
        target.write_text("old\n", encoding="utf-8")

        with StagedWrites() as staged:
            staged.stage(target, "new\n")

        assert target.read_text(encoding="utf-8") == "old\n"
        assert [p.name for p in tmp_path.iterdir()] == ["WORKSPACE"]

    def test_failed_stage_discards_earlier_files(self, tmp_path: Path) -> None:
        from wsrepos.core.utils.io import StagedWrites

        target = tmp_path / "WORKSPACE"
        target.write_text("old\n", encoding="utf-8")
        (tmp_path / "blocker").write_text("", encoding="utf-8")

        with pytest.raises(OSError):
            with StagedWrites() as staged:
                staged.stage(target, "new\n")
                staged.stage(tmp_path / "blocker" / "deps.bzl", "macro\n")
                staged.commit()

        assert target.read_text(encoding="utf-8") == "old\n"
        assert sorted(p.name for p in tmp_path.iterdir()) == ["WORKSPACE", "blocker"]
