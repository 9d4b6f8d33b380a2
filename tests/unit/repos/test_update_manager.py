"""Tests for a full update-repos run against a workspace on disk."""
from __future__ import annotations

import argparse
from pathlib import Path

import pytest

from helpers.workspace import go_repository, write_file

GAZELLE_LOAD = 'load("@bazel_gazelle//:deps.bzl", "go_repository")\n'


def configure(tmp_path: Path, argv: list[str], *, check: bool = True):
    from wsrepos.core.config import Config, default_registry

    registry = default_registry()
    config = Config()
    parser = argparse.ArgumentParser()
    registry.register_flags(parser, "update-repos", config)
    args = parser.parse_args(["--repo-root", str(tmp_path), *argv])
    if check:
        registry.check_flags(args, config)
    return config


def run(tmp_path: Path, argv: list[str], **kwargs):
    from wsrepos.core.repos.update import UpdateReposManager

    dry_run = kwargs.pop("dry_run", False)
    return UpdateReposManager(configure(tmp_path, argv), **kwargs).run(dry_run=dry_run)


def read(path: Path) -> str:
    return path.read_text(encoding="utf-8")


class TestWorkspaceDestination:
    def test_import_path_is_added_with_its_load(self, tmp_path: Path) -> None:
        ws = write_file(tmp_path / "WORKSPACE", 'workspace(name = "demo")\n')

        result = run(tmp_path, ["example.com/pkg@v1.2.0"])

        assert result.reconcile.inserted == ["com_example_pkg"]
        assert result.changed_files == [ws]
        assert read(ws) == (
            'workspace(name = "demo")\n'
            "\n"
            + GAZELLE_LOAD
            + "\n"
            + go_repository("com_example_pkg", "example.com/pkg", version="v1.2.0")
        )

    def test_dry_run_writes_nothing(self, tmp_path: Path) -> None:
        content = 'workspace(name = "demo")\n'
        ws = write_file(tmp_path / "WORKSPACE", content)

        result = run(tmp_path, ["example.com/pkg@v1.2.0"], dry_run=True)

        assert result.dry_run
        assert result.changed_files == [ws]
        assert read(ws) == content
        assert "--- a/WORKSPACE" in result.diff
        assert '+    importpath = "example.com/pkg",' in result.diff

    def test_unchanged_workspace_is_not_written(self, tmp_path: Path) -> None:
        content = GAZELLE_LOAD + "\n" + go_repository("com_example_pkg", "example.com/pkg", version="v1.2.0")
        ws = write_file(tmp_path / "WORKSPACE", content)
        before = ws.stat().st_mtime_ns

        result = run(tmp_path, ["example.com/pkg@v1.2.0"])

        assert result.changed_files == []
        assert result.diff == ""
        assert result.reconcile.unchanged == ["com_example_pkg"]
        assert ws.stat().st_mtime_ns == before

    def test_custom_resolver_is_used(self, tmp_path: Path) -> None:
        from dataclasses import replace

        ws = write_file(tmp_path / "WORKSPACE", "")

        class PinningResolver:
            def resolve(self, repo):
                return replace(repo, version="v9.9.9", checksum="h1:pinned=")

        run(tmp_path, ["example.com/pkg"], resolver=PinningResolver())

        assert '    sum = "h1:pinned=",\n    version = "v9.9.9",\n' in read(ws)

    def test_run_requires_validation(self, tmp_path: Path) -> None:
        from wsrepos.core.exceptions import UsageError
        from wsrepos.core.repos.update import UpdateReposManager

        write_file(tmp_path / "WORKSPACE", "")
        config = configure(tmp_path, ["example.com/pkg"], check=False)

        with pytest.raises(UsageError, match="unvalidated"):
            UpdateReposManager(config).run()


class TestMacroDestination:
    def test_new_macro_is_created_and_wired(self, tmp_path: Path) -> None:
        ws = write_file(tmp_path / "WORKSPACE", 'workspace(name = "demo")\n')

        result = run(tmp_path, ["--to-macro", "deps.bzl%go_deps", "example.com/pkg@v1.2.0"])

        macro = tmp_path / "deps.bzl"
        assert result.changed_files == [ws, macro]
        assert read(macro) == (
            GAZELLE_LOAD
            + "\n"
            + "def go_deps():\n"
            + go_repository("com_example_pkg", "example.com/pkg", indent="    ", version="v1.2.0")
        )
        assert read(ws) == (
            'workspace(name = "demo")\n'
            "\n"
            'load("//:deps.bzl", "go_deps")\n'
            "\n"
            "# wsrepos:repository_macro deps.bzl%go_deps\n"
            "go_deps()\n"
        )

    def test_second_run_is_a_no_op(self, tmp_path: Path) -> None:
        write_file(tmp_path / "WORKSPACE", 'workspace(name = "demo")\n')
        argv = ["--to-macro", "deps.bzl%go_deps", "example.com/pkg@v1.2.0"]
        run(tmp_path, argv)

        result = run(tmp_path, argv)

        assert result.changed_files == []
        assert result.reconcile.unchanged == ["com_example_pkg"]

    def test_existing_macro_in_subdirectory(self, tmp_path: Path) -> None:
        write_file(
            tmp_path / "WORKSPACE",
            'load("//third_party:go.bzl", "go_deps")\n'
            "\n"
            "# wsrepos:repository_macro third_party/go.bzl%go_deps\n"
            "go_deps()\n",
        )
        macro = write_file(
            tmp_path / "third_party" / "go.bzl",
            GAZELLE_LOAD + "\ndef go_deps():\n" + go_repository("com_example_a", "example.com/a", indent="    "),
        )

        result = run(
            tmp_path,
            ["--to-macro", "third_party/go.bzl%go_deps", "example.com/a@v1.0.0", "example.com/b"],
        )

        assert result.changed_files == [macro]
        assert read(macro) == (
            GAZELLE_LOAD
            + "\ndef go_deps():\n"
            + go_repository("com_example_a", "example.com/a", indent="    ", version="v1.0.0")
            + go_repository("com_example_b", "example.com/b", indent="    ")
        )


class TestManifestSource:
    def test_go_mod_with_prune_rewrites_macro(self, tmp_path: Path) -> None:
        ws_content = (
            'load("//:deps.bzl", "go_deps")\n'
            "\n"
            "# wsrepos:repository_macro deps.bzl%go_deps\n"
            "go_deps()\n"
        )
        ws = write_file(tmp_path / "WORKSPACE", ws_content)
        macro = write_file(
            tmp_path / "deps.bzl",
            "def go_deps():\n"
            + go_repository("com_example_a", "example.com/a", indent="    ", version="v1.0.0")
            + go_repository("com_example_b", "example.com/b", indent="    "),
        )
        write_file(
            tmp_path / "go.mod",
            """
            module example.com/me

            go 1.21

            require (
                example.com/a v1.0.0 // indirect
            )
            """,
        )
        write_file(
            tmp_path / "go.sum",
            """
            example.com/a v1.0.0 h1:aaa=
            example.com/a v1.0.0/go.mod h1:mod=
            """,
        )

        result = run(tmp_path, ["--from-file", "go.mod", "--prune"])

        assert result.reconcile.updated == ["com_example_a"]
        assert result.reconcile.removed == ["com_example_b"]
        assert result.changed_files == [macro]
        assert read(ws) == ws_content
        assert read(macro) == "def go_deps():\n" + go_repository(
            "com_example_a", "example.com/a", indent="    ", version="v1.0.0", sum="h1:aaa="
        )

    def test_manifest_warnings_come_first(self, tmp_path: Path) -> None:
        write_file(tmp_path / "WORKSPACE", "")
        write_file(
            tmp_path / "go.mod",
            """
            module example.com/me

            require example.com/a v1.0.0
            """,
        )

        result = run(tmp_path, ["--from-file", "go.mod"])

        assert result.reconcile.inserted == ["com_example_a"]
        assert "no go.sum entry" in str(result.reconcile.warnings[0])

    def test_missing_manifest_is_load_error(self, tmp_path: Path) -> None:
        from wsrepos.core.exceptions import LoadError

        write_file(tmp_path / "WORKSPACE", "")

        with pytest.raises(LoadError, match="file not found"):
            run(tmp_path, ["--from-file", "go.mod"])

    def test_result_serializes(self, tmp_path: Path) -> None:
        write_file(tmp_path / "WORKSPACE", "")

        payload = run(tmp_path, ["example.com/pkg"]).to_dict()

        assert payload["inserted"] == ["com_example_pkg"]
        assert payload["changed_files"] == [str(tmp_path / "WORKSPACE")]
        assert payload["dry_run"] is False


class TestWriteBack:
    def test_failed_macro_write_leaves_workspace_untouched(self, tmp_path: Path) -> None:
        from wsrepos.core.exceptions import SaveError

        content = 'workspace(name = "demo")\n'
        ws = write_file(tmp_path / "WORKSPACE", content)
        (tmp_path / "sub").write_text("a file, not a directory\n", encoding="utf-8")

        with pytest.raises(SaveError) as excinfo:
            run(tmp_path, ["--to-macro", "sub/deps.bzl%go_deps", "example.com/pkg"])

        assert excinfo.value.path == str(tmp_path / "sub" / "deps.bzl")
        assert read(ws) == content
        assert sorted(p.name for p in tmp_path.iterdir()) == ["WORKSPACE", "sub"]

    def test_macro_and_workspace_are_both_written(self, tmp_path: Path) -> None:
        write_file(tmp_path / "WORKSPACE", "")

        result = run(tmp_path, ["--to-macro", "third_party/deps.bzl%go_deps", "example.com/pkg"])

        macro = tmp_path / "third_party" / "deps.bzl"
        assert result.changed_files == [tmp_path / "WORKSPACE", macro]
        assert "def go_deps():" in read(macro)
        assert sorted(p.name for p in macro.parent.iterdir()) == ["deps.bzl"]
