"""Tests for .wsrepos/config.yaml loading and schema validation."""
from __future__ import annotations

import logging
from pathlib import Path

import pytest

from helpers.workspace import write_file


class TestProjectSettings:
    """Settings file loading."""

    def test_defaults_without_settings_file(self, tmp_path: Path) -> None:
        from wsrepos.core.config import ProjectSettings, load_settings

        assert load_settings(tmp_path) == ProjectSettings()

    def test_loads_all_keys(self, tmp_path: Path) -> None:
        from wsrepos.core.config import load_settings

        write_file(
            tmp_path / ".wsrepos" / "config.yaml",
            """
            workspace_file: WORKSPACE.bazel
            logging:
              level: debug
              path: .wsrepos/logs/wsrepos.log
            go:
              build_file_proto_mode: disable_global
              build_file_generation: "on"
            """,
        )

        settings = load_settings(tmp_path)

        assert settings.workspace_file == "WORKSPACE.bazel"
        assert settings.log_level == "DEBUG"
        assert settings.log_path == ".wsrepos/logs/wsrepos.log"
        assert settings.go == {"build_file_proto_mode": "disable_global", "build_file_generation": "on"}

    def test_empty_file_is_defaults(self, tmp_path: Path) -> None:
        from wsrepos.core.config import ProjectSettings, load_settings

        write_file(tmp_path / ".wsrepos" / "config.yaml", "")

        assert load_settings(tmp_path) == ProjectSettings()

    def test_unknown_key_is_configuration_error(self, tmp_path: Path) -> None:
        from wsrepos.core.config import load_settings
        from wsrepos.core.exceptions import ConfigurationError

        write_file(tmp_path / ".wsrepos" / "config.yaml", "workspace: WORKSPACE\n")

        with pytest.raises(ConfigurationError, match="invalid settings"):
            load_settings(tmp_path)

    def test_bad_enum_value_names_the_key(self, tmp_path: Path) -> None:
        from wsrepos.core.config import load_settings
        from wsrepos.core.exceptions import ConfigurationError

        write_file(
            tmp_path / ".wsrepos" / "config.yaml",
            """
            go:
              build_external: sometimes
            """,
        )

        with pytest.raises(ConfigurationError, match="go.build_external") as excinfo:
            load_settings(tmp_path)
        assert excinfo.value.exit_code == 2

    def test_invalid_yaml_is_configuration_error(self, tmp_path: Path) -> None:
        from wsrepos.core.config import load_settings
        from wsrepos.core.exceptions import ConfigurationError

        write_file(tmp_path / ".wsrepos" / "config.yaml", "go: [unclosed\n")

        with pytest.raises(ConfigurationError):
            load_settings(tmp_path)


class TestCommonConfigurer:
    """Repository root and logging setup."""

    def test_log_path_installs_file_handler(self, tmp_path: Path) -> None:
        import argparse

        from wsrepos.core.config import CommonConfigurer, Config

        write_file(
            tmp_path / ".wsrepos" / "config.yaml",
            """
            logging:
              level: INFO
              path: logs/wsrepos.log
            """,
        )
        config = Config()
        configurer = CommonConfigurer()
        parser = argparse.ArgumentParser()
        configurer.register_flags(parser, "update-repos", config)

        configurer.check_flags(parser.parse_args(["--repo-root", str(tmp_path)]), config)
        logging.getLogger("wsrepos.test").info("hello from the test")
        for handler in logging.getLogger().handlers:
            handler.flush()

        assert config.repo_root == tmp_path.resolve()
        assert "hello from the test" in (tmp_path / "logs" / "wsrepos.log").read_text(encoding="utf-8")

    def test_repo_root_is_found_from_cwd(self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        from wsrepos.core.config import find_repo_root

        write_file(tmp_path / "WORKSPACE", "")
        nested = tmp_path / "a" / "b"
        nested.mkdir(parents=True)
        monkeypatch.chdir(nested)

        assert find_repo_root(Path.cwd()) == tmp_path.resolve()
