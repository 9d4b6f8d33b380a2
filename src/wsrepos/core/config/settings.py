"""Project settings loaded from ``.wsrepos/config.yaml``.

All keys are optional::

    workspace_file: WORKSPACE.bazel
    logging:
      level: DEBUG
      path: .wsrepos/logs/wsrepos.log
    go:
      build_file_proto_mode: disable_global
"""
from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

import yaml

from wsrepos.core.exceptions import ConfigurationError
from wsrepos.core.schemas import schema_errors

SETTINGS_DIR = ".wsrepos"
SETTINGS_FILE = "config.yaml"
SCHEMA_NAME = "settings"


@dataclass(frozen=True, slots=True)
class ProjectSettings:
    """Validated project settings.

    Attributes:
        workspace_file: Root build file name, or None to auto-detect
        log_level: Level for the log file
        log_path: Log file relative to the repository root, or None
        go: Defaults for the Go language flags
    """

    workspace_file: str | None = None
    log_level: str = "INFO"
    log_path: str | None = None
    go: dict[str, str] = field(default_factory=dict)

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> ProjectSettings:
        logging_cfg = data.get("logging") or {}
        return cls(
            workspace_file=data.get("workspace_file"),
            log_level=str(logging_cfg.get("level", "INFO")).upper(),
            log_path=logging_cfg.get("path"),
            go=dict(data.get("go") or {}),
        )


def settings_path(repo_root: Path) -> Path:
    return repo_root / SETTINGS_DIR / SETTINGS_FILE


def load_settings(repo_root: Path) -> ProjectSettings:
    """Load and validate project settings; defaults when the file is absent.

    Raises:
        ConfigurationError: If the file is not valid YAML or fails the schema
    """
    path = settings_path(repo_root)
    if not path.exists():
        return ProjectSettings()

    try:
        data = yaml.safe_load(path.read_text(encoding="utf-8")) or {}
    except (OSError, yaml.YAMLError) as exc:
        raise ConfigurationError(f"{path}: {exc}", context={"path": str(path)}) from exc

    errors = schema_errors(data, SCHEMA_NAME)
    if errors:
        raise ConfigurationError(
            f"{path}: invalid settings: {'; '.join(errors)}",
            context={"path": str(path), "errors": errors},
        )
    return ProjectSettings.from_dict(data)


__all__ = ["ProjectSettings", "load_settings", "settings_path"]
