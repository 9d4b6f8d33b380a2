"""Flags every command shares: repository root and project settings."""
from __future__ import annotations

import argparse
import logging
from pathlib import Path

from wsrepos.core.config.base import DEFAULT_WORKSPACE_FILE, Config
from wsrepos.core.config.registry import BaseConfigurer
from wsrepos.core.config.settings import load_settings
from wsrepos.core.logging import configure_stdlib_logging

logger = logging.getLogger(__name__)

WORKSPACE_FILE_NAMES = (DEFAULT_WORKSPACE_FILE, "WORKSPACE.bazel")


def find_repo_root(start: Path) -> Path | None:
    """Walk up from ``start`` to the first directory holding a WORKSPACE file."""
    start = start.resolve()
    for directory in (start, *start.parents):
        if any((directory / name).is_file() for name in WORKSPACE_FILE_NAMES):
            return directory
    return None


def detect_workspace_file(repo_root: Path) -> str:
    for name in WORKSPACE_FILE_NAMES:
        if (repo_root / name).is_file():
            return name
    return DEFAULT_WORKSPACE_FILE


class CommonConfigurer(BaseConfigurer):
    """Resolves the repository root and loads ``.wsrepos/config.yaml``."""

    name = "common"

    def register_flags(self, parser: argparse.ArgumentParser, command: str, config: Config) -> None:
        parser.add_argument(
            "--repo-root",
            "--repo_root",
            dest="repo_root",
            type=str,
            help="Repository root (default: nearest parent directory with a WORKSPACE file)",
        )

    def check_flags(self, args: argparse.Namespace, config: Config) -> None:
        repo_root = getattr(args, "repo_root", None)
        if repo_root:
            config.repo_root = Path(repo_root).expanduser().resolve()
        else:
            config.repo_root = find_repo_root(Path.cwd()) or Path.cwd().resolve()

        config.settings = load_settings(config.repo_root)
        config.workspace_file_name = config.settings.workspace_file or detect_workspace_file(config.repo_root)

        if config.settings.log_path:
            configure_stdlib_logging(
                log_path=config.repo_root / config.settings.log_path,
                level=config.settings.log_level,
            )
        logger.debug("repository root: %s", config.repo_root)


__all__ = ["CommonConfigurer", "find_repo_root", "detect_workspace_file", "WORKSPACE_FILE_NAMES"]
