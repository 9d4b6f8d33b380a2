"""Configuration for wsrepos commands.

Key components:
- Config / ExtensionKey: Shared per-invocation config with typed extension slots
- Configurer / ConfigurerRegistry: Participants contributing flags and rule kinds
- CommonConfigurer: Repository root and project settings
- UpdateReposConfigurer: Flags and validation for update-repos
- ProjectSettings: .wsrepos/config.yaml
"""
from __future__ import annotations

from wsrepos.core.config.base import DEFAULT_WORKSPACE_FILE, Config, ExtensionKey
from wsrepos.core.config.common import CommonConfigurer, find_repo_root
from wsrepos.core.config.registry import (
    BaseConfigurer,
    Configurer,
    ConfigurerRegistry,
    load_for_kind,
)
from wsrepos.core.config.settings import ProjectSettings, load_settings
from wsrepos.core.config.update_repos import (
    UPDATE_REPOS,
    UpdateReposConfig,
    UpdateReposConfigurer,
    ValidationState,
    get_update_repos_config,
    parse_macro_flag,
)


def default_registry() -> ConfigurerRegistry:
    """Configurers for update-repos: common, update-repos, then each language."""
    from wsrepos.language import languages

    return ConfigurerRegistry([CommonConfigurer(), UpdateReposConfigurer(), *languages()])


__all__ = [
    # Config
    "Config",
    "ExtensionKey",
    "DEFAULT_WORKSPACE_FILE",
    "ProjectSettings",
    "load_settings",
    # Registry
    "Configurer",
    "BaseConfigurer",
    "ConfigurerRegistry",
    "CommonConfigurer",
    "default_registry",
    "find_repo_root",
    "load_for_kind",
    # update-repos
    "UPDATE_REPOS",
    "UpdateReposConfig",
    "UpdateReposConfigurer",
    "ValidationState",
    "get_update_repos_config",
    "parse_macro_flag",
]
