"""Go configurer: go_repository metadata and attribute-stamping flags.

The flags map to go_repository attributes of the same name. When given,
they are set on every rule update-repos inserts or updates.
"""
from __future__ import annotations

import argparse
from dataclasses import dataclass
from typing import Any

from wsrepos.core.config.base import Config, ExtensionKey
from wsrepos.core.config.registry import BaseConfigurer
from wsrepos.core.exceptions import UsageError
from wsrepos.core.repos.descriptors import GO_REPOSITORY_KIND
from wsrepos.core.rules.kinds import KindInfo, LoadInfo

PROTO_MODES = ("default", "package", "legacy", "disable", "disable_global")
BUILD_EXTERNAL_MODES = ("external", "vendored")
BUILD_FILE_GENERATION_MODES = ("auto", "on", "off")

DEPS_BZL = "@bazel_gazelle//:deps.bzl"


@dataclass(frozen=True, slots=True)
class GoConfig:
    """Go flag values after defaults from project settings are applied."""

    build_file_proto_mode: str | None = None
    build_external: str | None = None
    build_file_generation: str | None = None

    def rule_attrs(self) -> dict[str, Any]:
        """go_repository attributes to stamp on inserted and updated rules."""
        attrs = {
            "build_file_proto_mode": self.build_file_proto_mode,
            "build_external": self.build_external,
            "build_file_generation": self.build_file_generation,
        }
        return {k: v for k, v in attrs.items() if v}


GO = ExtensionKey("go", GoConfig)


class GoLanguage(BaseConfigurer):
    """Declares go_repository and its flags."""

    name = "go"

    def register_flags(self, parser: argparse.ArgumentParser, command: str, config: Config) -> None:
        config.set_ext(GO, GoConfig())
        group = parser.add_argument_group("go")
        group.add_argument(
            "--build-file-proto-mode",
            "--build_file_proto_mode",
            dest="build_file_proto_mode",
            choices=PROTO_MODES,
            help="How BUILD files are generated for .proto files in new repositories",
        )
        group.add_argument(
            "--build-external",
            "--build_external",
            dest="build_external",
            choices=BUILD_EXTERNAL_MODES,
            help="Whether new repositories resolve dependencies externally or from vendor/",
        )
        group.add_argument(
            "--build-file-generation",
            "--build_file_generation",
            dest="build_file_generation",
            choices=BUILD_FILE_GENERATION_MODES,
            help="Whether BUILD files are generated in new repositories",
        )

    def check_flags(self, args: argparse.Namespace, config: Config) -> None:
        defaults = config.settings.go
        go_config = GoConfig(
            build_file_proto_mode=getattr(args, "build_file_proto_mode", None)
            or defaults.get("build_file_proto_mode"),
            build_external=getattr(args, "build_external", None) or defaults.get("build_external"),
            build_file_generation=getattr(args, "build_file_generation", None)
            or defaults.get("build_file_generation"),
        )
        if go_config.build_file_generation == "off" and go_config.build_file_proto_mode:
            raise UsageError(
                "--build-file-proto-mode has no effect with --build-file-generation=off",
                context={"build_file_proto_mode": go_config.build_file_proto_mode},
            )
        config.set_ext(GO, go_config)
        stamps = go_config.rule_attrs()
        if stamps:
            config.attr_stamps.setdefault(GO_REPOSITORY_KIND, {}).update(stamps)

    def known_kinds(self) -> dict[str, KindInfo]:
        return {
            GO_REPOSITORY_KIND: KindInfo(
                non_empty_attrs=frozenset({"importpath"}),
                mergeable_attrs=frozenset(
                    {
                        "importpath",
                        "sum",
                        "version",
                        "commit",
                        "remote",
                        "vcs",
                        "replace",
                        "build_file_proto_mode",
                        "build_external",
                        "build_file_generation",
                    }
                ),
                match_attrs=("importpath",),
            ),
        }

    def known_loads(self) -> list[LoadInfo]:
        return [LoadInfo(DEPS_BZL, (GO_REPOSITORY_KIND,))]


__all__ = [
    "GO",
    "GoConfig",
    "GoLanguage",
    "PROTO_MODES",
    "BUILD_EXTERNAL_MODES",
    "BUILD_FILE_GENERATION_MODES",
]
