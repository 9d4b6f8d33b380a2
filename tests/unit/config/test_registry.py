"""Tests for the configurer registry and the typed extension store."""
from __future__ import annotations

import argparse
from dataclasses import dataclass, field

import pytest


@dataclass
class Recorder:
    calls: list[str] = field(default_factory=list)


def make_configurer(name: str, *, kinds=None, loads=None, flag: str | None = None):
    """A configurer that records calls in a shared Recorder extension."""
    from wsrepos.core.config import BaseConfigurer, ExtensionKey

    key = ExtensionKey("recorder", Recorder)

    class _Configurer(BaseConfigurer):
        def register_flags(self, parser, command, config):
            if not config.has_ext(key):
                config.set_ext(key, Recorder())
            config.ext(key).calls.append(f"register:{self.name}")
            if flag:
                parser.add_argument(flag)

        def check_flags(self, args, config):
            config.ext(key).calls.append(f"check:{self.name}")

        def known_kinds(self):
            return dict(kinds or {})

        def known_loads(self):
            return list(loads or [])

    configurer = _Configurer()
    configurer.name = name
    return configurer, key


class TestConfigurerRegistry:
    """Ordering, merging and conflicts."""

    def test_register_and_check_follow_registry_order(self) -> None:
        from wsrepos.core.config import Config, ConfigurerRegistry

        first, key = make_configurer("first")
        second, _ = make_configurer("second")
        registry = ConfigurerRegistry([first, second])
        config = Config()
        parser = argparse.ArgumentParser()

        registry.register_flags(parser, "update-repos", config)
        registry.check_flags(parser.parse_args([]), config)

        assert config.ext(key).calls == ["register:first", "register:second", "check:first", "check:second"]
        assert registry.names == ["first", "second"]
        assert len(registry) == 2

    def test_kinds_merge_last_writer_wins(self) -> None:
        from wsrepos.core.config import Config, ConfigurerRegistry
        from wsrepos.core.rules import KindInfo

        early = KindInfo(mergeable_attrs=frozenset({"a"}))
        late = KindInfo(mergeable_attrs=frozenset({"b"}))
        first, _ = make_configurer("first", kinds={"go_repository": early, "http_archive": early})
        second, _ = make_configurer("second", kinds={"go_repository": late})
        registry = ConfigurerRegistry([first, second])
        config = Config()
        parser = argparse.ArgumentParser()
        registry.register_flags(parser, "update-repos", config)

        registry.check_flags(parser.parse_args([]), config)

        assert config.kinds == {"go_repository": late, "http_archive": early}

    def test_loads_concatenate_and_last_provider_wins(self) -> None:
        from wsrepos.core.config import ConfigurerRegistry
        from wsrepos.core.rules import LoadInfo

        a = LoadInfo("@a//:deps.bzl", ("go_repository",))
        b = LoadInfo("@b//:deps.bzl", ("go_repository", "other"))
        first, _ = make_configurer("first", loads=[a])
        second, _ = make_configurer("second", loads=[b])
        registry = ConfigurerRegistry([first, second])

        assert registry.known_loads() == [a, b]
        assert registry.load_for_kind("go_repository") is b
        assert registry.load_for_kind("missing") is None

    def test_conflicting_flags_fail_at_registration(self) -> None:
        from wsrepos.core.config import Config, ConfigurerRegistry
        from wsrepos.core.exceptions import ConfigurationError

        first, _ = make_configurer("first", flag="--shared")
        second, _ = make_configurer("second", flag="--shared")
        registry = ConfigurerRegistry([first, second])

        with pytest.raises(ConfigurationError, match="second"):
            registry.register_flags(argparse.ArgumentParser(), "update-repos", Config())

    def test_duplicate_names_are_rejected(self) -> None:
        from wsrepos.core.config import ConfigurerRegistry

        first, _ = make_configurer("same")
        second, _ = make_configurer("same")

        with pytest.raises(ValueError, match="duplicate"):
            ConfigurerRegistry([first, second])

    def test_non_configurer_is_rejected(self) -> None:
        from wsrepos.core.config import ConfigurerRegistry

        with pytest.raises(TypeError):
            ConfigurerRegistry([object()])

    def test_default_registry_order(self) -> None:
        from wsrepos.core.config import default_registry

        assert default_registry().names == ["common", "update-repos", "go"]


class TestExtensionStore:
    """Typed per-configurer state in Config."""

    def test_round_trip(self) -> None:
        from wsrepos.core.config import Config, ExtensionKey

        key = ExtensionKey("recorder", Recorder)
        config = Config()
        config.set_ext(key, Recorder(["x"]))

        assert config.has_ext(key)
        assert config.ext(key).calls == ["x"]

    def test_wrong_type_is_rejected_on_store(self) -> None:
        from wsrepos.core.config import Config, ExtensionKey

        key = ExtensionKey("recorder", Recorder)

        with pytest.raises(TypeError, match="expects Recorder"):
            Config().set_ext(key, "not a recorder")

    def test_wrong_type_is_rejected_on_read(self) -> None:
        from wsrepos.core.config import Config, ExtensionKey

        config = Config()
        config.set_ext(ExtensionKey("slot", str), "text")

        with pytest.raises(TypeError):
            config.ext(ExtensionKey("slot", Recorder))

    def test_missing_extension(self) -> None:
        from wsrepos.core.config import Config, ExtensionKey

        with pytest.raises(LookupError, match="not registered"):
            Config().ext(ExtensionKey("absent", Recorder))
