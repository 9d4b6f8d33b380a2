"""Configurer interface and registry.

A configurer is one participant in building the shared :class:`Config`:
the common flags, the update-repos command, and every language. Each one
registers its own flags, then validates them once all flags are parsed,
and declares the rule kinds and load statements it needs recognized.

The set of configurers for an invocation is an explicit ordered list
(see :func:`wsrepos.core.config.default_registry`). Flags are registered and
checked in that order, and later configurers may read state earlier ones
stored in the config.
"""
from __future__ import annotations

import argparse
import logging
from typing import Iterable, Iterator, Protocol, runtime_checkable

from wsrepos.core.config.base import Config
from wsrepos.core.exceptions import ConfigurationError
from wsrepos.core.rules.kinds import KindInfo, LoadInfo

logger = logging.getLogger(__name__)


@runtime_checkable
class Configurer(Protocol):
    """Protocol for configurers."""

    name: str

    def register_flags(self, parser: argparse.ArgumentParser, command: str, config: Config) -> None:
        """Add flags to ``parser`` and store private state in ``config``."""
        ...

    def check_flags(self, args: argparse.Namespace, config: Config) -> None:
        """Validate parsed flags against the whole config.

        Raises:
            ConfigurationError: On an invalid flag combination
        """
        ...

    def known_kinds(self) -> dict[str, KindInfo]:
        """Rule kinds this configurer understands."""
        ...

    def known_loads(self) -> list[LoadInfo]:
        """Load statements providing those kinds."""
        ...


class BaseConfigurer:
    """Configurer with no flags, no checks and no kinds."""

    name: str = ""

    def register_flags(self, parser: argparse.ArgumentParser, command: str, config: Config) -> None:
        return None

    def check_flags(self, args: argparse.Namespace, config: Config) -> None:
        return None

    def known_kinds(self) -> dict[str, KindInfo]:
        return {}

    def known_loads(self) -> list[LoadInfo]:
        return []


class ConfigurerRegistry:
    """Ordered set of configurers for one command invocation."""

    def __init__(self, configurers: Iterable[Configurer]) -> None:
        self._configurers: tuple[Configurer, ...] = tuple(configurers)
        for configurer in self._configurers:
            if not isinstance(configurer, Configurer):
                raise TypeError(f"{type(configurer).__name__} does not implement Configurer")
            if not configurer.name:
                raise ValueError(f"configurer {type(configurer).__name__} has an empty name")
        names = [c.name for c in self._configurers]
        duplicates = sorted({n for n in names if names.count(n) > 1})
        if duplicates:
            raise ValueError(f"duplicate configurer names: {', '.join(duplicates)}")

    def __iter__(self) -> Iterator[Configurer]:
        return iter(self._configurers)

    def __len__(self) -> int:
        return len(self._configurers)

    @property
    def names(self) -> list[str]:
        return [c.name for c in self._configurers]

    def register_flags(self, parser: argparse.ArgumentParser, command: str, config: Config) -> None:
        """Let every configurer add its flags, in registry order.

        Raises:
            ConfigurationError: If two configurers claim the same option string
        """
        for configurer in self._configurers:
            try:
                configurer.register_flags(parser, command, config)
            except argparse.ArgumentError as exc:
                raise ConfigurationError(
                    f"configurer {configurer.name!r} registered a conflicting flag: {exc}",
                    context={"configurer": configurer.name},
                ) from exc

    def check_flags(self, args: argparse.Namespace, config: Config) -> None:
        """Validate flags with every configurer, then publish kind metadata.

        Stops at the first configurer that rejects the configuration.
        """
        for configurer in self._configurers:
            logger.debug("checking flags for %s", configurer.name)
            configurer.check_flags(args, config)
        config.kinds = self.known_kinds()
        config.loads = self.known_loads()

    def known_kinds(self) -> dict[str, KindInfo]:
        """Merge declared kinds; a later configurer wins on a name clash."""
        kinds: dict[str, KindInfo] = {}
        for configurer in self._configurers:
            for kind, info in configurer.known_kinds().items():
                if kind in kinds and kinds[kind] != info:
                    logger.debug("kind %s redeclared by %s", kind, configurer.name)
                kinds[kind] = info
        return kinds

    def known_loads(self) -> list[LoadInfo]:
        loads: list[LoadInfo] = []
        for configurer in self._configurers:
            loads.extend(configurer.known_loads())
        return loads

    def load_for_kind(self, kind: str) -> LoadInfo | None:
        """Return the last declared load providing ``kind``."""
        return load_for_kind(self.known_loads(), kind)


def load_for_kind(loads: Iterable[LoadInfo], kind: str) -> LoadInfo | None:
    """Return the last load in ``loads`` that provides ``kind``."""
    found = None
    for load in loads:
        if load.provides(kind):
            found = load
    return found


__all__ = ["Configurer", "BaseConfigurer", "ConfigurerRegistry", "load_for_kind"]
