"""Per-invocation configuration shared by all configurers."""
from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Any, Generic, TypeVar

from wsrepos.core.config.settings import ProjectSettings
from wsrepos.core.rules.file import Rule
from wsrepos.core.rules.kinds import KindInfo, LoadInfo

T = TypeVar("T")

DEFAULT_WORKSPACE_FILE = "WORKSPACE"


@dataclass(frozen=True)
class ExtensionKey(Generic[T]):
    """Typed handle for one configurer's private state in :class:`Config`.

    Attributes:
        name: Slot name, unique per configurer
        type: Class every stored value must be an instance of
    """

    name: str
    type: type[T]


class Config:
    """Configuration for one command invocation.

    Common fields are plain attributes. Configurer-specific state lives in a
    typed extension store: a configurer stores its state with
    :meth:`set_ext` during flag registration and reads it back with
    :meth:`ext`, both of which check the value's type against its key.
    """

    def __init__(self, repo_root: Path | None = None) -> None:
        self.repo_root: Path = Path(repo_root) if repo_root is not None else Path.cwd()
        self.workspace_file_name: str = DEFAULT_WORKSPACE_FILE
        self.settings: ProjectSettings = ProjectSettings()
        # Every rule declared across the workspace and its repository macros.
        self.repos: list[Rule] = []
        self.kinds: dict[str, KindInfo] = {}
        self.loads: list[LoadInfo] = []
        # Attributes stamped on inserted/updated rules, keyed by rule kind.
        self.attr_stamps: dict[str, dict[str, Any]] = {}
        self._exts: dict[str, Any] = {}

    @property
    def workspace_path(self) -> Path:
        return self.repo_root / self.workspace_file_name

    def set_ext(self, key: ExtensionKey[T], value: T) -> None:
        if not isinstance(value, key.type):
            raise TypeError(
                f"extension {key.name!r} expects {key.type.__name__}, got {type(value).__name__}"
            )
        self._exts[key.name] = value

    def ext(self, key: ExtensionKey[T]) -> T:
        """Return the state stored under ``key``.

        Raises:
            LookupError: If the owning configurer never registered its state
        """
        try:
            value = self._exts[key.name]
        except KeyError:
            raise LookupError(f"extension {key.name!r} is not registered") from None
        if not isinstance(value, key.type):
            raise TypeError(
                f"extension {key.name!r} holds {type(value).__name__}, not {key.type.__name__}"
            )
        return value

    def has_ext(self, key: ExtensionKey[Any]) -> bool:
        return key.name in self._exts


__all__ = ["Config", "ExtensionKey", "DEFAULT_WORKSPACE_FILE"]
