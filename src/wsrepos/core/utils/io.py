"""File I/O primitives for build files and manifests.

Build files are only ever replaced whole: the new text is written to a
temporary file next to the target, fsync'd, then renamed into place.
"""
from __future__ import annotations

import fcntl
import os
import tempfile
from pathlib import Path
from typing import Callable, Optional, TextIO, Union

PathLike = Union[str, Path]


def ensure_parent_dir(path: Path) -> None:
    """Ensure the parent directory for ``path`` exists."""
    Path(path).parent.mkdir(parents=True, exist_ok=True)


def ensure_directory(path: Path) -> Path:
    """Create ``path`` as a directory if needed and return it.

    Raises:
        NotADirectoryError: If path exists but is not a directory
    """
    path = Path(path)
    if path.exists():
        if not path.is_dir():
            raise NotADirectoryError(f"Path exists but is not a directory: {path}")
        return path
    path.mkdir(parents=True, exist_ok=True)
    return path


def _write_temp(
    path: Path,
    write_fn: Callable[[TextIO], None],
    *,
    encoding: str = "utf-8",
) -> Path:
    """Write a fsync'd temp file next to ``path`` and return its path.

    The temp file is removed again if writing fails.
    """
    ensure_parent_dir(path)
    tmp_path: Optional[Path] = None
    try:
        with tempfile.NamedTemporaryFile(
            "w",
            encoding=encoding,
            dir=str(path.parent),
            prefix=f".{path.name}.",
            delete=False,
            newline="",
        ) as f:
            tmp_path = Path(f.name)
            fcntl.flock(f.fileno(), fcntl.LOCK_EX)
            write_fn(f)
            f.flush()
            os.fsync(f.fileno())
            fcntl.flock(f.fileno(), fcntl.LOCK_UN)
        if path.exists():
            os.chmod(tmp_path, path.stat().st_mode & 0o777)
    except BaseException:
        _discard(tmp_path)
        raise
    return tmp_path


def _discard(tmp_path: Optional[Path]) -> None:
    if tmp_path is None:
        return
    try:
        tmp_path.unlink(missing_ok=True)
    except OSError:
        # Best-effort cleanup; never mask the original error
        pass


def atomic_write(
    path: Path,
    write_fn: Callable[[TextIO], None],
    *,
    encoding: str = "utf-8",
) -> None:
    """Write to ``path`` atomically using a temp file + fsync + rename.

    Args:
        path: Target file path
        write_fn: Callable that writes content to the file object
        encoding: Text encoding (default: utf-8)
    """
    path = Path(path)
    tmp_path = _write_temp(path, write_fn, encoding=encoding)
    try:
        os.replace(str(tmp_path), str(path))
    except BaseException:
        _discard(tmp_path)
        raise


class StagedWrites:
    """Replace several files together, or none of them.

    Each :meth:`stage` call writes the new content to a temp file beside its
    target; :meth:`commit` renames them into place in staging order. Leaving
    the ``with`` block without committing discards every staged temp file.

    Example::

        with StagedWrites() as staged:
            staged.stage(macro_path, macro_text)
            staged.stage(workspace_path, workspace_text)
            staged.commit()
    """

    def __init__(self, *, encoding: str = "utf-8") -> None:
        self.encoding = encoding
        self._staged: list[tuple[Path, Path]] = []

    def __enter__(self) -> "StagedWrites":
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.discard()

    def stage(self, path: PathLike, content: str) -> None:
        """Write ``content`` to a temp file for ``path``.

        Raises:
            OSError: If the temp file cannot be created or written
        """
        target = Path(path)

        def _writer(f: TextIO) -> None:
            f.write(content)

        self._staged.append((_write_temp(target, _writer, encoding=self.encoding), target))

    def commit(self) -> None:
        """Rename every staged temp file over its target."""
        while self._staged:
            tmp_path, target = self._staged[0]
            os.replace(str(tmp_path), str(target))
            self._staged.pop(0)

    def discard(self) -> None:
        """Remove temp files that were not committed."""
        for tmp_path, _ in self._staged:
            _discard(tmp_path)
        self._staged.clear()


def read_text(path: PathLike) -> str:
    """Read a UTF-8 text file.

    Raises:
        FileNotFoundError: If the file does not exist
    """
    path = Path(path)
    if not path.exists():
        raise FileNotFoundError(f"Text file not found: {path}")
    with open(path, encoding="utf-8", newline="") as f:
        return f.read()


def write_text(path: PathLike, content: str) -> None:
    """Atomically write UTF-8 text to ``path``."""
    target = Path(path)

    def _writer(f: TextIO) -> None:
        f.write(content)

    atomic_write(target, _writer)


__all__ = [
    "PathLike",
    "ensure_parent_dir",
    "ensure_directory",
    "atomic_write",
    "StagedWrites",
    "read_text",
    "write_text",
]
