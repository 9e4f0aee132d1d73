"""Filesystem capability used by the merger.

The merger never touches ``os`` directly; every predicate and mutation goes
through a :class:`FileSystem` so tests can swap the real disk for an
in-memory fake:

    - LocalFileSystem: thin mapping onto ``os`` / ``pathlib``
    - InMemoryFileSystem: dict-backed fake with explicit directories and links

Mutating operations (``unlink``, ``mkdir``) report failure by returning
``False`` rather than raising, leaving the decision of how to surface the
failure to the caller.
"""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Protocol, runtime_checkable

__all__ = [
    "FileSystem",
    "InMemoryFileSystem",
    "LocalFileSystem",
    "StrPath",
]

logger = logging.getLogger(__name__)

StrPath = str | os.PathLike[str]


@runtime_checkable
class FileSystem(Protocol):
    """Filesystem operations the merger depends on."""

    def exists(self, path: StrPath) -> bool:
        """True if anything (file, directory, link, dangling link) is at path."""
        ...

    def is_file(self, path: StrPath) -> bool:
        """True for regular files only (symbolic links excluded)."""
        ...

    def is_dir(self, path: StrPath) -> bool:
        """True for directories, including symbolic links to directories."""
        ...

    def is_link(self, path: StrPath) -> bool:
        ...

    def is_writable(self, path: StrPath) -> bool:
        ...

    def size(self, path: StrPath) -> int:
        ...

    def read_bytes(self, path: StrPath) -> bytes:
        ...

    def unlink(self, path: StrPath) -> bool:
        """Delete a file. Returns False if nothing was deleted."""
        ...

    def mkdir(self, path: StrPath) -> bool:
        """Create a directory and its parents. Returns False on failure."""
        ...


class LocalFileSystem:
    """FileSystem backed by the real disk."""

    def exists(self, path: StrPath) -> bool:
        return os.path.lexists(path)

    def is_file(self, path: StrPath) -> bool:
        return not os.path.islink(path) and os.path.isfile(path)

    def is_dir(self, path: StrPath) -> bool:
        return os.path.isdir(path)

    def is_link(self, path: StrPath) -> bool:
        return os.path.islink(path)

    def is_writable(self, path: StrPath) -> bool:
        return os.access(path, os.W_OK)

    def size(self, path: StrPath) -> int:
        return os.path.getsize(path)

    def read_bytes(self, path: StrPath) -> bytes:
        return Path(path).read_bytes()

    def unlink(self, path: StrPath) -> bool:
        if not self.exists(path):
            return False
        try:
            os.unlink(path)
        except OSError as exc:
            logger.debug("Could not delete %s: %s", path, exc)
            return False
        return True

    def mkdir(self, path: StrPath) -> bool:
        try:
            Path(path).mkdir(parents=True, exist_ok=True)
        except OSError as exc:
            logger.debug("Could not create directory %s: %s", path, exc)
            return False
        return True


def _key(path: StrPath) -> str:
    return os.path.normpath(os.fspath(path))


@dataclass
class InMemoryFileSystem:
    """Dict-backed FileSystem for tests.

    ``files`` maps normalised paths to their contents. The root and the
    current directory always exist. Paths listed in ``read_only`` cannot be
    written into, deleted or created; ``links`` holds symbolic links (the
    fake does not follow them).
    """

    files: dict[str, bytes] = field(default_factory=dict)
    directories: set[str] = field(default_factory=set)
    links: set[str] = field(default_factory=set)
    read_only: set[str] = field(default_factory=set)

    def __post_init__(self) -> None:
        self.files = {_key(p): data for p, data in self.files.items()}
        self.directories = {_key(p) for p in self.directories} | {os.sep, os.curdir}
        self.links = {_key(p) for p in self.links}
        self.read_only = {_key(p) for p in self.read_only}

    def write_bytes(self, path: StrPath, data: bytes) -> None:
        """Create or replace a file; its parent must already exist."""
        key = _key(path)
        parent = os.path.dirname(key) or os.curdir
        if parent not in self.directories:
            raise FileNotFoundError(f"No such directory: {parent}")
        if parent in self.read_only:
            raise PermissionError(f"Read-only directory: {parent}")
        self.files[key] = data

    def exists(self, path: StrPath) -> bool:
        key = _key(path)
        return key in self.files or key in self.directories or key in self.links

    def is_file(self, path: StrPath) -> bool:
        return _key(path) in self.files

    def is_dir(self, path: StrPath) -> bool:
        return _key(path) in self.directories

    def is_link(self, path: StrPath) -> bool:
        return _key(path) in self.links

    def is_writable(self, path: StrPath) -> bool:
        key = _key(path)
        return self.exists(key) and key not in self.read_only

    def size(self, path: StrPath) -> int:
        try:
            return len(self.files[_key(path)])
        except KeyError:
            raise FileNotFoundError(f"No such file: {path}") from None

    def read_bytes(self, path: StrPath) -> bytes:
        try:
            return self.files[_key(path)]
        except KeyError:
            raise FileNotFoundError(f"No such file: {path}") from None

    def unlink(self, path: StrPath) -> bool:
        key = _key(path)
        if key in self.read_only:
            return False
        if key in self.files:
            del self.files[key]
            return True
        if key in self.links:
            self.links.discard(key)
            return True
        return False

    def mkdir(self, path: StrPath) -> bool:
        key = _key(path)
        pending: list[str] = []
        current = key
        while current not in self.directories:
            if current in self.files or current in self.links or current in self.read_only:
                return False
            pending.append(current)
            parent = os.path.dirname(current) or os.curdir
            if parent == current:
                break
            current = parent
        if current in self.read_only:
            return False
        self.directories.update(pending)
        return True
