from __future__ import annotations

import os
from dataclasses import dataclass
from typing import Protocol, Sequence, TypeAlias

WILDCARD_SUFFIX = "/..."


class FileSystem(Protocol):
    def is_dir(self, path: str) -> bool: ...

    def exists(self, path: str) -> bool: ...


class OsFileSystem:
    """Answers path queries on disk, reading relative paths under ``base``."""

    def __init__(self, base: str | os.PathLike[str] | None = None) -> None:
        self.base = base

    def _path(self, path: str) -> str:
        return os.path.join(self.base, path) if self.base is not None else path

    def is_dir(self, path: str) -> bool:
        return os.path.isdir(self._path(path))

    def exists(self, path: str) -> bool:
        return os.path.exists(self._path(path))


@dataclass(frozen=True)
class CurrentDir:
    path: str = "."


@dataclass(frozen=True)
class WildcardTree:
    root: str


@dataclass(frozen=True)
class Directory:
    path: str


@dataclass(frozen=True)
class FileList:
    files: tuple[str, ...]


@dataclass(frozen=True)
class ImportRef:
    path: str


Target: TypeAlias = CurrentDir | WildcardTree | Directory | FileList | ImportRef


def classify_args(args: Sequence[str], *, fs: FileSystem | None = None) -> Target:
    """Decide what the command-line arguments ask to lint.

    Two or more arguments are always one explicit file list, whatever they
    name on disk.
    """
    filesystem = fs if fs is not None else OsFileSystem()
    if not args:
        return CurrentDir()
    if len(args) > 1:
        return FileList(tuple(args))
    arg = args[0]
    if arg.endswith(WILDCARD_SUFFIX):
        prefix = arg[: -len(WILDCARD_SUFFIX)]
        if prefix and filesystem.is_dir(prefix):
            return WildcardTree(prefix)
    if filesystem.is_dir(arg):
        return Directory(arg)
    if filesystem.exists(arg):
        return FileList((arg,))
    return ImportRef(arg)
