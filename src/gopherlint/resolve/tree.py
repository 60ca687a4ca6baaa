from __future__ import annotations

import os
from dataclasses import dataclass
from typing import Callable, Iterable, Iterator

from gopherlint.config import DEFAULT_EXCLUDE_DIRS
from gopherlint.order_contract import sort_once

ExcludePredicate = Callable[[str], bool]


@dataclass(frozen=True)
class DirExcluder:
    """Directory-name predicate for wildcard expansion.

    Names starting with ``.`` or ``_`` are always excluded; ``names`` adds
    exact directory names such as ``vendor`` or ``testdata``.
    """

    names: frozenset[str] = frozenset(DEFAULT_EXCLUDE_DIRS)

    @classmethod
    def from_names(cls, names: Iterable[str]) -> "DirExcluder":
        return cls(frozenset(names))

    def __call__(self, name: str) -> bool:
        return name.startswith((".", "_")) or name in self.names


def _has_go_files(filenames: Iterable[str]) -> bool:
    return any(name.endswith(".go") for name in filenames)


def iter_package_dirs(
    root: str,
    *,
    exclude: ExcludePredicate | None = None,
    base: str | os.PathLike[str] | None = None,
) -> Iterator[str]:
    """Yield ``root`` and its descendant directories that hold Go files.

    The walk is top-down with sorted directory names, so the order is stable
    for an unchanged tree; excluded directories are pruned with their subtrees.
    A relative ``root`` is walked under ``base`` when one is given, and the
    yielded names stay relative to it.
    """
    skip = exclude if exclude is not None else DirExcluder()
    start = root.rstrip("/\\") or root
    top = os.path.join(base, start) if base is not None else start
    for dirpath, dirnames, filenames in os.walk(top, topdown=True):
        dirnames[:] = sort_once(
            (name for name in dirnames if not skip(name)),
            source="iter_package_dirs.dirnames",
        )
        if _has_go_files(filenames):
            rel = os.path.relpath(dirpath, top)
            yield start if rel == "." else os.path.join(start, rel)
