from __future__ import annotations

import importlib
from typing import Protocol, runtime_checkable

from gopherlint.exceptions import ConfigError
from gopherlint.lint.linter import Linter
from gopherlint.lint.model import Position, Problem
from gopherlint.loader import Package


@runtime_checkable
class Analyzer(Protocol):
    def lint_package(self, package: Package) -> list[Problem]: ...


def load_engine(spec: str) -> Analyzer:
    """Build the analysis engine named by a ``module:attr`` spec.

    ``attr`` may be a class or factory (called without arguments) or an
    already-constructed engine object.
    """
    module_name, sep, attr = spec.partition(":")
    if not sep or not module_name or not attr:
        raise ConfigError(f"engine must be given as module:attr, got {spec!r}")
    try:
        module = importlib.import_module(module_name)
    except ImportError as exc:
        raise ConfigError(f"cannot import engine module {module_name!r}: {exc}") from exc
    target = getattr(module, attr, None)
    if target is None:
        raise ConfigError(f"module {module_name!r} has no attribute {attr!r}")
    if isinstance(target, type):
        engine = target()
    elif isinstance(target, Analyzer):
        engine = target
    elif callable(target):
        engine = target()
    else:
        raise ConfigError(f"engine {spec!r} is neither an engine nor a factory")
    if not isinstance(engine, Analyzer):
        raise ConfigError(f"engine {spec!r} does not provide lint_package()")
    return engine


__all__ = ["Analyzer", "Linter", "Position", "Problem", "load_engine"]
