"""Accumulate compilation units for one run and load them once.

A :class:`LoadConfig` is created at startup, receives every unit registration
made while resolving the command line, and is consumed by a single
:meth:`LoadConfig.load` call that returns the :class:`Program` handed to the
analysis engine.
"""

from __future__ import annotations

import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Callable

from gopherlint.exceptions import (
    LintError,
    LoadError,
    RegistrationError,
    SourceSyntaxError,
    UnitLoadError,
)
from gopherlint.ingest.go_build import BuildContext, GoPackage
from gopherlint.ingest.go_source import GoFile, parse_file


@dataclass(frozen=True)
class UnitSpec:
    label: str
    filenames: tuple[str, ...]
    sources: tuple[bytes, ...] = field(repr=False, default=())


@dataclass(frozen=True)
class Package:
    label: str
    name: str
    files: tuple[GoFile, ...]
    errors: tuple[SourceSyntaxError, ...] = ()

    @property
    def filenames(self) -> tuple[str, ...]:
        return tuple(gofile.filename for gofile in self.files)


@dataclass(frozen=True)
class Program:
    created: tuple[Package, ...]
    errors: tuple[UnitLoadError, ...] = ()


def join_dir_with_filenames(dirname: str, filenames: list[str] | tuple[str, ...]) -> list[str]:
    if dirname == ".":
        return list(filenames)
    return [os.path.join(dirname, filename) for filename in filenames]


@dataclass
class LoadConfig:
    cwd: Path = field(default_factory=Path.cwd)
    build: BuildContext = field(default_factory=BuildContext.from_env)
    allow_errors: bool = True
    parse_comments: bool = True
    units: list[UnitSpec] = field(default_factory=list)
    _loaded: bool = field(default=False, repr=False)

    def _check_open(self) -> None:
        if self._loaded:
            raise LoadError("load configuration was already consumed")

    def _qualify(self, filename: str) -> str:
        if os.path.isabs(filename):
            return filename
        return os.path.normpath(filename)

    def create_from_filenames(self, *filenames: str, label: str | None = None) -> UnitSpec:
        """Register one unit made of ``filenames``, read relative to ``cwd``."""
        self._check_open()
        if not filenames:
            raise RegistrationError("no files given for compilation unit")
        ordered: list[str] = []
        seen: set[str] = set()
        for filename in filenames:
            qualified = self._qualify(str(filename))
            if qualified in seen:
                continue
            seen.add(qualified)
            ordered.append(qualified)
        sources: list[bytes] = []
        for filename in ordered:
            path = Path(filename) if os.path.isabs(filename) else self.cwd / filename
            if path.is_dir():
                raise RegistrationError(f"{filename}: is a directory")
            try:
                sources.append(path.read_bytes())
            except OSError as exc:
                raise RegistrationError(f"{filename}: {exc.strerror or exc}") from exc
        unit = UnitSpec(
            label=label or _default_label(ordered),
            filenames=tuple(ordered),
            sources=tuple(sources),
        )
        self.units.append(unit)
        return unit

    def add_package(
        self,
        pkg: GoPackage,
        *,
        dirname: str | None = None,
        on_error: Callable[[LintError], None] | None = None,
    ) -> list[UnitSpec]:
        """Register the primary and external-test units of ``pkg``.

        Primary and in-package test files share one unit; external test files
        belong to ``<name>_test`` and always get a unit of their own. With
        ``on_error`` a failed registration is reported and the other unit is
        still attempted; without it the error propagates.
        """
        self._check_open()
        base = dirname if dirname is not None else pkg.dir
        label = pkg.import_path or base
        groups = [
            (label, join_dir_with_filenames(base, [*pkg.go_files, *pkg.test_go_files])),
            (f"{label} [{pkg.name}_test]", join_dir_with_filenames(base, pkg.xtest_go_files)),
        ]
        registered: list[UnitSpec] = []
        for unit_label, filenames in groups:
            if not filenames:
                continue
            try:
                registered.append(self.create_from_filenames(*filenames, label=unit_label))
            except RegistrationError as exc:
                if on_error is None:
                    raise
                on_error(exc)
        return registered

    def import_with_tests(
        self,
        import_path: str,
        *,
        on_error: Callable[[LintError], None] | None = None,
    ) -> list[UnitSpec]:
        """Resolve ``import_path`` and register it together with its test files."""
        self._check_open()
        pkg = self.build.import_path(import_path, src_dir=self.cwd)
        return self.add_package(pkg, dirname=self._relative_dir(pkg.dir), on_error=on_error)

    def resolve_dir(self, dirname: str) -> Path:
        """Return ``dirname`` as a path on disk, read relative to ``cwd``."""
        return Path(dirname) if os.path.isabs(dirname) else self.cwd / dirname

    def _relative_dir(self, dirname: str) -> str:
        path = Path(dirname)
        if not path.is_absolute():
            return dirname
        try:
            relative = path.resolve().relative_to(self.cwd.resolve())
        except ValueError:
            return dirname
        return str(relative) if str(relative) != "." else "."

    def load(self) -> Program:
        """Parse every registered unit. May be called exactly once."""
        self._check_open()
        self._loaded = True
        if not self.units:
            raise LoadError("no initial packages were loaded")
        created: list[Package] = []
        failures: list[UnitLoadError] = []
        for unit in self.units:
            files = tuple(
                parse_file(filename, source, parse_comments=self.parse_comments)
                for filename, source in zip(unit.filenames, unit.sources)
            )
            errors = tuple(error for gofile in files for error in gofile.errors)
            if errors and not self.allow_errors:
                failures.append(UnitLoadError(f"{unit.label}: {errors[0]}"))
                continue
            created.append(
                Package(
                    label=unit.label,
                    name=_package_name(files),
                    files=files,
                    errors=errors,
                )
            )
        return Program(created=tuple(created), errors=tuple(failures))


def _default_label(filenames: list[str]) -> str:
    dirs = {os.path.dirname(filename) or "." for filename in filenames}
    if len(dirs) == 1:
        return dirs.pop()
    return "command-line-arguments"


def _package_name(files: tuple[GoFile, ...]) -> str:
    for gofile in files:
        if gofile.package_name:
            return gofile.package_name
    return ""
