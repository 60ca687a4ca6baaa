"""Error taxonomy for gopherlint runs.

Only :class:`LoadError` is fatal to a run. Every other error is reported and
the directory, unit, or import it belongs to is skipped.
"""

from __future__ import annotations

from pathlib import Path


class LintError(Exception):
    """Base class for every error gopherlint reports."""


class ConfigError(LintError):
    pass


class PackageMetadataError(LintError):
    """A directory could not be read as a Go package."""

    def __init__(self, message: str, *, dirname: str | Path = "") -> None:
        super().__init__(message)
        self.dirname = str(dirname)


class NoGoError(PackageMetadataError):
    """The directory holds no buildable Go source files. Not reported."""

    def __init__(self, dirname: str | Path) -> None:
        super().__init__(f"no buildable Go source files in {dirname}", dirname=dirname)


class MultiplePackageError(PackageMetadataError):
    def __init__(
        self,
        dirname: str | Path,
        *,
        packages: tuple[str, str],
        files: tuple[str, str],
    ) -> None:
        super().__init__(
            f"found packages {packages[0]} ({files[0]}) and {packages[1]} ({files[1]}) in {dirname}",
            dirname=dirname,
        )
        self.packages = packages
        self.files = files


class ImportResolutionError(LintError):
    def __init__(self, import_path: str, *, searched: tuple[str, ...] = ()) -> None:
        if searched:
            where = "\n\t".join(searched)
            message = f'cannot find package "{import_path}" in any of:\n\t{where}'
        else:
            message = f'cannot find package "{import_path}"'
        super().__init__(message)
        self.import_path = import_path
        self.searched = searched


class RegistrationError(LintError):
    """A compilation unit could not be registered with the load configuration."""


class SourceSyntaxError(LintError):
    def __init__(self, filename: str, line: int, column: int, message: str) -> None:
        super().__init__(f"{filename}:{line}:{column}: {message}")
        self.filename = filename
        self.line = line
        self.column = column
        self.message = message


class UnitLoadError(LintError):
    """One compilation unit failed to load and was dropped."""


class LoadError(LintError):
    """The load step itself failed; no report can be produced."""


class AnalysisError(LintError):
    """The analysis engine could not check one package."""


class NeverThrown(RuntimeError):
    """Raised by :func:`gopherlint.invariants.never` on an unreachable path."""
