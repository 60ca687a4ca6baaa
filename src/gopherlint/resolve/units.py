from __future__ import annotations

from typing import Callable

from gopherlint.exceptions import LintError, NoGoError
from gopherlint.loader import LoadConfig

ErrorSink = Callable[[LintError], None]


def add_dir(cfg: LoadConfig, dirname: str, *, on_error: ErrorSink) -> int:
    """Register the units of the Go package in ``dirname``; return how many.

    A directory without buildable Go files registers nothing and reports
    nothing. ``dirname`` is read relative to ``cfg.cwd`` and kept as given in
    the registered file names.
    """
    try:
        pkg = cfg.build.import_dir(cfg.resolve_dir(dirname))
    except NoGoError:
        return 0
    except LintError as exc:
        on_error(exc)
        return 0
    return len(cfg.add_package(pkg, dirname=dirname, on_error=on_error))


def add_import(cfg: LoadConfig, import_path: str, *, on_error: ErrorSink) -> int:
    try:
        return len(cfg.import_with_tests(import_path, on_error=on_error))
    except LintError as exc:
        on_error(exc)
        return 0


def add_files(cfg: LoadConfig, filenames: tuple[str, ...], *, on_error: ErrorSink) -> int:
    try:
        cfg.create_from_filenames(*filenames)
    except LintError as exc:
        on_error(exc)
        return 0
    return 1
