from __future__ import annotations

from dataclasses import dataclass, field
from functools import partial
from typing import Callable, Sequence

import typer

from gopherlint.config import DEFAULT_MIN_CONFIDENCE
from gopherlint.exceptions import LintError, LoadError
from gopherlint.invariants import never
from gopherlint.lint import Analyzer, Problem
from gopherlint.loader import LoadConfig
from gopherlint.report import collect_problems, filter_problems, format_problem, sort_problems
from gopherlint.resolve.classify import (
    CurrentDir,
    Directory,
    FileList,
    FileSystem,
    ImportRef,
    OsFileSystem,
    Target,
    WildcardTree,
    classify_args,
)
from gopherlint.resolve.tree import DirExcluder, ExcludePredicate, iter_package_dirs
from gopherlint.resolve.units import add_dir, add_files, add_import

Echo = Callable[[str], None]


@dataclass(frozen=True)
class LintOptions:
    min_confidence: float = DEFAULT_MIN_CONFIDENCE
    exclude: ExcludePredicate = field(default_factory=DirExcluder)


@dataclass
class RunResult:
    target: Target
    units_registered: int = 0
    units_created: int = 0
    problems: list[Problem] = field(default_factory=list)
    reported: list[Problem] = field(default_factory=list)
    failures: list[LintError] = field(default_factory=list)
    fatal: LoadError | None = None


def register_target(
    cfg: LoadConfig,
    target: Target,
    *,
    on_error: Callable[[LintError], None],
    exclude: ExcludePredicate | None = None,
) -> int:
    """Register the compilation units implied by one classified target."""
    if isinstance(target, CurrentDir):
        return add_dir(cfg, target.path, on_error=on_error)
    if isinstance(target, WildcardTree):
        return sum(
            add_dir(cfg, dirname, on_error=on_error)
            for dirname in iter_package_dirs(target.root, exclude=exclude, base=cfg.cwd)
        )
    if isinstance(target, Directory):
        return add_dir(cfg, target.path, on_error=on_error)
    if isinstance(target, FileList):
        return add_files(cfg, target.files, on_error=on_error)
    if isinstance(target, ImportRef):
        return add_import(cfg, target.path, on_error=on_error)
    never("unhandled lint target", target=target)


def run(
    args: Sequence[str],
    *,
    engine: Analyzer,
    options: LintOptions | None = None,
    cfg: LoadConfig | None = None,
    fs: FileSystem | None = None,
    echo: Echo = typer.echo,
    echo_err: Echo = partial(typer.echo, err=True),
) -> RunResult:
    """Resolve ``args``, load once, analyse each unit, and print the report.

    Only a failure of the load step ends the run early; every other failure
    is echoed, recorded on the result, and the item it belongs to is skipped.
    """
    opts = options if options is not None else LintOptions()
    config = cfg if cfg is not None else LoadConfig()
    target = classify_args(args, fs=fs if fs is not None else OsFileSystem(config.cwd))
    result = RunResult(target=target)

    def on_error(exc: LintError) -> None:
        result.failures.append(exc)
        echo_err(str(exc))

    result.units_registered = register_target(
        config, target, on_error=on_error, exclude=opts.exclude
    )
    try:
        program = config.load()
    except LoadError as exc:
        result.fatal = exc
        echo_err(str(exc))
        return result

    for failure in program.errors:
        on_error(failure)
    for package in program.created:
        for syntax_error in package.errors:
            on_error(syntax_error)
    result.units_created = len(program.created)

    result.problems = sort_problems(collect_problems(program, engine, on_error=on_error))
    result.reported = filter_problems(result.problems, opts.min_confidence)
    for problem in result.reported:
        echo(format_problem(problem))
    return result
