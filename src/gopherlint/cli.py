from __future__ import annotations

from pathlib import Path
from typing import List, Optional

import typer

from gopherlint.config import (
    build_tag_list,
    engine_spec,
    exclude_dir_list,
    lint_defaults,
    merge_payload,
    min_confidence_value,
    set_exit_status_flag,
)
from gopherlint.driver import LintOptions, run
from gopherlint.exceptions import ConfigError
from gopherlint.ingest.go_build import BuildContext
from gopherlint.lint import load_engine
from gopherlint.loader import LoadConfig
from gopherlint.report import write_jsonl, write_sarif
from gopherlint.resolve.tree import DirExcluder

app = typer.Typer(add_completion=False)

_USAGE_EPILOG = (
    "gopherlint [flags]                 # runs on package in current directory\n\n"
    "gopherlint [flags] package\n\n"
    "gopherlint [flags] directory\n\n"
    "gopherlint [flags] directory/...   # runs on every package below directory\n\n"
    "gopherlint [flags] files...        # must be a single package"
)


def _split_csv_entries(entries: List[str]) -> list[str]:
    merged: list[str] = []
    for entry in entries:
        merged.extend([part.strip() for part in entry.split(",") if part.strip()])
    return merged


def _echo_err(message: str) -> None:
    typer.echo(message, err=True)


@app.command(epilog=_USAGE_EPILOG)
def lint(
    args: Optional[List[str]] = typer.Argument(
        None, help="Import path, directory, directory/..., or Go files."
    ),
    min_confidence: Optional[float] = typer.Option(
        None,
        "--min-confidence",
        "--min_confidence",
        min=0.0,
        max=1.0,
        help="Minimum confidence of a problem to print it (default 0.8).",
    ),
    config: Optional[Path] = typer.Option(None, "--config", help="Path to gopherlint.toml."),
    tags: List[str] = typer.Option([], "--tags", help="Extra build tags (comma-separated)."),
    exclude: List[str] = typer.Option(
        [], "--exclude", help="Directory names skipped when expanding dir/... (comma-separated)."
    ),
    engine: Optional[str] = typer.Option(
        None, "--engine", help="Analysis engine as module:attr."
    ),
    jsonl: Optional[Path] = typer.Option(
        None, "--jsonl", help="Also write reported problems as JSON lines ('-' for stdout)."
    ),
    sarif: Optional[Path] = typer.Option(
        None, "--sarif", help="Also write reported problems as SARIF 2.1.0 ('-' for stdout)."
    ),
    set_exit_status: Optional[bool] = typer.Option(
        None,
        "--set-exit-status/--no-set-exit-status",
        help="Exit with status 1 when any problem is reported.",
    ),
) -> None:
    """Lint the Go packages named on the command line."""
    defaults = lint_defaults(config_path=config)
    payload = {
        "min_confidence": min_confidence,
        "tags": _split_csv_entries(tags) or None,
        "exclude_dirs": _split_csv_entries(exclude) or None,
        "engine": engine,
        "set_exit_status": set_exit_status,
    }
    merged = merge_payload(payload, defaults)
    try:
        threshold = min_confidence_value(merged)
        analyzer = load_engine(engine_spec(merged))
    except ConfigError as exc:
        raise typer.BadParameter(str(exc)) from exc

    cfg = LoadConfig(build=BuildContext.from_env(tags=build_tag_list(merged)))
    options = LintOptions(
        min_confidence=threshold,
        exclude=DirExcluder.from_names(exclude_dir_list(merged)),
    )
    result = run(
        list(args or []),
        engine=analyzer,
        options=options,
        cfg=cfg,
        echo=typer.echo,
        echo_err=_echo_err,
    )
    if result.fatal is not None:
        return
    if jsonl is not None:
        write_jsonl(jsonl, result.reported)
    if sarif is not None:
        write_sarif(sarif, result.reported)
    if set_exit_status_flag(merged) and result.reported:
        _echo_err(f"Found {len(result.reported)} lint suggestions; failing.")
        raise typer.Exit(code=1)


def main() -> None:
    app(prog_name="gopherlint")
