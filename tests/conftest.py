from __future__ import annotations

import sys
import textwrap
from pathlib import Path
from typing import Callable

ROOT = Path(__file__).resolve().parents[1]
if str(ROOT / "src") not in sys.path:
    sys.path.insert(0, str(ROOT / "src"))


import pytest

from gopherlint.ingest.go_build import BuildContext
from gopherlint.lint.model import Position, Problem
from gopherlint.loader import LoadConfig, Package

WriteTree = Callable[[dict[str, str]], Path]


@pytest.fixture
def write_tree(tmp_path: Path) -> WriteTree:
    def _write(files: dict[str, str]) -> Path:
        for rel, content in files.items():
            path = tmp_path / rel
            path.parent.mkdir(parents=True, exist_ok=True)
            path.write_text(textwrap.dedent(content).lstrip("\n"), encoding="utf-8")
        return tmp_path

    return _write


@pytest.fixture
def in_tmp(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Path:
    monkeypatch.chdir(tmp_path)
    return tmp_path


@pytest.fixture
def build_context() -> BuildContext:
    return BuildContext(goos="linux", goarch="amd64", gopath=())


@pytest.fixture
def load_config(in_tmp: Path, build_context: BuildContext) -> LoadConfig:
    return LoadConfig(cwd=in_tmp, build=build_context)


class RecordingEngine:
    """Engine double: returns canned problems keyed by file name."""

    def __init__(
        self,
        problems: dict[str, list[tuple[int, int, float, str]]] | None = None,
        *,
        fail_on: set[str] | None = None,
    ) -> None:
        self.problems = problems or {}
        self.fail_on = fail_on or set()
        self.seen: list[tuple[str, ...]] = []

    def lint_package(self, package: Package) -> list[Problem]:
        self.seen.append(package.filenames)
        if self.fail_on & set(package.filenames):
            raise RuntimeError(f"engine exploded on {package.label}")
        found: list[Problem] = []
        for filename in package.filenames:
            for line, column, confidence, text in self.problems.get(filename, []):
                found.append(Problem(Position(filename, line, column), text, confidence))
        return found


@pytest.fixture
def recording_engine() -> Callable[..., RecordingEngine]:
    return RecordingEngine
