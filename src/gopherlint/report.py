from __future__ import annotations

import json
import sys
from pathlib import Path
from typing import Callable, Iterable

from gopherlint.exceptions import AnalysisError, LintError
from gopherlint.lint import Analyzer, Problem
from gopherlint.loader import Program
from gopherlint.order_contract import sort_once
from gopherlint.schema import ProblemDTO

_STDOUT_ALIAS = "-"
_SARIF_SCHEMA = "https://json.schemastore.org/sarif-2.1.0.json"


def collect_problems(
    program: Program,
    engine: Analyzer,
    *,
    on_error: Callable[[LintError], None],
) -> list[Problem]:
    """Run ``engine`` on every created package, in creation order."""
    problems: list[Problem] = []
    for package in program.created:
        try:
            found = engine.lint_package(package)
        except AnalysisError as exc:
            on_error(exc)
            continue
        except Exception as exc:
            on_error(AnalysisError(f"{package.label}: {exc}"))
            continue
        problems.extend(found)
    return problems


def sort_problems(problems: Iterable[Problem]) -> list[Problem]:
    return sort_once(
        problems,
        source="sort_problems.position",
        key=lambda problem: problem.position.sort_key(),
    )


def filter_problems(problems: Iterable[Problem], min_confidence: float) -> list[Problem]:
    return [problem for problem in problems if problem.confidence >= min_confidence]


def format_problem(problem: Problem) -> str:
    return f"{problem.position}: {problem.text}"


def _write_text_to_target(target: str | Path, payload: str) -> None:
    if str(target) == _STDOUT_ALIAS:
        sys.stdout.write(payload)
        sys.stdout.flush()
        return
    Path(target).write_text(payload, encoding="utf-8")


def write_jsonl(target: str | Path, problems: list[Problem]) -> None:
    payload = "\n".join(
        json.dumps(ProblemDTO.from_problem(problem).model_dump(), sort_keys=True)
        for problem in problems
    )
    _write_text_to_target(target, payload + "\n" if payload else payload)


def write_sarif(target: str | Path, problems: list[Problem]) -> None:
    rules: dict[str, dict[str, object]] = {}
    results: list[dict[str, object]] = []
    for problem in problems:
        dto = ProblemDTO.from_problem(problem)
        rule_id = dto.category or "gopherlint"
        if rule_id not in rules:
            rule: dict[str, object] = {
                "id": rule_id,
                "name": rule_id,
                "shortDescription": {"text": rule_id},
            }
            if dto.link:
                rule["helpUri"] = dto.link.split("#", 1)[0]
            rules[rule_id] = rule
        results.append(
            {
                "ruleId": rule_id,
                "level": "warning",
                "message": {"text": dto.message},
                "properties": {"confidence": dto.confidence},
                "locations": [
                    {
                        "physicalLocation": {
                            "artifactLocation": {"uri": dto.path},
                            "region": {
                                "startLine": dto.line,
                                "startColumn": dto.col,
                            },
                        }
                    }
                ],
            }
        )
    sarif = {
        "$schema": _SARIF_SCHEMA,
        "version": "2.1.0",
        "runs": [
            {
                "tool": {"driver": {"name": "gopherlint", "rules": list(rules.values())}},
                "results": results,
            }
        ],
    }
    _write_text_to_target(target, json.dumps(sarif, indent=2, sort_keys=True) + "\n")
