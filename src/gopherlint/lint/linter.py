from __future__ import annotations

from gopherlint.exceptions import AnalysisError
from gopherlint.lint.model import Problem
from gopherlint.lint.rules import RULES, FileContext, Rule
from gopherlint.loader import Package


class Linter:
    """Default analysis engine: the built-in style rules."""

    def __init__(self, rules: tuple[Rule, ...] = RULES) -> None:
        self.rules = rules

    def lint_package(self, package: Package) -> list[Problem]:
        if not package.files:
            return []
        expected = package.files[0].package_name
        for gofile in package.files[1:]:
            if gofile.package_name != expected:
                raise AnalysisError(
                    f"{gofile.filename} is in package {gofile.package_name}, not {expected}"
                )
        has_doc = any(
            gofile.package_doc is not None and not gofile.is_test for gofile in package.files
        )
        receiver_names: dict[str, str] = {}
        problems: list[Problem] = []
        for gofile in package.files:
            ctx = FileContext(
                file=gofile,
                package_name=expected,
                package_has_doc=has_doc,
                receiver_names=receiver_names,
            )
            for rule in self.rules:
                rule(ctx)
            problems.extend(ctx.problems)
        return problems
