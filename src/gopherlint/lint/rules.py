"""Built-in style rules, checked one file at a time."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Callable

from gopherlint.ingest.go_source import CommentGroup, Decl, GoFile, Token, is_exported
from gopherlint.lint.model import Position, Problem, style_link
from gopherlint.lint.naming import is_all_caps, lint_name

TEST_FUNC_PREFIXES = ("Test", "Example", "Benchmark", "Fuzz")
EXPORTED_KINDS = {"func": "function", "method": "method", "type": "type", "var": "var", "const": "const"}


@dataclass
class FileContext:
    file: GoFile
    package_name: str
    package_has_doc: bool
    receiver_names: dict[str, str]
    problems: list[Problem] = field(default_factory=list)

    @property
    def is_test(self) -> bool:
        return self.file.is_test

    @property
    def is_main(self) -> bool:
        return self.package_name == "main"

    def report(
        self,
        line: int,
        column: int,
        confidence: float,
        text: str,
        *,
        category: str,
        anchor: str = "",
    ) -> None:
        self.problems.append(
            Problem(
                position=Position(self.file.filename, line, column),
                text=text,
                confidence=confidence,
                category=category,
                link=style_link(anchor) if anchor else "",
                line_text=self.file.line_text(line),
            )
        )


Rule = Callable[[FileContext], None]


def lint_package_comment(ctx: FileContext) -> None:
    gofile = ctx.file
    if ctx.is_test or not gofile.package_line:
        return
    doc = gofile.package_doc
    if doc is None:
        detached = _detached_package_comment(gofile)
        if detached is not None:
            ctx.report(
                detached.line,
                detached.comments[0].column,
                0.9,
                "package comment is detached; there should be no blank lines between it and the package statement",
                category="comments",
                anchor="package-comments",
            )
            return
        if not ctx.package_has_doc:
            ctx.report(
                gofile.package_line,
                gofile.package_column,
                0.2,
                "should have a package comment, unless it's in another file for this package",
                category="comments",
                anchor="package-comments",
            )
        return
    text = doc.text()
    if text.lstrip(" \t") != text:
        ctx.report(
            doc.line,
            doc.comments[0].column,
            1.0,
            "package comment should not have leading space",
            category="comments",
            anchor="package-comments",
        )
        return
    if ctx.is_main:
        return
    prefix = f"Package {gofile.package_name} "
    if not text.startswith(prefix):
        ctx.report(
            doc.line,
            doc.comments[0].column,
            1.0,
            f'package comment should be of the form "{prefix}..."',
            category="comments",
            anchor="package-comments",
        )


def _detached_package_comment(gofile: GoFile) -> CommentGroup | None:
    last: CommentGroup | None = None
    for group in gofile.comment_groups:
        if group.end_line < gofile.package_line:
            last = group
    if last is None or last.end_line + 2 != gofile.package_line:
        return None
    if not last.text().startswith("Package "):
        return None
    return last


def lint_imports(ctx: FileContext) -> None:
    for imp in ctx.file.imports:
        if imp.name == "." and not ctx.is_test:
            ctx.report(
                imp.line,
                imp.column,
                1.0,
                "should not use dot imports",
                category="imports",
                anchor="import-dot",
            )
        if (
            imp.name == "_"
            and not ctx.is_main
            and not ctx.is_test
            and imp.doc is None
            and imp.comment is None
        ):
            ctx.report(
                imp.line,
                imp.column,
                1.0,
                "a blank import should be only in a main or test package, or have a comment justifying it",
                category="imports",
                anchor="import-blank",
            )


def lint_exported(ctx: FileContext) -> None:
    if ctx.is_test:
        return
    checked_lines: set[tuple[str, int]] = set()
    for decl in ctx.file.decls:
        if not decl.exported:
            continue
        if decl.kind == "method" and not is_exported(decl.receiver_type or ""):
            continue
        if (decl.kind, decl.line) in checked_lines:
            continue
        checked_lines.add((decl.kind, decl.line))
        _check_decl_doc(ctx, decl)


def _check_decl_doc(ctx: FileContext, decl: Decl) -> None:
    kind = EXPORTED_KINDS[decl.kind]
    display = f"{decl.receiver_type}.{decl.name}" if decl.kind == "method" else decl.name
    doc = decl.doc
    if doc is None:
        if decl.kind in {"var", "const"} and decl.in_group:
            if decl.group_doc is not None:
                return
            text = f"exported {kind} {display} should have comment (or a comment on this block) or be unexported"
        else:
            text = f"exported {kind} {display} should have comment or be unexported"
        ctx.report(decl.line, decl.column, 1.0, text, category="comments", anchor="doc-comments")
        return
    text = doc.text()
    prefix = f"{decl.name} "
    if decl.kind == "type":
        for article in ("A ", "An ", "The "):
            if text.startswith(article):
                text = text[len(article):]
                break
    if not text.startswith(prefix):
        suffix = " (with optional leading article)" if decl.kind == "type" else ""
        ctx.report(
            doc.line,
            doc.comments[0].column,
            1.0,
            f'comment on exported {kind} {display} should be of the form "{prefix}..."{suffix}',
            category="comments",
            anchor="doc-comments",
        )


def lint_names(ctx: FileContext) -> None:
    for decl in ctx.file.decls:
        name = decl.name
        if name == "_":
            continue
        if ctx.is_test and decl.kind == "func" and name.startswith(TEST_FUNC_PREFIXES):
            continue
        if is_all_caps(name):
            ctx.report(
                decl.line,
                decl.column,
                0.8,
                "don't use ALL_CAPS in Go names; use CamelCase",
                category="naming",
                anchor="mixed-caps",
            )
            continue
        should = lint_name(name)
        if should == name:
            continue
        if "_" in name:
            text = f"don't use underscores in Go names; {decl.kind} {name} should be {should}"
        else:
            text = f"{decl.kind} {name} should be {should}"
        ctx.report(decl.line, decl.column, 0.9, text, category="naming", anchor="initialisms")


def lint_receiver_names(ctx: FileContext) -> None:
    for decl in ctx.file.decls:
        if decl.kind != "method" or decl.receiver_name is None:
            continue
        name = decl.receiver_name
        line, column = decl.receiver_line, decl.receiver_column
        if name == "_":
            ctx.report(
                line,
                column,
                1.0,
                "receiver name should not be an underscore, omit the name if it is unused",
                category="naming",
                anchor="receiver-names",
            )
            continue
        if name in {"this", "self"}:
            ctx.report(
                line,
                column,
                1.0,
                'receiver name should be a reflection of its identity; don\'t use generic names such as "this" or "self"',
                category="naming",
                anchor="receiver-names",
            )
            continue
        receiver_type = decl.receiver_type or ""
        previous = ctx.receiver_names.setdefault(receiver_type, name)
        if previous != name:
            ctx.report(
                line,
                column,
                1.0,
                f"receiver name {name} should be consistent with previous receiver name {previous} for {receiver_type}",
                category="naming",
                anchor="receiver-names",
            )


def _match(tokens: list[Token], index: int, *texts: str) -> bool:
    if index + len(texts) > len(tokens):
        return False
    return all(tokens[index + offset].text == text for offset, text in enumerate(texts))


def lint_errors(ctx: FileContext) -> None:
    tokens = ctx.file.tokens
    for index, token in enumerate(tokens):
        if _match(tokens, index, "errors", ".", "New", "(", "fmt", ".", "Sprintf", "("):
            ctx.report(
                token.line,
                token.column,
                1.0,
                "should replace errors.New(fmt.Sprintf(...)) with fmt.Errorf(...)",
                category="errors",
            )
            continue
        if not (
            _match(tokens, index, "errors", ".", "New", "(")
            or _match(tokens, index, "fmt", ".", "Errorf", "(")
        ):
            continue
        if index + 4 >= len(tokens) or tokens[index + 4].kind != "string":
            continue
        literal = tokens[index + 4]
        clean, confidence = lint_error_string(_unquote(literal.text))
        if clean:
            continue
        ctx.report(
            literal.line,
            literal.column,
            confidence,
            "error strings should not be capitalized or end with punctuation or a newline",
            category="errors",
            anchor="error-strings",
        )


def lint_error_string(text: str) -> tuple[bool, float]:
    basic_confidence = 0.8
    cap_confidence = 0.6
    if not text:
        return True, 0.0
    if text[-1] in ".:!\n":
        return False, basic_confidence
    if text[0].isupper():
        if len(text) == 1:
            return False, cap_confidence
        if not text[1].isupper():
            return False, cap_confidence
    return True, 0.0


def _unquote(literal: str) -> str:
    if literal.startswith("`"):
        return literal.strip("`")
    body = literal[1:-1] if len(literal) >= 2 and literal.endswith('"') else literal[1:]
    return body.replace("\\n", "\n").replace('\\"', '"').replace("\\t", "\t")


def lint_inc_dec(ctx: FileContext) -> None:
    tokens = ctx.file.tokens
    for index, token in enumerate(tokens):
        if token.text not in {"+=", "-="} or index == 0:
            continue
        if index + 1 >= len(tokens) or tokens[index + 1].text != "1":
            continue
        following = tokens[index + 2] if index + 2 < len(tokens) else None
        if (
            following is not None
            and following.line == token.line
            and following.text not in {";", "}", "{"}
        ):
            continue
        start = index - 1
        while (
            start - 2 >= 0
            and tokens[start - 1].text == "."
            and tokens[start - 2].kind == "ident"
            and tokens[start - 2].line == token.line
        ):
            start -= 2
        if tokens[start].kind != "ident":
            continue
        lhs = "".join(tok.text for tok in tokens[start:index])
        suffix = "++" if token.text == "+=" else "--"
        ctx.report(
            tokens[start].line,
            tokens[start].column,
            0.8,
            f"should replace {lhs} {token.text} 1 with {lhs}{suffix}",
            category="unary-op",
        )


def lint_ranges(ctx: FileContext) -> None:
    tokens = ctx.file.tokens
    for index, token in enumerate(tokens):
        if token.text != "for" or index + 1 >= len(tokens):
            continue
        for assign in (":=", "="):
            if (
                index + 5 < len(tokens)
                and tokens[index + 1].kind == "ident"
                and _match(tokens, index + 2, ",", "_", assign, "range")
            ):
                key = tokens[index + 1].text
                ctx.report(
                    token.line,
                    token.column,
                    1.0,
                    f"should omit 2nd value from range; this loop is equivalent to `for {key} {assign} range ...`",
                    category="range-loop",
                )
                break
        else:
            if _match(tokens, index + 1, "_", "=", "range"):
                ctx.report(
                    token.line,
                    token.column,
                    1.0,
                    "should omit values from range; this loop is equivalent to `for range ...`",
                    category="range-loop",
                )


RULES: tuple[Rule, ...] = (
    lint_package_comment,
    lint_imports,
    lint_exported,
    lint_names,
    lint_receiver_names,
    lint_errors,
    lint_inc_dec,
    lint_ranges,
)
