"""Go build constraint evaluation (file name suffixes, //go:build, // +build)."""

from __future__ import annotations

import re
from typing import Callable, Iterable

KNOWN_OS = frozenset(
    {
        "aix", "android", "darwin", "dragonfly", "freebsd", "hurd", "illumos",
        "ios", "js", "linux", "nacl", "netbsd", "openbsd", "plan9", "solaris",
        "wasip1", "windows", "zos",
    }
)
KNOWN_ARCH = frozenset(
    {
        "386", "amd64", "amd64p32", "arm", "armbe", "arm64", "arm64be",
        "loong64", "mips", "mipsle", "mips64", "mips64le", "mips64p32",
        "mips64p32le", "ppc", "ppc64", "ppc64le", "riscv", "riscv64", "s390",
        "s390x", "sparc", "sparc64", "wasm",
    }
)
UNIX_OS = frozenset(
    {
        "aix", "android", "darwin", "dragonfly", "freebsd", "hurd", "illumos",
        "ios", "linux", "netbsd", "openbsd", "solaris",
    }
)

_GO_BUILD_RE = re.compile(r"^//go:build\s+(?P<expr>.+)$")
_PLUS_BUILD_RE = re.compile(r"^//\s*\+build\s+(?P<expr>.+)$")
_EXPR_TOKEN_RE = re.compile(r"\s*(\(|\)|!|&&|\|\||[A-Za-z0-9_.]+)")

Matcher = Callable[[str], bool]


class ConstraintSyntaxError(ValueError):
    pass


def good_os_arch_file(filename: str, *, goos: str, goarch: str) -> bool:
    """Report whether the _GOOS/_GOARCH suffixes of ``filename`` allow it."""
    stem = filename[:-3] if filename.endswith(".go") else filename
    if "_" not in stem:
        return True
    parts = stem.split("_")[1:]
    if parts and parts[-1] == "test":
        parts = parts[:-1]
    if len(parts) >= 2 and parts[-2] in KNOWN_OS and parts[-1] in KNOWN_ARCH:
        return _os_matches(parts[-2], goos) and parts[-1] == goarch
    if parts and parts[-1] in KNOWN_OS:
        return _os_matches(parts[-1], goos)
    if parts and parts[-1] in KNOWN_ARCH:
        return parts[-1] == goarch
    return True


def _os_matches(name: str, goos: str) -> bool:
    if name == goos:
        return True
    if goos == "android" and name == "linux":
        return True
    if goos == "illumos" and name == "solaris":
        return True
    return goos == "ios" and name == "darwin"


def eval_go_build(expr: str, matches: Matcher) -> bool:
    tokens = _EXPR_TOKEN_RE.findall(expr)
    if "".join(tokens) != re.sub(r"\s+", "", expr):
        raise ConstraintSyntaxError(f"invalid //go:build expression: {expr!r}")
    parser = _ExprParser(tokens, matches)
    result = parser.parse_or()
    if parser.index != len(tokens):
        raise ConstraintSyntaxError(f"unexpected token in //go:build expression: {expr!r}")
    return result


class _ExprParser:
    def __init__(self, tokens: list[str], matches: Matcher) -> None:
        self.tokens = tokens
        self.matches = matches
        self.index = 0

    def _peek(self) -> str | None:
        if self.index < len(self.tokens):
            return self.tokens[self.index]
        return None

    def parse_or(self) -> bool:
        result = self.parse_and()
        while self._peek() == "||":
            self.index += 1
            rhs = self.parse_and()
            result = result or rhs
        return result

    def parse_and(self) -> bool:
        result = self.parse_not()
        while self._peek() == "&&":
            self.index += 1
            rhs = self.parse_not()
            result = result and rhs
        return result

    def parse_not(self) -> bool:
        if self._peek() == "!":
            self.index += 1
            return not self.parse_not()
        return self.parse_atom()

    def parse_atom(self) -> bool:
        token = self._peek()
        if token is None:
            raise ConstraintSyntaxError("unexpected end of //go:build expression")
        self.index += 1
        if token == "(":
            result = self.parse_or()
            if self._peek() != ")":
                raise ConstraintSyntaxError("missing ) in //go:build expression")
            self.index += 1
            return result
        if token in {")", "&&", "||"}:
            raise ConstraintSyntaxError(f"unexpected {token!r} in //go:build expression")
        return self.matches(token)


def eval_plus_build(line: str, matches: Matcher) -> bool:
    """Evaluate one ``// +build`` line: space-separated OR of comma-separated AND terms."""
    for option in line.split():
        if all(_plus_build_term(term, matches) for term in option.split(",")):
            return True
    return False


def _plus_build_term(term: str, matches: Matcher) -> bool:
    if term.startswith("!!") or not term:
        return False
    if term.startswith("!"):
        return not matches(term[1:])
    return matches(term)


def should_build(comment_lines: Iterable[str], matches: Matcher) -> bool:
    """Apply the header constraint comments of one file.

    A ``//go:build`` line takes precedence over ``// +build`` lines, which must
    all be satisfied.
    """
    plus_lines: list[str] = []
    for raw in comment_lines:
        line = raw.strip()
        go_build = _GO_BUILD_RE.match(line)
        if go_build is not None:
            return eval_go_build(go_build.group("expr"), matches)
        plus_build = _PLUS_BUILD_RE.match(line)
        if plus_build is not None:
            plus_lines.append(plus_build.group("expr"))
    return all(eval_plus_build(expr, matches) for expr in plus_lines)
