from __future__ import annotations

from dataclasses import dataclass

STYLE_GUIDE_BASE = "https://go.dev/wiki/CodeReviewComments"


@dataclass(frozen=True)
class Position:
    filename: str
    line: int
    column: int

    def sort_key(self) -> tuple[str, int, int]:
        return (self.filename, self.line, self.column)

    def __str__(self) -> str:
        return f"{self.filename}:{self.line}:{self.column}"


@dataclass(frozen=True)
class Problem:
    position: Position
    text: str
    confidence: float
    category: str = ""
    link: str = ""
    line_text: str = ""


def style_link(anchor: str) -> str:
    return f"{STYLE_GUIDE_BASE}#{anchor}"
