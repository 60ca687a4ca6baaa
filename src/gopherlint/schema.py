from __future__ import annotations

from pydantic import BaseModel, Field

from gopherlint.lint.model import Problem


class ProblemDTO(BaseModel):
    path: str
    line: int
    col: int
    message: str
    confidence: float = Field(ge=0.0, le=1.0)
    category: str = ""
    link: str = ""
    line_text: str = ""

    @classmethod
    def from_problem(cls, problem: Problem) -> "ProblemDTO":
        return cls(
            path=problem.position.filename,
            line=problem.position.line,
            col=problem.position.column,
            message=problem.text,
            confidence=problem.confidence,
            category=problem.category,
            link=problem.link,
            line_text=problem.line_text,
        )

