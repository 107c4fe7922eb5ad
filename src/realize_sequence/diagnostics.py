from __future__ import annotations

import re
from dataclasses import dataclass

from .combinators import Error
from .parser import ParseFailure, ParseResult

# ============================================================================
# Diagnostics -- turn a parse failure into something to show next to the
# source: a message, a character range and a line/column.
# ============================================================================

_TOKEN_END_RE = re.compile(r"[ \t\r\n]")


@dataclass(frozen=True, slots=True)
class Diagnostic:
    message: str
    # Character range [start, end) of the offending token
    start: int
    end: int
    # 1-based position of start
    line: int
    column: int

    def __str__(self) -> str:
        return f"{self.line}:{self.column}: {self.message}"


def describe_failure(error: Error) -> str:
    """Render a cause chain, deepest cause first, e.g.
    "caused by failure to match participant name: expected destination
    participant alias: expected signal".
    """
    descriptions = [e.description for e in error.causes()]
    descriptions.reverse()
    return ": ".join(["caused by " + descriptions[0], *descriptions[1:]])


def line_column(code: str, offset: int) -> tuple[int, int]:
    """1-based line and column of a character offset."""
    offset = max(0, min(offset, len(code)))
    line = code.count("\n", 0, offset) + 1
    column = offset - (code.rfind("\n", 0, offset) + 1) + 1
    return line, column


def diagnose(code: str, result: ParseResult) -> Diagnostic | None:
    """Describe a parse result of code; None when it succeeded."""
    if not isinstance(result, ParseFailure):
        return None

    reason = result.reason
    start = reason.ctx.index
    if code and start >= len(code):
        start = len(code) - 1
    start = max(start, 0)

    m = _TOKEN_END_RE.search(code, start)
    end = m.start() if m is not None else len(code)

    line, column = line_column(code, start)
    return Diagnostic(
        message=describe_failure(reason),
        start=start,
        end=end,
        line=line,
        column=column,
    )
