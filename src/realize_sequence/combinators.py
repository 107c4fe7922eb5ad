from __future__ import annotations

import logging
import re
from dataclasses import dataclass
from typing import Any, Callable, Generic, Iterator, TypeVar, Union

# ============================================================================
# Parser combinators
#
# A parser is a plain function from an immutable Context to a Result. There
# are three kinds of result:
#
#   Success           the parser matched; carries the next context and a value
#   RecoverableError  the parser did not match; callers may try something else
#   Failure           the grammar committed and the input is malformed; this
#                     always unwinds to the top unchanged
#
# Errors carry a cause chain so a failure can be explained from the most
# specific mismatch outwards.
# ============================================================================

logger = logging.getLogger(__name__)

T = TypeVar("T")
U = TypeVar("U")


@dataclass(frozen=True, slots=True)
class Context:
    """Position of a parser within its input."""
    input: str
    index: int = 0

    def at(self, index: int) -> Context:
        return Context(self.input, index)

    def advance(self, count: int) -> Context:
        return Context(self.input, self.index + count)

    @property
    def remaining(self) -> str:
        return self.input[self.index:]

    @property
    def at_end(self) -> bool:
        return self.index >= len(self.input)


@dataclass(frozen=True, slots=True)
class Success(Generic[T]):
    ctx: Context
    value: T


@dataclass(frozen=True, slots=True)
class RecoverableError:
    """A non-fatal mismatch, used to backtrack into other alternatives."""
    ctx: Context
    description: str
    cause: RecoverableError | None = None

    def causes(self) -> Iterator[RecoverableError | Failure]:
        """Walk the cause chain, starting with this error."""
        error: RecoverableError | Failure | None = self
        while error is not None:
            yield error
            error = error.cause


@dataclass(frozen=True, slots=True)
class Failure:
    """A fatal parse error, terminating the parser."""
    ctx: Context
    description: str
    cause: RecoverableError | Failure | None = None

    def causes(self) -> Iterator[RecoverableError | Failure]:
        """Walk the cause chain, starting with this failure."""
        error: RecoverableError | Failure | None = self
        while error is not None:
            yield error
            error = error.cause


Error = Union[RecoverableError, Failure]
Result = Union[Success[T], RecoverableError, Failure]
Parser = Callable[[Context], Result[T]]


class _Unset:
    """Value of an optional parser that did not match."""

    _instance: _Unset | None = None

    def __new__(cls) -> _Unset:
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def __bool__(self) -> bool:
        return False

    def __repr__(self) -> str:
        return "UNSET"


UNSET: Any = _Unset()


# ============================================================================
# Result helpers
# ============================================================================


def with_value(success: Success[Any], value: U) -> Success[U]:
    """Keep a success's context but replace its value."""
    return Success(success.ctx, value)


def fail(error: Error, message: str | None = None) -> Failure:
    """Turn an error into a failure, keeping the error as its cause."""
    return Failure(error.ctx, message if message else error.description, error)


def with_context(error: Error, description: str) -> Error:
    """Wrap an error with an extra description, keeping its kind."""
    if isinstance(error, RecoverableError):
        return RecoverableError(error.ctx, description, error)
    return Failure(error.ctx, description, error)


# ============================================================================
# Commitment and diagnostics
# ============================================================================


def context(parser: Parser[T], description: str) -> Parser[T]:
    """Add a description frame to any error produced by parser."""
    def parse(ctx: Context) -> Result[T]:
        res = parser(ctx)
        if isinstance(res, Success):
            return res
        return with_context(res, description)

    return parse


def expect(parser: Parser[T], expectation: str) -> Parser[T]:
    """Promote recoverable errors of parser into failures."""
    def parse(ctx: Context) -> Result[T]:
        res = parser(ctx)
        if isinstance(res, RecoverableError):
            return fail(res, "expected " + expectation)
        return res

    return parse


def debug(parser: Parser[T], label: str) -> Parser[T]:
    """Log every result of parser along with the input that follows it."""
    def parse(ctx: Context) -> Result[T]:
        res = parser(ctx)
        logger.debug("%s: %r (buffer=%r)", label, res, res.ctx.remaining[:20])
        return res

    return parse


# ============================================================================
# Primitive parsers
# ============================================================================


def literal(match: str) -> Parser[str]:
    """Parse an exact string."""
    def parse(ctx: Context) -> Result[str]:
        end = ctx.index + len(match)
        if end > len(ctx.input):
            return RecoverableError(ctx, f'failure to match "{match}", too short')
        if ctx.input[ctx.index:end] == match:
            return Success(ctx.at(end), match)
        return RecoverableError(ctx, f'failure to match "{match}"')

    return parse


def pattern(regex: str | re.Pattern[str], expected: str) -> Parser[str]:
    """Parse a regular expression match anchored at the cursor."""
    compiled = re.compile(regex) if isinstance(regex, str) else regex

    def parse(ctx: Context) -> Result[str]:
        m = compiled.match(ctx.input, ctx.index)
        if m is not None:
            return Success(ctx.at(m.end()), m.group(0))
        return RecoverableError(ctx, f"failure to match {expected}")

    return parse


def end_of_input() -> Parser[None]:
    """Match the end of the input."""
    def parse(ctx: Context) -> Result[None]:
        if ctx.at_end:
            return Success(ctx, None)
        return RecoverableError(ctx, "failure to match end of input")

    return parse


# ============================================================================
# Combinators
# ============================================================================


def discard(parser: Parser[Any]) -> Parser[None]:
    """Require parser, then drop its value."""
    def parse(ctx: Context) -> Result[None]:
        res = parser(ctx)
        if isinstance(res, Success):
            return with_value(res, None)
        return res

    return parse


def sequence(*parsers: Parser[Any]) -> Parser[list[Any]]:
    """Run every parser in order, collecting their values."""
    def parse(ctx: Context) -> Result[list[Any]]:
        values: list[Any] = []
        next_ctx = ctx
        for parser in parsers:
            res = parser(next_ctx)
            if not isinstance(res, Success):
                return res
            values.append(res.value)
            next_ctx = res.ctx
        return Success(next_ctx, values)

    return parse


def alternative(*parsers: Parser[T]) -> Parser[T]:
    """Try each parser from the same position, in order.

    Returns the first success or the first failure. When every parser errors
    recoverably, the error that got furthest into the input is returned
    (the first one on a tie).
    """
    def parse(ctx: Context) -> Result[T]:
        if not parsers:
            return Failure(ctx, "failure to pass at least one parser to alternative")

        furthest: RecoverableError | None = None
        for parser in parsers:
            res = parser(ctx)
            if not isinstance(res, RecoverableError):
                return res
            if furthest is None or furthest.ctx.index < res.ctx.index:
                furthest = res

        assert furthest is not None
        return furthest

    return parse


def optional(parser: Parser[T]) -> Parser[T]:
    """Zero or one of parser; yields UNSET when it did not match."""
    def parse(ctx: Context) -> Result[T]:
        res = parser(ctx)
        if isinstance(res, RecoverableError):
            return Success(ctx, UNSET)
        return res

    return parse


def optional_default(parser: Parser[T], default: T) -> Parser[T]:
    """Zero or one of parser; yields default when it did not match."""
    def parse(ctx: Context) -> Result[T]:
        res = parser(ctx)
        if isinstance(res, RecoverableError):
            return Success(ctx, default)
        return res

    return parse


def _repeat(parser: Parser[T], ctx: Context) -> tuple[Context, list[T]] | Failure:
    values: list[T] = []
    next_ctx = ctx
    while True:
        res = parser(next_ctx)
        if isinstance(res, RecoverableError):
            return next_ctx, values
        if isinstance(res, Failure):
            return res
        next_ctx = res.ctx
        values.append(res.value)


def zero_or_more(parser: Parser[T]) -> Parser[list[T]]:
    """Zero or more of parser.

    Cannot error recoverably; parser must consume input on every success.
    """
    def parse(ctx: Context) -> Result[list[T]]:
        repeated = _repeat(parser, ctx)
        if isinstance(repeated, Failure):
            return repeated
        next_ctx, values = repeated
        return Success(next_ctx, values)

    return parse


def one_or_more(parser: Parser[T]) -> Parser[list[T]]:
    """One or more of parser."""
    def parse(ctx: Context) -> Result[list[T]]:
        repeated = _repeat(parser, ctx)
        if isinstance(repeated, Failure):
            return repeated
        next_ctx, values = repeated
        if not values:
            return RecoverableError(next_ctx, "failure to match at least one")
        return Success(next_ctx, values)

    return parse


def preceded(first: Parser[Any], parser: Parser[T]) -> Parser[T]:
    """Run both parsers, keeping the value of the second."""
    def parse(ctx: Context) -> Result[T]:
        first_res = first(ctx)
        if not isinstance(first_res, Success):
            return first_res
        return parser(first_res.ctx)

    return parse


def terminated(parser: Parser[T], terminator: Parser[Any]) -> Parser[T]:
    """Run both parsers, keeping the value of the first."""
    def parse(ctx: Context) -> Result[T]:
        res = parser(ctx)
        if not isinstance(res, Success):
            return res
        terminator_res = terminator(res.ctx)
        if not isinstance(terminator_res, Success):
            return terminator_res
        return with_value(terminator_res, res.value)

    return parse


def delimited(open_: Parser[Any], inner: Parser[T], close: Parser[Any]) -> Parser[T]:
    """Run all three parsers, keeping the value of the inner one."""
    return preceded(open_, terminated(inner, close))


def map_value(parser: Parser[T], fn: Callable[[T], U]) -> Parser[U]:
    """Transform the value of a successful parse."""
    def parse(ctx: Context) -> Result[U]:
        res = parser(ctx)
        if isinstance(res, Success):
            return with_value(res, fn(res.value))
        return res

    return parse


def filter_values(parser: Parser[list[T]], predicate: Callable[[T], bool]) -> Parser[list[T]]:
    """Keep only the list items for which predicate holds."""
    return map_value(parser, lambda values: [v for v in values if predicate(v)])


def drop_nulls(parser: Parser[list[Any]]) -> Parser[list[Any]]:
    """Remove discarded (None) values, keeping unmatched optionals in place."""
    return filter_values(parser, lambda v: v is not None)


def drop_nullish(parser: Parser[list[Any]]) -> Parser[list[Any]]:
    """Remove discarded values and unmatched optionals."""
    return filter_values(parser, lambda v: v is not None and v is not UNSET)
