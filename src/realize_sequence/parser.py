from __future__ import annotations

import logging
import math
from dataclasses import dataclass
from typing import Any, Union

from .combinators import (
    UNSET,
    Context,
    Failure,
    Parser,
    RecoverableError,
    Success,
    alternative,
    context,
    delimited,
    discard,
    drop_nullish,
    drop_nulls,
    end_of_input,
    expect,
    fail,
    literal,
    map_value,
    one_or_more,
    optional,
    pattern,
    preceded,
    sequence,
    terminated,
    zero_or_more,
)
from .types import ArrowHead, LineStyle, Message, ParsedDiagram, Participant

# ============================================================================
# Sequence diagram parser
#
# Parses the diagram language into a ParsedDiagram. The language is line
# based; blank lines and "#" comments may appear between any two lines.
#
#   title: Getting a diagram          (optional, first)
#   participant: Browser              (zero or more, before messages)
#   Browser -> Server                 (message: solid line, filled head)
#   Server -->>(5) Browser            (dashed, empty head, delayed)
#     label: the label text           (optional, right after a message)
#
# Arrows are "-" plus up to two more dashes (solid, dashed, dotted) and ">"
# plus an optional second ">" (filled or empty head).
# ============================================================================

logger = logging.getLogger(__name__)

MAX_DELAY = 50.0


@dataclass(frozen=True, slots=True)
class ParseSuccess:
    diagram: ParsedDiagram


@dataclass(frozen=True, slots=True)
class ParseFailure:
    reason: Failure


ParseResult = Union[ParseSuccess, ParseFailure]


def parse_diagram(code: str) -> ParseResult:
    """Parse diagram source.

    A trailing newline is added when missing since every line of the
    language must be terminated.
    """
    if not code.endswith("\n"):
        code += "\n"

    result = _diagram(Context(code))
    if isinstance(result, Success):
        logger.debug(
            "parsed diagram: %d participants, %d messages",
            len(result.value.participants),
            len(result.value.messages),
        )
        return ParseSuccess(result.value)

    reason = fail(result) if isinstance(result, RecoverableError) else result
    logger.debug("parse failed at %d: %s", reason.ctx.index, reason.description)
    return ParseFailure(reason)


# ============================================================================
# Value helpers
# ============================================================================


def parse_delay(value: str) -> float:
    """Convert a delay literal, clamping it to [0, MAX_DELAY]."""
    try:
        delay = float(value)
    except ValueError:
        return 0.0
    if math.isnan(delay) or delay < 0:
        return 0.0
    return min(delay, MAX_DELAY)


def decode_arrow(arrow: str) -> tuple[LineStyle, ArrowHead]:
    """Decode an arrow such as "-->>" into its line style and head."""
    dashes = arrow.count("-")
    if dashes >= 3:
        line: LineStyle = "dotted"
    elif dashes == 2:
        line = "dashed"
    else:
        line = "solid"
    head: ArrowHead = "empty" if arrow.count(">") > 1 else "filled"
    return line, head


def resolve_participants(
    declared: list[Participant], messages: list[Message]
) -> list[Participant]:
    """Declared participants followed by the ones only named in messages."""
    participants: list[Participant] = []
    seen: set[str] = set()

    def add(name: str) -> None:
        if name not in seen:
            seen.add(name)
            participants.append(Participant(name))

    for participant in declared:
        add(participant.name)
    for message in messages:
        add(message.from_)
        add(message.to)
    return participants


def _make_diagram(parts: list[Any]) -> ParsedDiagram:
    title, declared, messages = parts
    return ParsedDiagram(
        title=title or None,
        participants=resolve_participants(declared, messages),
        messages=messages,
    )


def _make_message(parts: list[Any]) -> Message:
    (from_, (line, head), leading_delay, to, trailing_delay), label = parts
    delay = leading_delay if leading_delay is not UNSET else trailing_delay
    return Message(
        from_=from_,
        to=to,
        head=head,
        line=line,
        delay=delay or 0.0,
        label=label or None,
    )


# ============================================================================
# Tokens
# ============================================================================

# a simple alphanumeric identifier
participant_name = pattern(r"[a-zA-Z0-9]+", "participant name")

# spaces and tabs between tokens on a line
skip_ws = discard(pattern(r"[ \t]*", "zero or more whitespace"))

newline = pattern(r"\r?\n", "newline")

# a comment marker up to (not including) the newline
comment = discard(sequence(literal("#"), pattern(r"[^\r\n]*", "comment")))

# input up to a comment or the end of the line, never empty
line_content = map_value(pattern(r"[^#\r\n]+", "line content"), str.rstrip)

# whitespace then an optional comment up to and including a newline
skip_line = discard(sequence(skip_ws, optional(comment), newline))

# terminates a line, swallowing any blank or comment lines after it
skip_lines = discard(one_or_more(skip_line))

skip_lines_zero = discard(zero_or_more(skip_line))


def tagged_line(tag: str, content: Parser[str], expectation: str) -> Parser[str]:
    """A line made of the tag, a colon, then content.

    Once "tag:" is seen the rest of the line is mandatory.
    """
    return context(
        preceded(
            sequence(skip_ws, pattern(rf"{tag}[ \t]*:", f'"{tag}:"'), skip_ws),
            terminated(
                expect(content, expectation),
                expect(skip_lines, "end of line"),
            ),
        ),
        "expected " + tag,
    )


# ============================================================================
# Lines
# ============================================================================

title_line = tagged_line("title", line_content, "title content")

participant_line = map_value(
    tagged_line("participant", participant_name, "participant name"),
    Participant,
)

label_line = tagged_line("label", line_content, "label content")

arrow = map_value(
    drop_nullish(
        sequence(
            literal("-"),
            optional(literal("-")),
            optional(literal("-")),
            expect(literal(">"), "arrowhead"),
            optional(literal(">")),
        )
    ),
    lambda parts: decode_arrow("".join(parts)),
)

delay = map_value(
    delimited(
        sequence(literal("("), skip_ws),
        expect(pattern(r"[^()\s#]+", "delay value"), "delay value"),
        sequence(skip_ws, expect(literal(")"), "closing delimiter")),
    ),
    parse_delay,
)

# source, arrow, delay and destination of a message; everything after the
# source name is mandatory. The delay may follow the arrow or the destination.
from_to_line = drop_nulls(
    sequence(
        skip_ws,
        participant_name,
        skip_ws,
        expect(arrow, "arrow"),
        skip_ws,
        optional(delay),
        skip_ws,
        expect(participant_name, "destination participant alias"),
        skip_ws,
        optional(delay),
        expect(skip_lines, "end of line"),
    )
)

message_block = map_value(sequence(from_to_line, optional(label_line)), _make_message)

message = context(message_block, "expected signal")

# once messages stop matching, only the end of the input may remain
_trailer = expect(alternative(message_block, end_of_input()), "signal")

_diagram = map_value(
    terminated(
        sequence(
            preceded(skip_lines_zero, optional(title_line)),
            zero_or_more(participant_line),
            zero_or_more(message),
        ),
        _trailer,
    ),
    _make_diagram,
)
