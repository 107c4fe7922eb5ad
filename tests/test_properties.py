"""Property-based tests for the parser, layout and URL codes.

Documents are generated from the line grammar: an optional title, some
participant declarations, then messages with optional delays and labels.
"""
from __future__ import annotations

from hypothesis import given, settings
from hypothesis import strategies as st

from realize_sequence.codec import decode_url_code, encode_url_code
from realize_sequence.diagnostics import diagnose
from realize_sequence.geometry import center_x
from realize_sequence.layout import layout
from realize_sequence.parser import MAX_DELAY, ParseFailure, ParseSuccess, parse_delay, parse_diagram
from realize_sequence.styles import Font, default_style
from realize_sequence.types import Extent

# ============================================================================
# Hypothesis Strategies
# ============================================================================

_NAMES = st.from_regex(r"[A-Za-z0-9]{1,6}", fullmatch=True)
_TEXT = st.from_regex(r"[A-Za-z][A-Za-z0-9 ,.!?]{0,20}", fullmatch=True).map(str.rstrip)
_ARROWS = st.sampled_from(["->", "-->", "--->", "->>", "-->>", "--->>"])
_DELAYS = st.one_of(st.none(), st.integers(min_value=0, max_value=80))


@st.composite
def _messages(draw, names):
    source = draw(st.sampled_from(names))
    target = draw(st.sampled_from(names))
    return source, draw(_ARROWS), draw(_DELAYS), target, draw(st.one_of(st.none(), _TEXT))


@st.composite
def documents(draw):
    pool = draw(st.lists(_NAMES, min_size=1, max_size=5, unique=True))
    title = draw(st.one_of(st.none(), _TEXT))
    declared = draw(st.lists(st.sampled_from(pool), max_size=3))
    messages = draw(st.lists(_messages(pool), max_size=8))

    lines = []
    if title is not None:
        lines.append(f"title: {title}")
    lines.extend(f"participant: {name}" for name in declared)
    for source, arrow, delay, target, label in messages:
        delay_text = "" if delay is None else f"({delay})"
        lines.append(f"{source} {arrow}{delay_text} {target}")
        if label is not None:
            lines.append(f"  label: {label}")
    return "\n".join(lines) + "\n", declared, messages


class FixedMeasurer:
    def measure(self, text: str, font: Font) -> Extent:
        return Extent(width=len(text) * 7, height=font.size)


def _parsed(source: str):
    result = parse_diagram(source)
    assert isinstance(result, ParseSuccess), result
    return result.diagram


# ============================================================================
# Parser
# ============================================================================


class TestParserProperties:
    @given(documents())
    def test_generated_documents_parse(self, document):
        source, _, messages = document
        diagram = _parsed(source)
        assert len(diagram.messages) == len(messages)
        assert [m.label for m in diagram.messages] == [m[4] for m in messages]

    @given(documents())
    def test_parsing_is_deterministic(self, document):
        source, _, _ = document
        assert parse_diagram(source) == parse_diagram(source)

    @given(documents())
    def test_participants_are_complete_and_unique(self, document):
        source, declared, _ = document
        diagram = _parsed(source)
        names = [p.name for p in diagram.participants]
        assert len(names) == len(set(names))
        for m in diagram.messages:
            assert m.from_ in names
            assert m.to in names
        # declarations keep their order at the front
        assert names[: len(dict.fromkeys(declared))] == list(dict.fromkeys(declared))

    @given(documents())
    def test_delays_are_clamped(self, document):
        source, _, messages = document
        diagram = _parsed(source)
        for parsed, (_, _, delay, _, _) in zip(diagram.messages, messages):
            assert 0 <= parsed.delay <= MAX_DELAY
            assert parsed.delay == min(delay or 0, MAX_DELAY)

    @given(st.text())
    def test_parse_delay_is_total(self, value):
        assert 0 <= parse_delay(value) <= MAX_DELAY

    @given(st.text(alphabet=st.sampled_from("AB ->()#:\nlabeltitlparcn0123")))
    @settings(max_examples=200)
    def test_arbitrary_input_never_raises(self, source):
        result = parse_diagram(source)
        assert isinstance(result, (ParseSuccess, ParseFailure))
        diagnostic = diagnose(source, result)
        if diagnostic is not None:
            assert 0 <= diagnostic.start <= diagnostic.end <= len(source)


# ============================================================================
# Layout
# ============================================================================


class TestLayoutProperties:
    @given(documents())
    def test_lifelines_keep_participant_order(self, document):
        diagram = _parsed(document[0])
        laid_out = layout(diagram, FixedMeasurer(), default_style())
        assert [l.name for l in laid_out.lifelines] == [p.name for p in diagram.participants]
        centers = [center_x(l.box) for l in laid_out.lifelines]
        assert centers == sorted(centers)

    @given(documents())
    def test_widening_never_shrinks_gaps(self, document):
        diagram = _parsed(document[0])
        style = default_style()
        bare = layout(
            type(diagram)(title=diagram.title, participants=diagram.participants),
            FixedMeasurer(),
            style,
        )
        laid_out = layout(diagram, FixedMeasurer(), style)
        before = [center_x(l.box) for l in bare.lifelines]
        after = [center_x(l.box) for l in laid_out.lifelines]
        assert after[:1] == before[:1]
        for i in range(1, len(after)):
            assert after[i] - after[i - 1] >= before[i] - before[i - 1] - 1e-9

    @given(documents())
    def test_labels_fit_their_signals(self, document):
        diagram = _parsed(document[0])
        style = default_style()
        laid_out = layout(diagram, FixedMeasurer(), style)
        for signal in laid_out.signals:
            if signal.props.label:
                needed = len(signal.props.label) * 7 + style.signal.padding.horizontal
                assert signal.box.width >= needed - 1e-9

    @given(documents())
    def test_signals_stack_downwards(self, document):
        laid_out = layout(_parsed(document[0]), FixedMeasurer(), default_style())
        for upper, lower in zip(laid_out.signals, laid_out.signals[1:]):
            assert lower.box.y >= upper.box.y + upper.box.height + upper.delay_height - 1e-9

    @given(documents())
    def test_layout_is_idempotent(self, document):
        diagram = _parsed(document[0])
        first = layout(diagram, FixedMeasurer(), default_style())
        assert layout(diagram, FixedMeasurer(), default_style()) == first


# ============================================================================
# URL codes
# ============================================================================


class TestCodecProperties:
    @given(st.text())
    def test_decode_inverts_encode(self, source):
        assert decode_url_code(encode_url_code(source)) == source
