"""Tests for URL codes -- compact, URL-safe encodings of diagram source."""
from __future__ import annotations

import base64
import gzip
import re
import zlib

import pytest

from realize_sequence.codec import VERSION, CodecError, decode_url_code, encode_url_code

SOURCE = (
    "title: Getting a diagram\n"
    "You -> Browser\n"
    "  label: type diagram\n"
    "Browser -->>(2) Server\n"
)


def urlsafe(data: bytes) -> str:
    return base64.urlsafe_b64encode(data).decode("ascii").rstrip("=")


class TestEncode:
    def test_starts_with_the_version(self):
        assert encode_url_code(SOURCE).startswith(VERSION)

    def test_is_url_safe_and_unpadded(self):
        code = encode_url_code(SOURCE * 20)
        assert re.fullmatch(r"[A-Za-z0-9_-]+", code)

    def test_is_deterministic(self):
        assert encode_url_code(SOURCE) == encode_url_code(SOURCE)

    def test_repetitive_source_compresses(self):
        source = SOURCE * 50
        assert len(encode_url_code(source)) < len(source)


class TestDecode:
    @pytest.mark.parametrize("source", ["", SOURCE, "A -> B # café ✓\n"])
    def test_recovers_the_source(self, source):
        assert decode_url_code(encode_url_code(source)) == source

    def test_accepts_a_zlib_payload(self):
        assert decode_url_code(VERSION + urlsafe(zlib.compress(b"A -> B\n"))) == "A -> B\n"

    @pytest.mark.parametrize("code", ["", "2H4sIAAAAAAAAA", "xyz"])
    def test_unknown_version(self, code):
        with pytest.raises(CodecError, match="unknown version"):
            decode_url_code(code)

    def test_invalid_base64(self):
        with pytest.raises(CodecError, match="invalid encoding"):
            decode_url_code(VERSION + "A")

    def test_corrupt_payload(self):
        with pytest.raises(CodecError, match="decompression failed"):
            decode_url_code(VERSION + urlsafe(b"definitely not compressed"))

    def test_truncated_payload(self):
        code = encode_url_code(SOURCE)
        with pytest.raises(CodecError):
            decode_url_code(code[: len(code) // 2])

    def test_invalid_utf8(self):
        with pytest.raises(CodecError, match="invalid text"):
            decode_url_code(VERSION + urlsafe(gzip.compress(b"\xff\xfe\xfd")))

    def test_codec_error_is_a_value_error(self):
        with pytest.raises(ValueError):
            decode_url_code("nope")
