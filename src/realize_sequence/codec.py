from __future__ import annotations

import base64
import binascii
import gzip
import logging
import zlib

# ============================================================================
# URL codes -- diagram source packed into a short, URL-safe string.
#
#   "1" + urlsafe-base64(gzip(utf-8 source)), base64 padding removed
#
# The leading character is the format version.
# ============================================================================

logger = logging.getLogger(__name__)

VERSION = "1"

# zlib window bits accepting both gzip and zlib headers
_AUTO_HEADER_WBITS = 32 + zlib.MAX_WBITS


class CodecError(ValueError):
    """A URL code that cannot be decoded."""


def encode_url_code(code: str) -> str:
    compressed = gzip.compress(code.encode("utf-8"), compresslevel=9, mtime=0)
    encoded = base64.urlsafe_b64encode(compressed).decode("ascii").rstrip("=")
    return VERSION + encoded


def decode_url_code(url_code: str) -> str:
    """Recover diagram source from a URL code.

    Raises CodecError for an unknown version or a corrupt payload.
    """
    if not url_code.startswith(VERSION):
        raise CodecError("unknown version")

    payload = url_code[len(VERSION):]
    try:
        compressed = base64.urlsafe_b64decode(payload + "=" * (-len(payload) % 4))
    except (binascii.Error, ValueError) as err:
        raise CodecError(f"invalid encoding: {err}") from err

    try:
        data = zlib.decompress(compressed, _AUTO_HEADER_WBITS)
    except zlib.error as err:
        logger.debug("decompression of %d bytes failed: %s", len(compressed), err)
        raise CodecError(f"decompression failed: {err}") from err

    try:
        return data.decode("utf-8")
    except UnicodeDecodeError as err:
        raise CodecError(f"invalid text: {err}") from err
