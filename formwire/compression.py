"""
Decoding of compressed response bodies (gzip, deflate, br).
"""

from __future__ import annotations

import gzip
import io
import logging
import zlib

import brotli

logger = logging.getLogger(__name__)

ACCEPT_ENCODING = "gzip, deflate, br"


def decode_body(body: bytes, content_encoding: str) -> bytes:
    """
    Decode a response body according to its Content-Encoding header.

    Encodings listed together (e.g. "gzip, br") are undone in reverse order.
    A body that fails to decode is returned unchanged.
    """
    if not content_encoding or not body:
        return body

    encodings = [e.strip() for e in content_encoding.lower().split(",")]
    result = body
    for enc in reversed(encodings):
        result = _decode_single(result, enc)
    return result


def _decode_single(body: bytes, encoding: str) -> bytes:
    try:
        if encoding == "gzip":
            with gzip.GzipFile(fileobj=io.BytesIO(body)) as f:
                return f.read()
        if encoding == "deflate":
            try:
                return zlib.decompress(body, -zlib.MAX_WBITS)
            except zlib.error:
                return zlib.decompress(body)
        if encoding == "br":
            return brotli.decompress(body)
    except (OSError, EOFError, zlib.error, brotli.error) as exc:
        logger.debug("Could not decode %s body, leaving it as-is: %s", encoding, exc)
    return body
