"""Encoding and decoding of Content-ID and Message-ID header values."""

from __future__ import annotations

import re
from urllib.parse import quote_plus, unquote_plus

_BAD_ESCAPE = re.compile(r"%(?![0-9A-Fa-f]{2})")


def from_id_header(value: str) -> str:
    """Decode an ID header value, e.g. ``<foo%3fbar+baz>`` becomes ``foo?bar baz``.

    A value with malformed percent escapes is returned with only the angle
    brackets removed.
    """
    if not value:
        return value
    value = value.lstrip("<").rstrip(">")
    if _BAD_ESCAPE.search(value):
        return value
    return unquote_plus(value)


def to_id_header(value: str) -> str:
    """Encode a string as an ID header value wrapped in angle brackets."""
    return "<" + quote_plus(value, safe="").replace("%40", "@") + ">"