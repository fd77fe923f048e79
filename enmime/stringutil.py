"""Small string helpers: address lists, quoted splitting, UUIDs and line wrapping."""

from __future__ import annotations

import base64
import uuid
from typing import Iterable

_MAX_ENCODED_WORD_LEN = 75
_MAX_CONTENT_LEN = _MAX_ENCODED_WORD_LEN - len("=?UTF-8?q?") - len("?=")
_MAX_BASE64_LEN = _MAX_CONTENT_LEN // 4 * 3
_B_SPECIALS = set("\"#$%&'(),.:;<>@[]^`{|}~")


def _is_multibyte(char: str) -> bool:
    return ord(char) >= 0x80


def _is_vchar(char: str) -> bool:
    return "!" <= char <= "~" or _is_multibyte(char)


def _is_wsp(char: str) -> bool:
    return char in " \t"


def _is_atext(char: str) -> bool:
    if char in '.()[];@\\,<>":':
        return False
    return _is_vchar(char)


def _quote_string(text: str) -> str:
    body = "".join(
        char if (_is_vchar(char) and char not in '\\"') or _is_wsp(char) else "\\" + char
        for char in text
    )
    return f'"{body}"'


def _needs_quoting(local: str) -> bool:
    for index, char in enumerate(local):
        if _is_atext(char):
            continue
        if (
            char == "."
            and index > 0
            and local[index - 1] != "."
            and index < len(local) - 1
        ):
            continue
        return True
    return False


def _b_encode(text: str) -> str:
    """Encode text as one or more base64 encoded words."""
    data = text.encode("utf-8")
    if len(base64.b64encode(data)) <= _MAX_CONTENT_LEN:
        chunks = [data]
    else:
        chunks = []
        current = b""
        for char in text:
            encoded = char.encode("utf-8")
            if len(current) + len(encoded) > _MAX_BASE64_LEN:
                chunks.append(current)
                current = b""
            current += encoded
        chunks.append(current)
    return " ".join(
        "=?utf-8?b?" + base64.b64encode(chunk).decode("ascii") + "?=" for chunk in chunks
    )


def _q_char(char: str) -> str:
    out = []
    for value in char.encode("utf-8"):
        if value == 0x20:
            out.append("_")
        elif 0x21 <= value <= 0x7E and chr(value) not in "=?_":
            out.append(chr(value))
        else:
            out.append(f"={value:02X}")
    return "".join(out)


def _q_encode(text: str) -> str:
    """Encode text as one or more quoted-printable encoded words."""
    words = []
    current = []
    current_len = 0
    for char in text:
        plain = " " <= char <= "~" and char not in "=?_"
        enc_len = 1 if plain else 3 * len(char.encode("utf-8"))
        if current_len + enc_len > _MAX_CONTENT_LEN:
            words.append("".join(current))
            current = []
            current_len = 0
        current.append(_q_char(char))
        current_len += enc_len
    words.append("".join(current))
    return " ".join(f"=?utf-8?q?{word}?=" for word in words)


def _encode_name(name: str) -> str:
    if all(" " <= char <= "~" or char == "\t" for char in name):
        return name
    if any(char in _B_SPECIALS for char in name):
        return _b_encode(name)
    return _q_encode(name)


def _format_address(name: str, address: str) -> str:
    local, at, domain = address.rpartition("@")
    if not at:
        local, domain = address, ""
    if _needs_quoting(local):
        local = _quote_string(local)
    formatted = f"<{local}@{domain}>"
    if not name:
        return formatted
    if all((_is_vchar(char) or _is_wsp(char)) and not _is_multibyte(char) for char in name):
        return f"{_quote_string(name)} {formatted}"
    return f"{_encode_name(name)} {formatted}"


def join_address(addresses: Iterable[tuple[str, str]]) -> str:
    """Format ``(name, address)`` pairs for use in a To or Cc header."""
    return ", ".join(_format_address(name, address) for name, address in addresses)


def split_quoted(text: str, sep: str, quote: str | None) -> list[str]:
    """Split ``text`` on ``sep``, ignoring separators inside quoted runs.

    Quotes are kept in the result; separators are removed.  An unterminated
    quoted run makes the whole string split as if unquoted.  Pass ``None``
    as ``quote`` to disable quoting.
    """
    parts = []
    quoted = False
    start = 0
    for index, char in enumerate(text):
        if char == "\\":
            continue
        if quote is not None and char == quote:
            quoted = not quoted
            continue
        if not quoted and char == sep:
            parts.append(text[start:index])
            start = index + 1
    if quoted:
        return split_quoted(text, sep, None)
    parts.append(text[start:])
    return parts


def new_uuid() -> str:
    """Return a random (version 4) UUID string."""
    return str(uuid.uuid4())


def wrap(max_len: int, *args: str) -> bytes:
    """Join the strings and wrap them on whitespace before ``max_len`` bytes.

    Continuation lines start with a space after a CRLF.
    """
    data = "".join(args).encode("utf-8")
    if len(data) < max_len:
        return data
    out = bytearray()
    last_space = -1
    last_written = -1
    line_len = 0
    index = 0
    while index < len(data):
        line_len += 1
        if data[index] in (0x20, 0x09):
            last_space = index
        if line_len >= max_len and last_space >= 0:
            out += data[last_written + 1:last_space]
            out += b"\r\n "
            last_written = last_space
            line_len = 1
            index = last_written + 1
            last_space = -1
        index += 1
    out += data[last_written + 1:]
    return bytes(out)