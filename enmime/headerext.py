"""Decoding of RFC 2047 encoded words in header values."""

from __future__ import annotations

import base64
import io
import re

from enmime.charsets import new_charset_reader

_Q_PIECE = re.compile(r"=([0-9A-Fa-f]{2})|([^=])|(=)", re.DOTALL)


class _InvalidWord(ValueError):
    pass


def _q_decode(text: str) -> bytes:
    out = bytearray()
    for match in _Q_PIECE.finditer(text):
        hex_pair, char, bare_equals = match.groups()
        if bare_equals:
            raise _InvalidWord(text)
        if hex_pair:
            out.append(int(hex_pair, 16))
        elif char == "_":
            out.append(0x20)
        elif " " <= char <= "~" or char in "\t\r\n":
            out.append(ord(char))
        else:
            raise _InvalidWord(text)
    return bytes(out)


def _decode_word(encoding: str, text: str) -> bytes:
    if encoding in ("B", "b"):
        cleaned = text.replace("\r", "").replace("\n", "")
        try:
            return base64.b64decode(cleaned, validate=True)
        except ValueError as exc:
            raise _InvalidWord(text) from exc
    if encoding in ("Q", "q"):
        return _q_decode(text)
    raise _InvalidWord(text)


def _convert(charset: str, content: bytes) -> bytes:
    """Return ``content`` converted from ``charset`` to UTF-8 bytes."""
    label = charset.lower()
    if label == "utf-8":
        return content
    if label == "iso-8859-1":
        return content.decode("latin-1").encode("utf-8")
    if label == "us-ascii":
        return content.decode("ascii", "replace").encode("utf-8")
    return new_charset_reader(label, io.BytesIO(content)).read()


def _has_non_whitespace(text: str) -> bool:
    return any(char not in " \t\n\r" for char in text)


def _decode_header(header: str) -> str:
    first = header.index("=?")
    out = bytearray(header[:first].encode("utf-8"))
    header = header[first:]
    between_words = False
    while True:
        start = header.find("=?")
        if start == -1:
            break
        cur = start + 2
        mark = header.find("?", cur)
        if mark == -1:
            break
        charset = header[cur:mark]
        cur = mark + 1
        if len(header) < cur + len("Q??="):
            break
        encoding = header[cur]
        cur += 1
        if header[cur] != "?":
            break
        cur += 1
        close = header.find("?=", cur)
        if close == -1:
            break
        text = header[cur:close]
        end = close + 2
        try:
            content = _decode_word(encoding, text)
        except _InvalidWord:
            between_words = False
            out += header[:start + 2].encode("utf-8")
            header = header[start + 2:]
            continue
        # Whitespace separating two encoded words is dropped.
        if start > 0 and (not between_words or _has_non_whitespace(header[:start])):
            out += header[:start].encode("utf-8")
        out += _convert(charset, content)
        header = header[end:]
        between_words = True
    if header:
        out += header.encode("utf-8")
    return out.decode("utf-8", "replace")


def decode_ext_header(text: str) -> str:
    """Decode the encoded words in a header line; on failure return it unchanged."""
    if "=?" not in text:
        return text
    try:
        return _decode_header(text)
    except LookupError:
        return text


def _fix_rfc2047_string(text: str) -> str:
    """Remove CR, LF and spaces from inside an encoded word."""
    in_string = False
    within_terminating_equals = False
    question_marks = 0
    out = []
    for char in text:
        if char == "=":
            if question_marks == 3:
                in_string = False
            else:
                within_terminating_equals = True
            out.append(char)
        elif char == "?":
            if within_terminating_equals:
                in_string = True
            else:
                question_marks += 1
            within_terminating_equals = False
            out.append(char)
        elif char in "\n\r ":
            if not in_string:
                out.append(char)
            within_terminating_equals = False
        else:
            within_terminating_equals = False
            out.append(char)
    return "".join(out)


def _decode_once(text: str) -> str | None:
    """Decode one level of encoding; return None when nothing changed."""
    upper = text.upper()
    if "?Q?" not in upper and "?B?" not in upper:
        return None
    value = decode_ext_header(text)
    if value == text:
        value = decode_ext_header(_fix_rfc2047_string(value))
        if value == text:
            return None
    return value


def _split_after(text: str, sep: str) -> list[str]:
    pieces = text.split(sep)
    return [piece + sep for piece in pieces[:-1]] + [pieces[-1]]


def rfc2047_decode(text: str) -> str:
    """Decode RFC 2047 content, repeatedly if it was encoded more than once.

    When decoding produced a ``key=value`` pair, the value is quoted.
    """
    text = text.replace("\n", " ").replace("\r", " ")
    decoded = False
    while (value := _decode_once(text)) is not None:
        text = value
        decoded = True
    if not decoded:
        return text
    pair = _split_after(text, "=")
    if len(pair) < 2:
        return text
    if not pair[1].startswith('"'):
        pair[1] = '"' + pair[1]
    if not pair[1].endswith('"'):
        pair[1] = pair[1] + '"'
    return "".join(pair)