"""Quick decoding of the human-readable headers of a message."""

from __future__ import annotations

from collections import deque

from enmime.headerext import rfc2047_decode

_DEFAULT_HEADERS = ("From", "To", "Sender", "CC", "BCC", "Subject", "Date")

_TOKEN_CHARS = frozenset(
    "!#$%&'*+-.^_`|~0123456789"
    "abcdefghijklmnopqrstuvwxyz"
    "ABCDEFGHIJKLMNOPQRSTUVWXYZ"
)


class HeaderError(ValueError):
    """A header block that could not be parsed."""


def _canonical_key(key: str) -> str:
    """Capitalise a header name: ``content-type`` becomes ``Content-Type``.

    Names holding characters that are not allowed in a token are returned as is.
    """
    if any(char not in _TOKEN_CHARS for char in key):
        return key
    out = []
    upper = True
    for char in key:
        out.append(char.upper() if upper else char.lower())
        upper = char == "-"
    return "".join(out)


def _split_after(data: bytes, sep: bytes) -> list[bytes]:
    pieces = data.split(sep)
    return [piece + sep for piece in pieces[:-1]] + [pieces[-1]]


def _ensure_header_boundary(data: bytes) -> bytes:
    """Insert a blank line where the headers end if the message lacks one."""
    out = bytearray()
    in_headers = True
    for line in _split_after(data, b"\r\n"):
        if in_headers and (b":" in line or line.startswith((b" ", b"\t"))):
            out += line
            continue
        if in_headers:
            in_headers = False
            if line != b"\r\n":
                out += b"\r\n"
        out += line
    return bytes(out)


def _trim(line: str) -> str:
    return line.strip(" \t")


def _read_mime_header(text: str) -> dict[str, list[str]]:
    lines = deque(line.removesuffix("\r") for line in text.split("\n"))
    if lines and lines[-1] == "":
        lines.pop()
    if lines and lines[0][:1] in (" ", "\t"):
        raise HeaderError(f"malformed MIME header initial line: {lines[0]}")
    headers: dict[str, list[str]] = {}
    while lines:
        raw = lines.popleft()
        if not raw:
            break
        line = _trim(raw)
        while lines and lines[0][:1] in (" ", "\t"):
            line += " " + _trim(lines.popleft())
        key, colon, value = line.partition(":")
        if not colon:
            raise HeaderError(f"malformed MIME header line: {line}")
        key = _canonical_key(key)
        if not key:
            continue
        headers.setdefault(key, []).append(value.lstrip(" \t"))
    return headers


def decode_headers(data: bytes, *args: str) -> dict[str, list[str]]:
    """Return the decoded From, To, Sender, Cc, Bcc, Subject and Date headers.

    Further header names may be given; all names are returned in canonical
    form, each mapped to its list of RFC 2047 decoded values.  Raises
    HeaderError when the header block is malformed.
    """
    text = _ensure_header_boundary(bytes(data)).decode("utf-8", "replace")
    headers = _read_mime_header(text)
    result: dict[str, list[str]] = {}
    for name in (*_DEFAULT_HEADERS, *args):
        key = _canonical_key(name)
        result[key] = [rfc2047_decode(value) for value in headers.get(key, [])]
    return result