"""A stream filter that makes quoted-printable content safe to decode."""

from __future__ import annotations

from typing import BinaryIO

MAX_QP_LINE_LEN = 1024
"""Longest line allowed before a soft line break is inserted."""

_ESCAPED_EQUALS = b"=3D"
_LINE_BREAK = b"=\r\n"
_HEX_DIGITS = frozenset(b"0123456789ABCDEFabcdef")
_READ_CHUNK = 4096


def _valid_hex_bytes(following: bytes) -> bool:
    """Tell whether the bytes after an ``=`` form an escape or a soft line break."""
    if following[:1] == b"\n":
        return True
    if len(following) < 2:
        return False
    if following[:2] == b"\r\n":
        return True
    return following[0] in _HEX_DIGITS and following[1] in _HEX_DIGITS


class QPCleaner:
    """Wraps a binary stream, escaping bytes a quoted-printable decoder rejects.

    Bare ``=`` signs become ``=3D``, bytes outside printable ASCII are escaped,
    and over-long lines receive soft line breaks.
    """

    def __init__(self, stream: BinaryIO) -> None:
        self._stream = stream
        self._buf = b""
        self._pos = 0
        self._eof = False
        self._overflow = b""
        self._line_len = 0

    def readable(self) -> bool:
        return True

    def _fill(self, want: int) -> None:
        while not self._eof and len(self._buf) - self._pos < want:
            chunk = self._stream.read(_READ_CHUNK)
            if not chunk:
                self._eof = True
            else:
                self._buf = self._buf[self._pos:] + bytes(chunk)
                self._pos = 0

    def _read_byte(self) -> int | None:
        self._fill(1)
        if self._pos >= len(self._buf):
            return None
        value = self._buf[self._pos]
        self._pos += 1
        return value

    def _peek(self, count: int) -> bytes:
        self._fill(count)
        return self._buf[self._pos:self._pos + count]

    def _break_line(self, out: bytearray) -> None:
        out += _LINE_BREAK
        self._line_len = 0

    def _ensure_line_len(self, out: bytearray, requested: int) -> None:
        if self._line_len + requested >= MAX_QP_LINE_LEN:
            self._break_line(out)

    def _clean_byte(self, value: int, out: bytearray) -> None:
        if value == 0x3D:
            self._ensure_line_len(out, 2)
            if _valid_hex_bytes(self._peek(2)):
                out.append(value)
            else:
                out += _ESCAPED_EQUALS
                self._line_len += len(_ESCAPED_EQUALS)
        elif value == 0x09:
            out.append(value)
            self._line_len += 1
        elif value in (0x0D, 0x0A):
            out.append(value)
            self._line_len = 0
        elif value < 0x20 or value > 0x7E:
            self._ensure_line_len(out, 2)
            out += b"=%02X" % value
            self._line_len += 3
        else:
            out.append(value)
            self._line_len += 1

    def read(self, size: int = -1) -> bytes:
        """Read up to ``size`` cleaned bytes; an empty result means end of data."""
        if size is None or size < 0:
            return b"".join(iter(lambda: self.read(_READ_CHUNK), b""))
        out = bytearray(self._overflow[:size])
        self._overflow = self._overflow[size:]
        while len(out) < size:
            value = self._read_byte()
            if value is None:
                break
            if self._line_len >= MAX_QP_LINE_LEN:
                self._break_line(out)
            self._clean_byte(value, out)
        if len(out) > size:
            self._overflow += bytes(out[size:])
            del out[size:]
        return bytes(out)