"""A stream filter that strips characters which would break base64 decoding."""

from __future__ import annotations

from typing import BinaryIO

_CHUNK_LIMIT = 1024

# Whitespace and padding are dropped without complaint.
_SILENT = frozenset(b"\t\n\r =")
_ALPHABET = frozenset(
    b"ABCDEFGHIJKLMNOPQRSTUVWXYZabcdefghijklmnopqrstuvwxyz0123456789+/"
)

_ESCAPES = {
    0x07: "\\a",
    0x08: "\\b",
    0x0C: "\\f",
    0x0A: "\\n",
    0x0D: "\\r",
    0x09: "\\t",
    0x0B: "\\v",
    0x27: "\\'",
    0x5C: "\\\\",
}


def _quote_byte(value: int) -> str:
    """Render a byte as a single-quoted character literal."""
    if value in _ESCAPES:
        inner = _ESCAPES[value]
    elif chr(value).isprintable():
        inner = chr(value)
    elif value < 0x80:
        inner = f"\\x{value:02x}"
    else:
        inner = f"\\u{value:04x}"
    return f"'{inner}'"


class Base64Cleaner:
    """Wraps a binary stream, removing bytes that are not part of base64 data.

    Whitespace and ``=`` are removed silently; any other stray byte is removed
    and described in :attr:`errors`.
    """

    def __init__(self, stream: BinaryIO) -> None:
        self._stream = stream
        self.errors: list[str] = []

    def readable(self) -> bool:
        return True

    def _clean(self, chunk: bytes) -> bytes:
        kept = bytearray()
        for value in chunk:
            masked = value & 0x7F
            if masked in _SILENT:
                continue
            if masked in _ALPHABET:
                kept.append(value)
            else:
                self.errors.append(f"unexpected {_quote_byte(value)} in base64 stream")
        return bytes(kept)

    def read(self, size: int = -1) -> bytes:
        """Read and clean up to ``size`` bytes; an empty result means end of data."""
        if size is None or size < 0:
            return self._clean(bytes(self._stream.read() or b""))
        if size == 0:
            return b""
        while True:
            chunk = self._stream.read(min(size, _CHUNK_LIMIT))
            if not chunk:
                return b""
            cleaned = self._clean(bytes(chunk))
            if cleaned:
                return cleaned