"""Conversion of text in named character sets into UTF-8."""

from __future__ import annotations

import codecs
import re
from typing import BinaryIO, Callable, Protocol


class _Decoder(Protocol):
    def decode(self, data: bytes, final: bool = False) -> str: ...


_C1_FALLBACK = "enmime.c1-fallback"


def _c1_fallback(exc: UnicodeError) -> tuple[str, int]:
    """Map undefined C1-range bytes to their code points, anything else to U+FFFD."""
    if not isinstance(exc, UnicodeDecodeError):
        raise exc
    bad = exc.object[exc.start:exc.end]
    text = "".join(chr(b) if 0x80 <= b <= 0x9F else "\ufffd" for b in bad)
    return text, exc.end


codecs.register_error(_C1_FALLBACK, _c1_fallback)


class _ReplacementDecoder:
    """Decodes any non-empty input into a single replacement character."""

    def __init__(self) -> None:
        self._emitted = False

    def decode(self, data: bytes, final: bool = False) -> str:
        if data and not self._emitted:
            self._emitted = True
            return "\ufffd"
        return ""


class _UserDefinedDecoder:
    """The x-user-defined encoding: high bytes map into the private use area."""

    def decode(self, data: bytes, final: bool = False) -> str:
        return "".join(chr(b) if b < 0x80 else chr(0xF780 + b - 0x80) for b in data)


DecoderFactory = Callable[[], _Decoder]


def _single_byte(codec: str) -> DecoderFactory:
    return lambda: codecs.getincrementaldecoder(codec)(_C1_FALLBACK)


def _multi_byte(codec: str) -> DecoderFactory:
    return lambda: codecs.getincrementaldecoder(codec)("replace")


_UTF8_LABELS = frozenset({"unicode-1-1-utf-8", "utf-8", "utf8"})

_FAMILIES: list[tuple[DecoderFactory, tuple[str, ...]]] = [
    (_multi_byte("utf-8"), tuple(_UTF8_LABELS)),
    (_multi_byte("utf-7"), ("utf-7", "utf7")),
    (_single_byte("cp866"), ("866", "cp866", "csibm866", "ibm866")),
    (_single_byte("iso8859_2"), (
        "csisolatin2", "iso-8859-2", "iso-ir-101", "iso8859-2", "iso88592",
        "iso_8859-2", "iso_8859-2:1987", "l2", "latin2")),
    (_single_byte("iso8859_3"), (
        "csisolatin3", "iso-8859-3", "iso-ir-109", "iso8859-3", "iso88593",
        "iso_8859-3", "iso_8859-3:1988", "l3", "latin3")),
    (_single_byte("iso8859_4"), (
        "csisolatin4", "iso-8859-4", "iso-ir-110", "iso8859-4", "iso88594",
        "iso_8859-4", "iso_8859-4:1988", "l4", "latin4")),
    (_single_byte("iso8859_5"), (
        "csisolatincyrillic", "cyrillic", "iso-8859-5", "iso-ir-144", "iso8859-5",
        "iso88595", "iso_8859-5", "iso_8859-5:1988")),
    (_single_byte("iso8859_6"), (
        "arabic", "asmo-708", "csiso88596e", "csiso88596i", "csisolatinarabic",
        "ecma-114", "iso-8859-6", "iso-8859-6-e", "iso-8859-6-i", "iso-ir-127",
        "iso8859-6", "iso88596", "iso_8859-6", "iso_8859-6:1987")),
    (_single_byte("iso8859_7"), (
        "csisolatingreek", "ecma-118", "elot_928", "greek", "greek8", "iso-8859-7",
        "iso-ir-126", "iso8859-7", "iso88597", "iso_8859-7", "iso_8859-7:1987",
        "sun_eu_greek")),
    (_single_byte("iso8859_8"), (
        "csiso88598e", "csisolatinhebrew", "hebrew", "iso-8859-8", "iso-8859-8-e",
        "iso-ir-138", "iso8859-8", "iso88598", "iso_8859-8", "iso_8859-8:1988",
        "visual", "csiso88598i", "iso-8859-8-i", "logical")),
    (_single_byte("iso8859_10"), (
        "csisolatin6", "iso-8859-10", "iso-ir-157", "iso8859-10", "iso885910",
        "l6", "latin6")),
    (_single_byte("iso8859_13"), ("iso-8859-13", "iso8859-13", "iso885913")),
    (_single_byte("iso8859_14"), ("iso-8859-14", "iso8859-14", "iso885914")),
    (_single_byte("iso8859_15"), (
        "csisolatin9", "iso-8859-15", "iso8859-15", "iso885915", "iso_8859-15", "l9")),
    (_single_byte("iso8859_16"), ("iso-8859-16",)),
    (_single_byte("koi8_r"), ("cskoi8r", "koi", "koi8", "koi8-r", "koi8_r")),
    (_single_byte("koi8_u"), ("koi8-u",)),
    (_single_byte("mac_roman"), ("csmacintosh", "mac", "macintosh", "x-mac-roman")),
    (_single_byte("cp874"), (
        "dos-874", "iso-8859-11", "iso8859-11", "iso885911", "tis-620", "windows-874")),
    (_single_byte("cp1250"), ("cp1250", "windows-1250", "x-cp1250")),
    (_single_byte("cp1251"), ("cp1251", "windows-1251", "x-cp1251")),
    (_single_byte("cp1252"), (
        "ansi_x3.4-1968", "ascii", "cp1252", "cp819", "csisolatin1", "ibm819",
        "iso-ir-100", "l1", "latin1", "us-ascii", "windows-1252", "x-cp1252",
        "iso646-us", "iso: western", "we8iso8859p1", "iso=8859-1")),
    (_single_byte("latin_1"), (
        "iso-8859-1", "iso8859-1", "iso8859_1", "iso88591", "iso_8859-1",
        "iso_8859-1:1987")),
    (_single_byte("cp1253"), ("cp1253", "windows-1253", "x-cp1253")),
    (_single_byte("cp1254"), (
        "cp1254", "csisolatin5", "iso-8859-9", "iso-ir-148", "iso8859-9", "iso88599",
        "iso_8859-9", "iso_8859-9:1989", "l5", "latin5", "windows-1254", "x-cp1254")),
    (_single_byte("cp1255"), ("cp1255", "windows-1255", "x-cp1255")),
    (_single_byte("cp1256"), ("cp1256", "windows-1256", "x-cp1256")),
    (_single_byte("cp1257"), ("cp1257", "windows-1257", "x-cp1257")),
    (_single_byte("cp1258"), ("cp1258", "windows-1258", "x-cp1258")),
    (_single_byte("mac_cyrillic"), ("x-mac-cyrillic", "x-mac-ukrainian")),
    (_multi_byte("gbk"), (
        "chinese", "csgb2312", "csiso58gb231280", "gb2312", "gb_2312", "gb_2312-80",
        "gbk", "iso-ir-58", "x-gbk", "cp936")),
    (_multi_byte("gb18030"), ("gb18030",)),
    (_multi_byte("hz"), ("hz-gb-2312",)),
    (_multi_byte("big5hkscs"), (
        "big5", "big5-hkscs", "cn-big5", "csbig5", "x-x-big5", "136")),
    (_multi_byte("euc_jp"), ("cseucpkdfmtjapanese", "euc-jp", "x-euc-jp")),
    (_multi_byte("iso2022_jp"), ("csiso2022jp", "iso-2022-jp")),
    (_multi_byte("cp932"), (
        "csshiftjis", "ms_kanji", "shift-jis", "shift_jis", "sjis", "windows-31j",
        "x-sjis")),
    (_multi_byte("cp949"), (
        "cseuckr", "csksc56011987", "euc-kr", "iso-ir-149", "korean",
        "ks_c_5601-1987", "ks_c_5601-1989", "ksc5601", "ksc_5601", "windows-949")),
    (_ReplacementDecoder, (
        "csiso2022kr", "iso-2022-kr", "iso-2022-cn", "iso-2022-cn-ext")),
    (_multi_byte("utf_16_be"), ("utf-16be",)),
    (_multi_byte("utf_16_le"), ("utf-16", "utf-16le")),
    (_UserDefinedDecoder, ("x-user-defined",)),
    (_single_byte("cp850"), ("cp850", "cp-850", "ibm850")),
]

_ENCODINGS: dict[str, DecoderFactory] = {
    label: factory for factory, labels in _FAMILIES for label in labels
}

_META_CHARSET = re.compile(
    r'<meta.*charset="?\s*(?P<charset>[a-zA-Z0-9_.:-]+)\s*"?', re.IGNORECASE
)


def _lookup(charset: str) -> DecoderFactory:
    try:
        return _ENCODINGS[charset.lower()]
    except KeyError:
        raise LookupError(f'unsupported charset "{charset}"') from None


class _CharsetReader:
    """A binary stream that yields the UTF-8 form of a stream in another charset."""

    def __init__(self, stream: BinaryIO, decoder: _Decoder) -> None:
        self._stream = stream
        self._decoder = decoder
        self._pending = b""
        self._eof = False

    def readable(self) -> bool:
        return True

    def _fill(self, want: int) -> None:
        while not self._eof and len(self._pending) < want:
            chunk = self._stream.read(max(want, 4096))
            if not chunk:
                self._pending += self._decoder.decode(b"", final=True).encode("utf-8")
                self._eof = True
            else:
                self._pending += self._decoder.decode(bytes(chunk)).encode("utf-8")

    def read(self, size: int = -1) -> bytes:
        if size is None or size < 0:
            if not self._eof:
                rest = self._stream.read()
                self._pending += self._decoder.decode(
                    bytes(rest or b""), final=True
                ).encode("utf-8")
                self._eof = True
            out, self._pending = self._pending, b""
            return out
        self._fill(size)
        out, self._pending = self._pending[:size], self._pending[size:]
        return out


def convert_to_utf8_string(charset: str, data: bytes) -> str:
    """Decode ``data`` from the named charset; raise LookupError if it is unknown."""
    decoder = _lookup(charset)()
    return decoder.decode(bytes(data), final=True)


def new_charset_reader(charset: str, stream: BinaryIO) -> BinaryIO:
    """Wrap ``stream`` so that reading it yields UTF-8 bytes.

    Raises LookupError for an unsupported charset.
    """
    label = charset.lower()
    factory = _lookup(charset)
    if label in _UTF8_LABELS:
        return stream
    return _CharsetReader(stream, factory())  # type: ignore[return-value]


def find_charset_in_html(html: str) -> str:
    """Return the charset named in the first HTML meta tag, or an empty string."""
    match = _META_CHARSET.search(html)
    return match.group("charset") if match else ""