"""Tolerant parsing of Content-Type and Content-Disposition header values."""

from __future__ import annotations

import base64
import re

from enmime.headerext import rfc2047_decode
from enmime.stringutil import split_quoted

_CT_APP_PREFIX = "application/"
_CT_APP_OCTET_STREAM = "application/octet-stream"
_CT_MULTIPART_MIXED = "multipart/mixed"
_CT_MULTIPART_PREFIX = "multipart/"
_CT_TEXT_PREFIX = "text/"
_CT_TEXT_PLAIN = "text/plain"

CT_PLACEHOLDER = "x-not-a-mime-type/x-not-a-mime-type"
"""Stands in for a content type that is missing entirely."""

PV_PLACEHOLDER = "not-a-param-value"
"""Stands in for the value of a parameter that has none."""

_NO_MEDIA_TYPE = "mime: no media type"
_TSPECIALS = frozenset('()<>@,;:\\"/[]?=')
_VALUE_SPECIALS = frozenset("()<>@,:/[]?=")
_ATTRIBUTE_SPECIALS = set('()<>@,;:"\\/[]?')
_MAX_B_CONTENT_LEN = 75 - len("=?UTF-8?q?") - len("?=")
_MAX_B_BYTES = _MAX_B_CONTENT_LEN // 4 * 3
_PERCENT_ESCAPE = re.compile(r"%([0-9A-Fa-f]{2})")


# --- Strict media type parsing -------------------------------------------------


def _is_token_char(char: str) -> bool:
    return " " < char < "\x7f" and char not in _TSPECIALS


def _consume_token(text: str) -> tuple[str, str]:
    end = 0
    while end < len(text) and _is_token_char(text[end]):
        end += 1
    return text[:end], text[end:]


def _consume_value(text: str) -> tuple[str, str]:
    if not text:
        return "", text
    if text[0] != '"':
        return _consume_token(text)
    out = []
    index = 1
    while index < len(text):
        char = text[index]
        if char == '"':
            return "".join(out), text[index + 1:]
        if char == "\\" and index + 1 < len(text) and text[index + 1] in _TSPECIALS:
            out.append(text[index + 1])
            index += 2
            continue
        if char in "\r\n":
            return "", text
        out.append(char)
        index += 1
    return "", text


def _consume_media_param(text: str) -> tuple[str, str, str]:
    rest = text.lstrip()
    if not rest.startswith(";"):
        return "", "", text
    rest = rest[1:].lstrip()
    param, rest = _consume_token(rest)
    param = param.lower()
    if not param:
        return "", "", text
    rest = rest.lstrip()
    if not rest.startswith("="):
        return "", "", text
    rest = rest[1:].lstrip()
    value, after = _consume_value(rest)
    if not value and after == rest:
        return "", "", text
    return param, value, after


def _check_media_type(mtype: str) -> None:
    kind, rest = _consume_token(mtype)
    if not kind:
        raise ValueError(_NO_MEDIA_TYPE)
    if not rest:
        return
    if not rest.startswith("/"):
        raise ValueError("mime: expected slash after first token")
    subtype, rest = _consume_token(rest[1:])
    if not subtype:
        raise ValueError("mime: expected token after slash")
    if rest:
        raise ValueError("mime: unexpected content after media subtype")


def _percent_unescape(text: str) -> str | None:
    stray = text.replace("%", "")
    if text.count("%") != len(_PERCENT_ESCAPE.findall(text)):
        return None
    del stray
    data = bytearray()
    pos = 0
    for match in _PERCENT_ESCAPE.finditer(text):
        data += text[pos:match.start()].encode("utf-8")
        data.append(int(match.group(1), 16))
        pos = match.end()
    data += text[pos:].encode("utf-8")
    return data.decode("utf-8", "replace")


def _decode_2231(value: str) -> str | None:
    pieces = value.split("'", 2)
    if len(pieces) != 3:
        return None
    charset = pieces[0].lower()
    if charset not in ("us-ascii", "utf-8"):
        return None
    return _percent_unescape(pieces[2])


def _parse_media_type(value: str) -> tuple[str, dict[str, str]]:
    base = value.split(";", 1)[0]
    mtype = base.lower().strip()
    _check_media_type(mtype)
    params: dict[str, str] = {}
    continuation: dict[str, dict[str, str]] = {}
    rest = value[len(base):]
    while rest:
        rest = rest.lstrip()
        if not rest:
            break
        key, val, remainder = _consume_media_param(rest)
        if not key:
            if remainder.strip() == ";":
                break
            raise ValueError("mime: invalid media parameter")
        target = params
        if "*" in key:
            target = continuation.setdefault(key.split("*", 1)[0], {})
        if key in target and target[key] != val:
            raise ValueError("mime: duplicate parameter name")
        target[key] = val
        rest = remainder

    for key, pieces in continuation.items():
        single = key + "*"
        if single in pieces:
            decoded = _decode_2231(pieces[single])
            if decoded is not None:
                params[key] = decoded
            continue
        out = []
        valid = False
        number = 0
        while True:
            simple = f"{key}*{number}"
            if simple in pieces:
                valid = True
                out.append(pieces[simple])
            elif simple + "*" in pieces:
                valid = True
                encoded = pieces[simple + "*"]
                decoded = _decode_2231(encoded) if number == 0 else _percent_unescape(encoded)
                if decoded is not None:
                    out.append(decoded)
            else:
                break
            number += 1
        if valid:
            params[key] = "".join(out)
    return mtype, params


# --- Repairs -------------------------------------------------------------------


def _b_encode(text: str) -> str:
    """Encode text as base64 encoded words in UTF-8."""
    data = text.encode("utf-8")
    if len(base64.b64encode(data)) <= _MAX_B_CONTENT_LEN:
        chunks = [data]
    else:
        chunks = []
        current = b""
        for char in text:
            encoded = char.encode("utf-8")
            if current and len(current) + len(encoded) > _MAX_B_BYTES:
                chunks.append(current)
                current = b""
            current += encoded
        chunks.append(current)
    return " ".join(
        "=?utf-8?b?" + base64.b64encode(chunk).decode("ascii") + "?=" for chunk in chunks
    )


def parse(ctype: str) -> tuple[str, dict[str, str], list[str]]:
    """Parse a media type header value, tolerating common malformations.

    Returns the media type, its parameters and the names of parameters that had
    no value.  A value with no media type at all yields ``("", {}, [])``.
    Raises ValueError when the value cannot be repaired.
    """
    cleaned = fix_newlines(
        fix_unescaped_quotes(fix_unquoted_specials(fix_mangled_media_type(ctype, ";")))
    )
    try:
        mtype, params = _parse_media_type(cleaned)
    except ValueError as exc:
        if str(exc) == _NO_MEDIA_TYPE:
            return "", {}, []
        raise
    if mtype == CT_PLACEHOLDER:
        mtype = ""
    invalid = [name for name, value in params.items() if value == PV_PLACEHOLDER]
    for name in invalid:
        del params[name]
    return mtype, params, invalid


def fix_mangled_media_type(mtype: str, sep: str) -> str:
    """Insert missing separators and drop repeated or invalid parameters."""
    if not mtype:
        return ""
    parts = split_quoted(mtype, sep, '"')
    if "=" in parts[0]:
        # A parameter here means the content type itself is missing.
        parts[0] = f"{_CT_APP_OCTET_STREAM}{sep} {parts[0]}"
        parts = sep.join(parts).split(sep)

    result = ""
    last = len(parts) - 1
    for index, part in enumerate(parts):
        if index == 0:
            if not part:
                part = CT_PLACEHOLDER
            if part.endswith("/"):
                part = {
                    _CT_TEXT_PREFIX: _CT_TEXT_PLAIN,
                    _CT_APP_PREFIX: _CT_APP_OCTET_STREAM,
                    _CT_MULTIPART_PREFIX: _CT_MULTIPART_MIXED,
                }.get(part, _CT_APP_OCTET_STREAM)
            if part.count("/") > 1:
                part = "/".join(part.split("/", 2)[:2])
        else:
            if not part.strip():
                continue
            if "=" not in part:
                part = part + "=" + PV_PLACEHOLDER
            part = rfc2047_decode(part)
            name = part.split("=", 1)[0] + "=" if "=" in part else part
            if name.strip() in result:
                continue
            if _ATTRIBUTE_SPECIALS.intersection(name):
                continue
        result += part
        if index != last and not result.endswith(";"):
            result = result.rstrip(" \t") + ";"
    return result.removesuffix(";")


def _consume_param(text: str) -> tuple[str, str]:
    """Return a cleaned first parameter of ``text`` and the text that follows it."""
    eq = text.find("=")
    if eq < 0:
        return "", text
    param = [text[:eq + 1]]
    s = text[eq + 1:]
    value: list[str] = []
    quoted_originally = False
    quote_added = False
    quote_needed = False
    rfc2047_needed = False
    rest = ""

    start = None
    for index, char in enumerate(s):
        if char in " \t":
            continue
        if char == '"':
            quoted_originally = quote_added = quote_needed = True
            param.append(char)
        elif char == ";":
            param.append('"";')
            return "".join(param), s[index + 1:]
        else:
            if ord(char) > 127:
                rfc2047_needed = True
            value.append(char)
        start = index
        break
    else:
        start = len(s) - 1

    def quote_if_unquoted() -> None:
        nonlocal quote_added, quote_needed
        if not quote_needed:
            if not quote_added:
                param.append('"')
                quote_added = True
            quote_needed = True

    if not s:
        param.append('""')
    else:
        if s[0] in _VALUE_SPECIALS:
            quote_if_unquoted()
        s = s[start + 1:]
        escaped = False
        for index, char in enumerate(s):
            if escaped:
                value.append(char)
                escaped = False
                continue
            if char == ";":
                if quoted_originally:
                    value.append(char)
                    continue
                rest = s[index:]
                break
            if char in " \t":
                if not quoted_originally:
                    quote_if_unquoted()
                value.append(char)
            elif char == '"':
                if quoted_originally:
                    rest = s[index:]
                    break
                quote_if_unquoted()
                value.append('\\"')
            elif char == "\\":
                if index < len(s) - 1:
                    value.append(char)
                    escaped = True
                    quote_if_unquoted()
            else:
                if char in _VALUE_SPECIALS:
                    quote_if_unquoted()
                if ord(char) > 127:
                    rfc2047_needed = True
                value.append(char)

    if value:
        val = "".join(value)
        if rfc2047_needed:
            val = _b_encode(val)
            quote_if_unquoted()
        param.append(val)
    if quote_needed:
        param.append('"')
    if rest:
        if rest[0] != '"':
            param.append(rest[0])
        rest = rest[1:]
    return "".join(param), rest


def fix_unquoted_specials(text: str) -> str:
    """Quote parameter values that contain RFC 2045 special characters."""
    idx = text.find(";")
    if idx < 0:
        return text
    clean = [text[:idx + 1]]
    rest = text[idx + 1:]
    while rest:
        consumed, rest = _consume_param(rest)
        if not consumed:
            clean.append(rest)
            break
        clean.append(consumed)
    return "".join(clean)


def _split_after(text: str, sep: str) -> list[str]:
    pieces = text.split(sep)
    return [piece + sep for piece in pieces[:-1]] + [pieces[-1]]


def fix_unescaped_quotes(hvalue: str) -> str:
    """Escape unescaped quotes that appear inside quoted parameter values."""
    params = _split_after(hvalue, ";")
    out: list[str] = []
    index = 0
    while index < len(params):
        current = params[index]
        eq = current.find("=")
        if eq < 0:
            out.append(current)
            index += 1
            continue
        out.append(current[:eq])
        param = current[eq:]
        first = param.find('"')
        closing = param.rfind('"')
        if first < 0:
            out.append(param)
            index += 1
            continue
        if closing == first:
            if index + 1 < len(params):
                param += params[index + 1]
            closing = param.rfind('"')
            index += 1
            if closing == first:
                out.append('=""')
                return "".join(out)

        out.append('="')
        out.append(param[1:first])
        rest = param[closing + 1:]
        if rest and rest != ";":
            out.append('\\"')
        escaped = False
        for char in param[first + 1:closing]:
            if char == '"':
                if not escaped:
                    out.append("\\")
                out.append(char)
            elif char == "\\":
                escaped = True
                out.append("\\")
            else:
                escaped = False
                out.append(char)
        if rest == ";":
            out.append('"' + rest)
        elif rest == "":
            out.append('"')
        else:
            out.append('\\"' + rest + '"')
        index += 1
    return "".join(out)


def fix_newlines(value: str) -> str:
    """Replace line feeds with spaces and drop carriage returns."""
    return value.replace("\n", " ").replace("\r", "")