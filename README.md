# enmime

Forgiving building blocks for reading real-world e-mail. Mail in the wild is
often malformed: mangled `Content-Type` headers, mislabelled charsets, doubly
encoded RFC 2047 words, stray bytes in base64 and quoted-printable bodies.
`enmime` repairs what it can instead of giving up.

## Installation

```
pip install .
```

There are no third-party dependencies. To run the test suite:

```
pip install ".[test]"
pytest
```

## Decoding headers

`enmime.inspect.decode_headers` takes the raw message bytes and returns the
common user-agent headers (From, To, Sender, Cc, Bcc, Subject, Date), each
mapped to a list of values with RFC 2047 encoded words decoded. Further header
names may be passed as extra arguments; all keys come back in canonical form
(`content-type` becomes `Content-Type`). A message whose headers run straight
into the body without a blank line is still read.

```python
from enmime.inspect import decode_headers, HeaderError

raw = (
    b"From: =?utf-8?q?Andr=C3=A9?= <andre@example.com>\r\n"
    b"Subject: Hello\r\n"
    b"\r\n"
    b"body\r\n"
)
headers = decode_headers(raw, "content-type")
print(headers["From"])          # ['André <andre@example.com>']
print(headers["Subject"])       # ['Hello']
print(headers["Content-Type"])  # []
```

A header block that cannot be read raises `HeaderError` (a `ValueError`).

## Tolerant media types

`enmime.mediatype.parse` parses a `Content-Type` or `Content-Disposition`
value and returns the media type, its parameters, and the names of parameters
that had no value. It copes with missing `;` separators, repeated parameters,
unquoted special characters, unescaped quotes, non-ASCII values and embedded
newlines. A value with no media type at all gives `("", {}, [])`; a value that
cannot be repaired raises `ValueError`.

```python
from enmime.mediatype import parse

mtype, params, invalid = parse("text/html; name=index.html; iso-8859-1")
# mtype == "text/html"
# params == {"name": "index.html"}
# invalid == ["iso-8859-1"]
```

The individual repairs are available as `fix_mangled_media_type`,
`fix_unquoted_specials`, `fix_unescaped_quotes` and `fix_newlines`.

## Part trees

`enmime.part.Part` is a node in a MIME tree, linked through `parent`,
`first_child` and `next_sibling`, and carrying fields such as `content_type`,
`disposition`, `file_name`, `charset`, `content` and `errors`. Parts can be
searched breadth-first or depth-first with any predicate:

```python
from enmime.part import Part

root = Part(content_type="multipart/alternative")
root.add_child(Part(content_type="text/plain"))
root.add_child(Part(content_type="text/html"))

html = root.breadth_match_first(lambda p: p.content_type == "text/html")
texts = root.depth_match_all(lambda p: p.content_type.startswith("text/"))
```

`breadth_match_all` and `depth_match_first` complete the set.
`Part.clone(parent)` copies a part together with its children and following
siblings, and `Part.text_content()` tells whether a part is text (no content
type, `text/*` or `multipart/*`).

## Lower-level helpers

- `enmime.headerext`: `decode_ext_header` decodes the encoded words in one
  header line; `rfc2047_decode` also undoes repeated encoding.
- `enmime.charsets`: `convert_to_utf8_string(charset, data)`,
  `new_charset_reader(charset, stream)` (a binary stream yielding UTF-8) and
  `find_charset_in_html(html)`. Unknown charsets raise `LookupError`.
- `enmime.idheader`: `from_id_header` and `to_id_header` for Content-ID and
  Message-ID values.
- `enmime.base64clean.Base64Cleaner`: wraps a binary stream and drops bytes
  that are not base64 data, listing unexpected ones in `errors`.
- `enmime.qpclean.QPCleaner`: wraps a binary stream and escapes bytes a
  quoted-printable decoder would reject, breaking over-long lines.
- `enmime.stringutil`: `join_address` for `(name, address)` pairs,
  `split_quoted`, `new_uuid` and `wrap`.

## What this package does not do

It does not read a whole message into a part tree: `Part` trees are built by
hand with `add_child`. It does not build or send mail; there is no SMTP
support, and there is no command-line tool.