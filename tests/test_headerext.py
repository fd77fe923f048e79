import pytest

from enmime.headerext import decode_ext_header, rfc2047_decode


@pytest.mark.parametrize("text", ["Test", "Testing One two 3 4"])
def test_plain_passthrough(text):
    assert decode_ext_header(text) == text


@pytest.mark.parametrize(
    "text",
    [
        "=?US\nASCII?Q?Keith_Moore?=",
        "=?US-ASCII?\r?Keith_Moore?=",
        "=?US-ASCII?Q?Keith_Moore?!",
    ],
)
def test_failure_passthrough(text):
    assert decode_ext_header(text) == text


@pytest.mark.parametrize(
    "text, want",
    [
        ("=?US-ASCII?B?SGVsbG8gV29ybGQ=?=", "Hello World"),
        ("(=?US-ASCII?B?SGVsbG8gV29ybGQ=?=)", "(Hello World)"),
        ("(Prefix =?US-ASCII?B?SGVsbG8gV29ybGQ=?=)", "(Prefix Hello World)"),
    ],
)
def test_ascii_b64(text, want):
    assert decode_ext_header(text) == want


@pytest.mark.parametrize(
    "text, want",
    [
        ("=?US-ASCII?Q?Keith_Moore?=", "Keith Moore"),
        ("(=?US-ASCII?Q?Keith_Moore?=)", "(Keith Moore)"),
        ("(Keith =?US-ASCII?Q?Moore?=)", "(Keith Moore)"),
    ],
)
def test_ascii_q(text, want):
    assert decode_ext_header(text) == want


@pytest.mark.parametrize(
    "text, want",
    [
        ("(=?ISO-8859-1?Q?a?=)", "(a)"),
        ("(=?ISO-8859-1?Q?a?= b)", "(a b)"),
        ("(=?ISO-8859-1?Q?a?= =?ISO-8859-1?Q?b?=)", "(ab)"),
        ("(=?ISO-8859-1?Q?a?=  =?ISO-8859-1?Q?b?=)", "(ab)"),
        ("(=?ISO-8859-1?Q?a?=\r\n  =?ISO-8859-1?Q?b?=)", "(ab)"),
        ("(=?ISO-8859-1?Q?a_b?=)", "(a b)"),
        ("(=?ISO-8859-1?Q?a?= =?ISO-8859-2?Q?_b?=)", "(a b)"),
    ],
)
def test_spacing(text, want):
    assert decode_ext_header(text) == want


@pytest.mark.parametrize(
    "text, want",
    [
        ("=?utf-8?q?abcABC_=24_=c2=a2_=e2=82=ac?=", "abcABC $ \u00a2 \u20ac"),
        ("=?iso-8859-1?q?#=a3_c=a9_r=ae_u=b5?=", "#\u00a3 c\u00a9 r\u00ae u\u00b5"),
        ("=?big5?q?=a1=5d_=a1=61_=a1=71?=", "\uff08 \uff5b \u3008"),
    ],
)
def test_charsets(text, want):
    assert decode_ext_header(text) == want


def test_us_ascii_high_bytes_become_replacement():
    assert decode_ext_header("=?us-ascii?q?a=FFb?=") == "a\ufffdb"


def test_invalid_word_is_kept():
    assert decode_ext_header("=?utf-8?q?a=zz?= tail") == "=?utf-8?q?a=zz?= tail"


@pytest.mark.parametrize(
    "text, want",
    [
        ("plain text", "plain text"),
        ("=?US-ASCII?q?Hello=20World?=", "Hello World"),
        ("=?US-ASCII?b?SGVsbG8gV29ybGQ=?=", "Hello World"),
        ("=?utf-8?b?PT9VUy1BU0NJST9xP0hlbGxvPTIwV29ybGQ/PQ==?=", "Hello World"),
    ],
)
def test_rfc2047_decode(text, want):
    assert rfc2047_decode(text) == want


def test_rfc2047_decode_quotes_decoded_pair():
    text = "=?UTF-8?B?bmFtZT0iw7DCn8KUwoo=?=You've got a new voice miss call.msg"
    want = "name=\"ð\u009f\u0094\u008aYou've got a new voice miss call.msg\""
    assert rfc2047_decode(text) == want


def test_rfc2047_decode_repairs_spaces_in_word():
    assert rfc2047_decode("=?UTF-8?B?SGVs bG8=?=") == "Hello"


def test_rfc2047_decode_newlines_become_spaces():
    assert rfc2047_decode("plain\r\ntext") == "plain  text"