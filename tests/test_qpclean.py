import io

import pytest

from enmime.qpclean import QPCleaner


@pytest.mark.parametrize(
    "data, want",
    [
        ("", ""),
        ("abcDEF_", "abcDEF_"),
        ("=5bSlack=5d", "=5bSlack=5d"),
        ("low: ,high:~", "low: ,high:~"),
        ("\r\n\t", "\r\n\t"),
        ("pédagogues", "p=C3=A9dagogues"),
        ("Stuffs’s", "Stuffs=E2=80=99s"),
        ("=", "=3D"),
        ("=a", "=3Da"),
    ],
)
def test_cleaner(data, want):
    cleaner = QPCleaner(io.BytesIO(data.encode("utf-8")))
    assert cleaner.read().decode("ascii") == want


def test_overflow_with_shrinking_reads():
    data = "pédagogues =\r\n".encode("utf-8") * 1000
    want = b"p=C3=A9dagogues =\r\n" * 1000
    qp = QPCleaner(io.BytesIO(data))
    offset = 0
    for size in range(1000, 0, -100):
        chunk = qp.read(size)
        assert len(chunk) >= 1
        assert chunk == want[offset:offset + len(chunk)]
        offset += len(chunk)


@pytest.mark.parametrize("buf_size", [5, 4, 3, 2, 1])
def test_small_destination(buf_size):
    data = "pédagogues =z =\r\n".encode("utf-8") * 100
    want = b"p=C3=A9dagogues =3Dz =\r\n" * 100
    qp = QPCleaner(io.BytesIO(data))
    chunks = []
    while chunk := qp.read(buf_size):
        assert len(chunk) <= buf_size
        chunks.append(chunk)
    assert b"".join(chunks) == want


def test_line_break():
    data = "pédagogues =z ".encode("utf-8") * 10000
    output = QPCleaner(io.BytesIO(data)).read()
    want = 1024
    tolerance = 3
    assert len(output) >= want
    while len(output) > want:
        got = output.find(b"=\r\n")
        assert want - tolerance <= got <= want
        output = output[got + 3:]


def test_line_break_buffer_full():
    qp = QPCleaner(io.BytesIO(b"abc" * 10000))
    assert len(qp.read(1025)) == 1025


def test_line_break_buffer_full_keeps_all_data():
    qp = QPCleaner(io.BytesIO(b"abc" * 10000))
    first = qp.read(1025)
    rest = qp.read()
    assert (first + rest).replace(b"=\r\n", b"") == b"abc" * 10000


class _BreakingStream:
    def __init__(self):
        self._calls = 0

    def read(self, size=-1):
        self._calls += 1
        if self._calls == 1:
            return b"=a"
        raise OSError("peek failure")


def test_peek_error_propagates():
    qp = QPCleaner(_BreakingStream())
    with pytest.raises(OSError, match="peek failure"):
        qp.read(100)