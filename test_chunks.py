import io

import pytest

from chunks import Chunk, read_chunks
from errors import StreamReadError

TEXT = b"hello world\nfoo bar\n"


def test_line_mode_splits_on_line_boundary() -> None:
    chunks = list(read_chunks(io.BytesIO(TEXT), chunk_size=12, mode="line"))
    assert chunks == [
        Chunk(0, 0, b"hello world\n"),
        Chunk(1, 12, b"foo bar\n"),
    ]


def test_long_line_is_cut_after_whitespace() -> None:
    chunks = list(read_chunks(io.BytesIO(TEXT), chunk_size=5, mode="line"))
    assert chunks == [
        Chunk(0, 0, b"hello "),
        Chunk(1, 6, b"world\n"),
        Chunk(2, 12, b"foo bar\n"),
    ]


def test_newline_free_stream_stays_bounded() -> None:
    data = b"word " * 200_000
    chunks = list(read_chunks(io.BytesIO(data), chunk_size=1024, mode="line"))

    assert len(chunks) > 1
    assert max(len(c) for c in chunks) <= 2 * 1024
    assert b"".join(c.data for c in chunks) == data
    assert all(c.data.endswith(b" ") for c in chunks)


def test_token_longer_than_window_is_kept_whole() -> None:
    data = b"a " + b"x" * 50 + b" b"
    chunks = list(read_chunks(io.BytesIO(data), chunk_size=4, mode="line"))
    assert b"x" * 50 + b" " in [c.data for c in chunks]
    assert b"".join(c.data for c in chunks) == data


def test_byte_mode_may_split_tokens() -> None:
    chunks = list(read_chunks(io.BytesIO(TEXT), chunk_size=8, mode="byte"))
    assert [c.data for c in chunks] == [b"hello wo", b"rld\nfoo ", b"bar\n"]


@pytest.mark.parametrize("mode", ["line", "byte"])
@pytest.mark.parametrize("chunk_size", [1, 3, 7, 12, 100])
def test_chunks_cover_stream_exactly_once(mode: str, chunk_size: int) -> None:
    data = b"alpha beta\ngamma\n\ndelta epsilon zeta\neta"
    chunks = list(read_chunks(io.BytesIO(data), chunk_size=chunk_size, mode=mode))

    assert b"".join(c.data for c in chunks) == data
    assert [c.index for c in chunks] == list(range(len(chunks)))
    offset = 0
    for chunk in chunks:
        assert chunk.offset == offset
        assert len(chunk) > 0
        offset += len(chunk)


@pytest.mark.parametrize("chunk_size", [1, 3, 4, 8])
def test_line_mode_chunks_end_on_whitespace_except_last(chunk_size: int) -> None:
    data = b"one two\nthree\nfour five six\nseven"
    chunks = list(read_chunks(io.BytesIO(data), chunk_size=chunk_size, mode="line"))
    assert all(c.data[-1:].isspace() for c in chunks[:-1])
    assert chunks[-1].data.endswith(b"seven")


def test_empty_stream_has_no_chunks() -> None:
    assert list(read_chunks(io.BytesIO(b""))) == []


@pytest.mark.parametrize("chunk_size", [0, -1])
def test_invalid_chunk_size(chunk_size: int) -> None:
    with pytest.raises(ValueError):
        list(read_chunks(io.BytesIO(TEXT), chunk_size=chunk_size))


def test_invalid_mode() -> None:
    with pytest.raises(ValueError):
        list(read_chunks(io.BytesIO(TEXT), mode="word"))  # type: ignore[arg-type]


class FailingStream(io.BytesIO):
    def __init__(self, data: bytes, fail_after: int) -> None:
        super().__init__(data)
        self.reads = 0
        self.fail_after = fail_after

    def read(self, size: int | None = -1) -> bytes:
        if self.reads >= self.fail_after:
            raise OSError("disk on fire")
        self.reads += 1
        return super().read(size)


def test_read_error_is_wrapped() -> None:
    stream = FailingStream(b"a b c d e f\n" * 4, fail_after=2)
    chunks = read_chunks(stream, chunk_size=4, mode="byte")
    assert next(chunks).data == b"a b "
    assert next(chunks).data == b"c d "
    with pytest.raises(StreamReadError):
        next(chunks)
