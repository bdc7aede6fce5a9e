import logging
from dataclasses import dataclass
from typing import BinaryIO, Iterator, Literal, TypeAlias

from errors import StreamReadError

logger = logging.getLogger(__name__)

ChunkMode: TypeAlias = Literal["line", "byte"]

CHUNK_MODES: tuple[ChunkMode, ...] = ("line", "byte")
DEFAULT_CHUNK_SIZE = 64 * 1024 * 1024
WHITESPACE_BYTES = (b" ", b"\t", b"\n", b"\r", b"\x0b", b"\x0c")


@dataclass(frozen=True)
class Chunk:
    index: int
    offset: int
    data: bytes

    def __len__(self) -> int:
        return len(self.data)


def read_chunks(
    stream: BinaryIO,
    chunk_size: int = DEFAULT_CHUNK_SIZE,
    mode: ChunkMode = "line",
) -> Iterator[Chunk]:
    """
    Split a binary stream into consecutive chunks of roughly `chunk_size` bytes.

    In "line" mode a chunk is extended to the end of its line, reading at most
    another `chunk_size` bytes. If no newline turns up in that window the chunk
    is cut after its last ASCII whitespace byte and the rest is carried into the
    next chunk, so a token never straddles two chunks and chunks stay within
    2 * `chunk_size` (plus the length of one token). In "byte" mode chunks are
    exactly `chunk_size` bytes (except the last) and a token on a boundary is
    split in two.
    """
    if chunk_size <= 0:
        raise ValueError("chunk_size must be positive")
    if mode not in CHUNK_MODES:
        raise ValueError(f"unknown chunk mode: {mode!r}")

    index = 0
    offset = 0
    pending = b""
    while True:
        try:
            data = pending + stream.read(max(chunk_size - len(pending), 1))
            tail = b""
            if data and mode == "line" and not data.endswith(b"\n"):
                # Finish the current line, within one more chunk_size.
                tail = stream.readline(chunk_size)
                data += tail
        except OSError as exc:
            raise StreamReadError(f"read failed at byte {offset}: {exc}") from exc

        if not data:
            break

        pending = b""
        if tail and not tail.endswith(b"\n"):
            data, pending = split_after_whitespace(data)
            if not data:
                # Still inside one token, keep reading.
                continue

        yield Chunk(index, offset, data)
        index += 1
        offset += len(data)

    logger.debug("read %d chunks (%d bytes)", index, offset)


def split_after_whitespace(data: bytes) -> tuple[bytes, bytes]:
    cut = max(data.rfind(ch) for ch in WHITESPACE_BYTES)
    return data[: cut + 1], data[cut + 1 :]
