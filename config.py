import os
from dataclasses import dataclass, field

from chunks import CHUNK_MODES, DEFAULT_CHUNK_SIZE, ChunkMode
from tokenizer import TOKENIZERS


def default_workers() -> int:
    return os.cpu_count() or 1


@dataclass(frozen=True)
class Config:
    top_n: int = 10
    workers: int = field(default_factory=default_workers)
    chunk_size: int = DEFAULT_CHUNK_SIZE
    queue_depth: int | None = None
    mode: ChunkMode = "line"
    tokenizer: str = "whitespace"

    def __post_init__(self) -> None:
        if self.workers <= 0:
            raise ValueError("workers must be positive")
        if self.chunk_size <= 0:
            raise ValueError("chunk_size must be positive")
        if self.queue_depth is not None and self.queue_depth <= 0:
            raise ValueError("queue_depth must be positive")
        if self.mode not in CHUNK_MODES:
            raise ValueError(f"unknown chunk mode: {self.mode!r}")
        if self.tokenizer not in TOKENIZERS:
            raise ValueError(f"unknown tokenizer: {self.tokenizer!r}")

    @property
    def max_queued_chunks(self) -> int:
        # Peak memory is roughly (max_queued_chunks + workers) * chunk_size.
        return self.queue_depth if self.queue_depth is not None else 2 * self.workers
