import logging
import multiprocessing
import queue
from collections import Counter
from concurrent.futures import Future, ProcessPoolExecutor, as_completed
from os import PathLike
from typing import BinaryIO, Iterable, TypeAlias

from chunks import Chunk, read_chunks
from config import Config
from errors import InputError, StreamReadError, WorkerError
from merge import FrequencyPairs, merge_frequency_maps
from tokenizer import Token, Tokenizer, decode_chunk, get_tokenizer

logger = logging.getLogger(__name__)

# Seconds between liveness checks while the reader waits on a full queue.
POLL_INTERVAL = 0.5

WorkQueue: TypeAlias = queue.Queue[Chunk | None]


def count_tokens(tokens: Iterable[Token]) -> Counter[Token]:
    return Counter(tokens)


def count_chunk(chunk: Chunk, tokenizer: Tokenizer) -> Counter[Token]:
    return count_tokens(tokenizer.tokenize(decode_chunk(chunk.data)))


def count_worker(work_queue: WorkQueue, tokenizer: Tokenizer) -> FrequencyPairs:
    counts: Counter[Token] = Counter()
    num_chunks = 0

    # A None sentinel means the reader is done.
    while (chunk := work_queue.get()) is not None:
        counts.update(count_chunk(chunk, tokenizer))
        num_chunks += 1

    logger.debug(
        "worker counted %d chunks, %d distinct tokens", num_chunks, len(counts)
    )
    return sorted(counts.items())


def count_stream(
    stream: BinaryIO,
    config: Config,
    tokenizer: Tokenizer | None = None,
) -> dict[Token, int]:
    if tokenizer is None:
        tokenizer = get_tokenizer(config.tokenizer)

    total = config.workers
    with (
        multiprocessing.Manager() as manager,
        ProcessPoolExecutor(max_workers=total) as exe,
    ):
        work_queue = manager.Queue(maxsize=config.max_queued_chunks)
        futures = [
            exe.submit(count_worker, work_queue, tokenizer) for _ in range(total)
        ]

        read_error: StreamReadError | None = None
        try:
            num_chunks = 0
            try:
                for chunk in read_chunks(stream, config.chunk_size, config.mode):
                    dispatch(work_queue, chunk, futures)
                    num_chunks += 1
                    logger.debug(
                        "dispatched chunk %d (%d bytes)", chunk.index, len(chunk)
                    )
            except StreamReadError as exc:
                # Let already queued chunks drain before failing the run.
                read_error = exc

            for _ in futures:
                dispatch(work_queue, None, futures)
            logger.info("dispatched %d chunks to %d workers", num_chunks, total)

            maps: list[FrequencyPairs] = []
            for i, future in enumerate(as_completed(futures), 1):
                maps.append(collect(future))
                logger.info("Progress: %d/%d workers finished", i, total)
        except BaseException:
            abort(work_queue, futures)
            raise

    if read_error is not None:
        raise read_error

    return merge_frequency_maps(maps)


def count_file(
    path: str | PathLike[str],
    config: Config,
    tokenizer: Tokenizer | None = None,
) -> dict[Token, int]:
    try:
        stream = open(path, "rb")
    except OSError as exc:
        raise InputError(f"cannot open {path}: {exc.strerror or exc}") from exc

    with stream:
        return count_stream(stream, config, tokenizer)


def dispatch(work_queue: WorkQueue, item: Chunk | None, futures: list[Future]) -> None:
    check_workers(futures)
    while True:
        try:
            work_queue.put(item, timeout=POLL_INTERVAL)
            return
        except queue.Full:
            # A dead worker never drains the queue, so check before waiting again.
            check_workers(futures)


def check_workers(futures: list[Future]) -> None:
    for future in futures:
        if future.done():
            collect(future)


def collect(future: Future) -> FrequencyPairs:
    try:
        return future.result()
    except Exception as exc:
        raise WorkerError(f"counting worker failed: {exc!r}") from exc


def abort(work_queue: WorkQueue, futures: list[Future]) -> None:
    # Drop undispatched work, then release every worker still waiting on the queue.
    dropped = 0
    try:
        while True:
            try:
                if work_queue.get_nowait() is not None:
                    dropped += 1
            except queue.Empty:
                break

        logger.warning("aborting run, %d queued chunks discarded", dropped)

        for _ in futures:
            while not all(future.done() for future in futures):
                try:
                    work_queue.put(None, timeout=POLL_INTERVAL)
                    break
                except queue.Full:
                    continue
    except (OSError, EOFError) as exc:
        # The manager process is gone (e.g. it received the same Ctrl-C).
        logger.warning("work queue unavailable during abort: %r", exc)
