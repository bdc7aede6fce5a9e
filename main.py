import argparse
import logging
import sys
from pathlib import Path
from typing import Sequence

from chunks import CHUNK_MODES, DEFAULT_CHUNK_SIZE
from config import Config, default_workers
from counting import count_file
from errors import WordFreqError
from tokenizer import TOKENIZERS
from top_k import RankedEntry, select_top_k

logger = logging.getLogger(__name__)


def parse_args(argv: Sequence[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        prog="top-words",
        description="Count word frequencies in parallel and print the most frequent.",
    )
    parser.add_argument("--file", required=True, type=Path, help="input text file")
    parser.add_argument(
        "-n", type=int, default=10, help="number of top words to find (default: 10)"
    )
    parser.add_argument(
        "--workers",
        type=int,
        default=default_workers(),
        help="number of counting processes (default: CPU count)",
    )
    parser.add_argument(
        "--chunk-size",
        type=int,
        default=DEFAULT_CHUNK_SIZE,
        help="target chunk size in bytes (default: 64 MiB)",
    )
    parser.add_argument(
        "--queue-depth",
        type=int,
        default=None,
        help="maximum chunks waiting for a worker (default: 2 x workers)",
    )
    parser.add_argument("--mode", choices=CHUNK_MODES, default="line")
    parser.add_argument("--tokenizer", choices=sorted(TOKENIZERS), default="whitespace")
    parser.add_argument("--output", type=Path, help="also write the report here")
    parser.add_argument("--log-level", default="WARNING")
    return parser.parse_args(argv)


def format_report(n: int, results: Sequence[RankedEntry]) -> str:
    lines = [f"Top {n} words by frequency:"]
    lines.extend(f"{entry.token}: {entry.count}" for entry in results)
    return "\n".join(lines) + "\n"


def main(argv: Sequence[str] | None = None) -> int:
    args = parse_args(argv)
    logging.basicConfig(
        level=getattr(logging, args.log_level.upper(), logging.WARNING),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    try:
        config = Config(
            top_n=args.n,
            workers=args.workers,
            chunk_size=args.chunk_size,
            queue_depth=args.queue_depth,
            mode=args.mode,
            tokenizer=args.tokenizer,
        )
    except ValueError as exc:
        print(f"error: {exc}", file=sys.stderr)
        return 2

    try:
        freq = count_file(args.file, config)
    except WordFreqError as exc:
        print(f"error: {exc}", file=sys.stderr)
        return 1

    logger.info("counted %d distinct tokens", len(freq))
    report = format_report(config.top_n, select_top_k(freq, config.top_n))
    sys.stdout.write(report)

    if args.output is not None:
        try:
            args.output.parent.mkdir(parents=True, exist_ok=True)
            args.output.write_text(report, encoding="utf-8")
        except OSError as exc:
            print(f"error: cannot write {args.output}: {exc}", file=sys.stderr)
            return 1

    return 0


if __name__ == "__main__":
    raise SystemExit(main())
