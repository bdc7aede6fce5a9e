import heapq
from collections.abc import Mapping
from typing import NamedTuple

from tokenizer import Token


class RankedEntry(NamedTuple):
    token: Token
    count: int


class _HeapItem:
    """Heap element where the smallest item is the weakest candidate.

    Weaker means a lower count or, for equal counts, a token that sorts later.
    """

    __slots__ = ("entry",)

    def __init__(self, entry: RankedEntry) -> None:
        self.entry = entry

    def __lt__(self, other: "_HeapItem") -> bool:
        if self.entry.count != other.entry.count:
            return self.entry.count < other.entry.count
        return self.entry.token > other.entry.token


def rank_key(entry: RankedEntry) -> tuple[int, Token]:
    return -entry.count, entry.token


def select_top_k(freq: Mapping[Token, int], k: int) -> list[RankedEntry]:
    if k <= 0:
        return []

    heap: list[_HeapItem] = []
    for token, count in freq.items():
        item = _HeapItem(RankedEntry(token, count))
        if len(heap) < k:
            heapq.heappush(heap, item)
        elif heap[0] < item:
            heapq.heapreplace(heap, item)

    return sorted((item.entry for item in heap), key=rank_key)
