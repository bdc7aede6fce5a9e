import heapq
import itertools
from collections.abc import Mapping
from operator import itemgetter
from typing import Iterable, TypeAlias

from tokenizer import Token

FrequencyPairs: TypeAlias = list[tuple[Token, int]]
FrequencyMap: TypeAlias = Mapping[Token, int] | Iterable[tuple[Token, int]]


def sorted_pairs(freq: FrequencyMap) -> FrequencyPairs:
    if isinstance(freq, Mapping):
        return sorted(freq.items())
    else:
        return sorted(freq)


def merge_frequency_maps(maps: Iterable[FrequencyMap]) -> dict[Token, int]:
    # Each input is sorted by token, so equal tokens come out adjacent.
    merged = heapq.merge(*(sorted_pairs(m) for m in maps))

    # Aggregate duplicate tokens by summing their counts.
    result: dict[Token, int] = {}
    grouped = itertools.groupby(merged, key=itemgetter(0))
    for token, group in grouped:
        result[token] = sum(c for _, c in group)

    return result
