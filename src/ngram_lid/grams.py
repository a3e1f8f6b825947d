from __future__ import annotations

from collections import Counter
from typing import Sequence

from .dataset import PartitionedDataset

Gram = bytes

# (language, gram, count): per-text observations before aggregation, per-language totals after.
GramCount = tuple[str, Gram, int]


def sliding_grams(data: bytes, gram_length: int) -> Counter[Gram]:
    """
    Count every contiguous `gram_length`-byte window of `data` (step 1).

    Inputs shorter than `gram_length` produce an empty counter.
    """

    n = len(data) - gram_length + 1
    return Counter(data[i : i + gram_length] for i in range(max(0, n)))


def text_grams(lang: str, text: str, gram_lengths: Sequence[int]) -> list[GramCount]:
    # Lengths are handled independently; a repeated length repeats its observations.
    # Unencodable characters (lone surrogates) become b"?".
    raw = (text or "").encode("utf-8", errors="replace")
    out: list[GramCount] = []
    for gram_length in gram_lengths:
        for gram, count in sliding_grams(raw, gram_length).items():
            out.append((lang, gram, count))
    return out


def compute_grams(
    data: PartitionedDataset[tuple[str, str]], gram_lengths: Sequence[int]
) -> PartitionedDataset[GramCount]:
    """Turn (language, text) pairs into (language, gram, count) observations, one per text."""

    lengths = tuple(int(n) for n in gram_lengths)
    return data.flat_map(lambda pair: text_grams(pair[0], pair[1], lengths))
