from __future__ import annotations

from functools import reduce
from typing import Sequence

from .dataset import PartitionedDataset
from .grams import GramCount


def _add_counts(a: GramCount, b: GramCount) -> GramCount:
    return (a[0], a[1], a[2] + b[2])


def reduce_language_grams(
    grams: PartitionedDataset[GramCount], lang: str
) -> PartitionedDataset[GramCount]:
    """Sum the counts of every gram observed for `lang`."""

    return (
        grams.filter(lambda rec: rec[0] == lang)
        .group_by_key(lambda rec: rec[1])
        .reduce_groups(_add_counts)
        .map(lambda kv: kv[1])
    )


def reduce_grams(
    grams: PartitionedDataset[GramCount], supported_languages: Sequence[str]
) -> PartitionedDataset[GramCount]:
    """
    Merge per-text observations into one (language, gram, total) record per language and gram.

    Observations for languages outside `supported_languages` are dropped. Grams shared by several
    languages keep one record per language.
    """

    if not supported_languages:
        return grams.filter(lambda rec: False)
    return reduce(
        lambda acc, ds: acc.union(ds),
        [reduce_language_grams(grams, lang) for lang in supported_languages],
    )


def language_totals(counts: PartitionedDataset[GramCount]) -> dict[str, int]:
    """Total gram occurrences per language (reported by the `reduce` stage event)."""

    out: dict[str, int] = {}
    for lang, _gram, count in counts.collect():
        out[lang] = out.get(lang, 0) + int(count)
    return out