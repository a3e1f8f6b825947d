from __future__ import annotations

import math
from typing import Sequence

from .dataset import PartitionedDataset
from .errors import InternalConsistencyError
from .grams import Gram, GramCount

# (gram, one score per supported language, in supported-language order)
GramScores = tuple[Gram, tuple[float, ...]]

MAX_SCORE = math.log(2.0)


def score_vector(
    gram: Gram, record_languages: Sequence[str], supported_languages: Sequence[str]
) -> tuple[float, ...]:
    """
    Score one gram for every supported language.

    `record_languages` holds the language of each aggregated record for `gram`. For language `l`
    the odds are `#records in l / #records` and the score is `ln(1 + odds)`, so scores lie in
    [0, ln 2]. The denominator counts records (languages the gram occurs in), not occurrences.
    """

    total = len(record_languages)
    if total == 0:
        raise InternalConsistencyError(
            f"No aggregated records for gram {gram!r}; cannot compute language odds.",
            gram=gram,
        )
    return tuple(
        math.log(1.0 + sum(1 for rec_lang in record_languages if rec_lang == lang) / total)
        for lang in supported_languages
    )


def compute_probabilities(
    grams: PartitionedDataset[GramCount], supported_languages: Sequence[str]
) -> PartitionedDataset[GramScores]:
    """Group aggregated records by gram and produce one score vector per distinct gram."""

    languages = tuple(supported_languages)
    return grams.group_by_key(lambda rec: rec[1]).map_groups(
        lambda gram, recs: (gram, score_vector(gram, [rec[0] for rec in recs], languages))
    )
