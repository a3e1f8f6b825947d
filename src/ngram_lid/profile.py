from __future__ import annotations

from typing import Sequence

from .dataset import Broadcast, PartitionedDataset, broadcast
from .errors import InvalidConfigError
from .grams import Gram
from .probabilities import GramScores


def rank_key(pair: tuple[Gram, float]) -> tuple[float, Gram]:
    # Score descending, then gram bytes ascending so ties resolve the same way on every run.
    return (-pair[1], pair[0])


def top_grams_for_language(
    gram_probabilities: PartitionedDataset[GramScores], lang_index: int, language_profile_size: int
) -> list[Gram]:
    """Return the `language_profile_size` best grams by the score at `lang_index`."""

    return [
        gram
        for gram, _score in gram_probabilities.map(lambda gv: (gv[0], gv[1][lang_index]))
        .sort_by(rank_key)
        .take(language_profile_size)
    ]


def select_top_grams(
    gram_probabilities: PartitionedDataset[GramScores],
    supported_languages: Sequence[str],
    language_profile_size: int,
) -> dict[str, list[Gram]]:
    """Per-language top-k selections, keyed by language, in rank order."""

    k = int(language_profile_size)
    if k < 1:
        raise InvalidConfigError("language_profile_size must be >= 1")
    return {
        lang: top_grams_for_language(gram_probabilities, i, k)
        for i, lang in enumerate(supported_languages)
    }


def filter_top_grams(
    gram_probabilities: PartitionedDataset[GramScores],
    supported_languages: Sequence[str],
    language_profile_size: int,
) -> tuple[PartitionedDataset[GramScores], Broadcast[frozenset[Gram]]]:
    """
    Keep only grams that are in the top `language_profile_size` of at least one language.

    The union of the per-language selections is broadcast once as a frozenset and every
    partition filters against that shared value. Returns the filtered dataset and the broadcast.
    """

    selections = select_top_grams(gram_probabilities, supported_languages, language_profile_size)
    top_gram_set: frozenset[Gram] = frozenset(g for grams in selections.values() for g in grams)
    b_top_gram_set = broadcast(top_gram_set)
    filtered = gram_probabilities.filter(lambda gv: gv[0] in b_top_gram_set.value)
    return filtered, b_top_gram_set
