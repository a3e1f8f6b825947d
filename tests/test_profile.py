from __future__ import annotations

import dataclasses
import math

import pytest

from ngram_lid.dataset import PartitionedDataset, broadcast
from ngram_lid.errors import InvalidConfigError
from ngram_lid.profile import filter_top_grams, select_top_grams

LN2 = math.log(2.0)
LN15 = math.log(1.5)


def _scores(pairs, n_partitions: int = 2) -> PartitionedDataset:
    return PartitionedDataset.from_iterable(pairs, n_partitions=n_partitions)


def test_top_one_per_language() -> None:
    ds = _scores([(b"a", (LN2, 0.0)), (b"b", (0.0, LN2)), (b"c", (LN15, LN15))])
    assert select_top_grams(ds, ["en", "fr"], 1) == {"en": [b"a"], "fr": [b"b"]}
    filtered, top_set = filter_top_grams(ds, ["en", "fr"], 1)
    assert top_set.value == frozenset({b"a", b"b"})
    assert sorted(g for g, _ in filtered.collect()) == [b"a", b"b"]


def test_gram_selected_for_two_languages_appears_once() -> None:
    ds = _scores([(b"a", (LN2, 0.0)), (b"b", (0.0, LN2)), (b"c", (LN15, LN15))])
    assert select_top_grams(ds, ["en", "fr"], 2) == {"en": [b"a", b"c"], "fr": [b"b", b"c"]}
    filtered, _ = filter_top_grams(ds, ["en", "fr"], 2)
    out = filtered.collect()
    assert sorted(g for g, _ in out) == [b"a", b"b", b"c"]
    assert dict(out)[b"c"] == (LN15, LN15)


def test_ties_break_by_gram_bytes() -> None:
    ds = _scores([(b"y", (LN2,)), (b"x", (LN2,)), (b"z", (LN2,)), (b"w", (0.0,))], n_partitions=3)
    assert select_top_grams(ds, ["en"], 2) == {"en": [b"x", b"y"]}


def test_fewer_grams_than_profile_size_selects_all() -> None:
    ds = _scores([(b"a", (LN2, 0.0)), (b"b", (0.0, LN2))])
    assert select_top_grams(ds, ["en", "fr"], 10) == {"en": [b"a", b"b"], "fr": [b"b", b"a"]}


def test_next_ranked_gram_is_not_selected() -> None:
    pairs = [(bytes([97 + i]), (i / 10.0,)) for i in range(8)]
    selected = select_top_grams(_scores(pairs, n_partitions=4), ["en"], 3)["en"]
    assert selected == [b"h", b"g", b"f"]
    assert b"e" not in selected


def test_profile_size_must_be_positive() -> None:
    with pytest.raises(InvalidConfigError):
        select_top_grams(_scores([(b"a", (LN2,))]), ["en"], 0)


def test_broadcast_is_read_only() -> None:
    b = broadcast(frozenset({b"a"}))
    with pytest.raises(dataclasses.FrozenInstanceError):
        b.value = frozenset()  # type: ignore[misc]
    with pytest.raises(TypeError):
        broadcast({b"a"})
