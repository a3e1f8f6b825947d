from __future__ import annotations

import uuid
from dataclasses import dataclass
from types import MappingProxyType
from typing import Any, Callable, Iterable, Mapping, Optional, Sequence, Union

from .aggregate import language_totals, reduce_grams
from .config import DEFAULT_INPUT_COL, DEFAULT_LABEL_COL, LanguageDetectorConfig
from .dataset import PartitionedDataset
from .errors import MissingLanguageError
from .grams import Gram, compute_grams
from .probabilities import GramScores, compute_probabilities
from .profile import filter_top_grams, rank_key
from .training_data import select_label_text

EventHook = Callable[[dict[str, Any]], None]

TrainingInput = Union[PartitionedDataset[Any], Iterable[Any]]

_PREVIEW = 12


def _emit(hook: Optional[EventHook], event: dict[str, Any]) -> None:
    if hook is None:
        return
    try:
        hook(event)
    except Exception:
        # Reporting must never break training.
        return


def _show_gram(gram: Gram) -> str:
    return gram.decode("utf-8", errors="replace")


def random_uid(prefix: str) -> str:
    return f"{prefix}_{uuid.uuid4().hex[-12:]}"


@dataclass(frozen=True)
class LanguageDetectorModel:
    """
    Trained language profile: gram -> one score per language, in `languages` order.

    Immutable once built; `gram_probabilities` is a read-only mapping.
    """

    gram_probabilities: Mapping[Gram, tuple[float, ...]]
    gram_lengths: tuple[int, ...]
    languages: tuple[str, ...]
    uid: str = ""

    def __post_init__(self) -> None:
        frozen = {bytes(g): tuple(float(s) for s in v) for g, v in self.gram_probabilities.items()}
        object.__setattr__(self, "gram_probabilities", MappingProxyType(frozen))
        object.__setattr__(self, "gram_lengths", tuple(int(n) for n in self.gram_lengths))
        object.__setattr__(self, "languages", tuple(str(x) for x in self.languages))

    def __len__(self) -> int:
        return len(self.gram_probabilities)

    def __contains__(self, gram: object) -> bool:
        return gram in self.gram_probabilities

    def scores(self, gram: Gram) -> Optional[tuple[float, ...]]:
        return self.gram_probabilities.get(gram)

    def language_index(self, lang: str) -> int:
        try:
            return self.languages.index(lang)
        except ValueError:
            raise KeyError(
                f"Unknown language {lang!r}; model languages: {list(self.languages)}"
            ) from None

    def top_grams(self, lang: str, n: Optional[int] = None) -> list[tuple[Gram, float]]:
        """Profile grams ranked by `lang`'s score (same order used when the profile was selected)."""

        i = self.language_index(lang)
        ranked = sorted(((g, v[i]) for g, v in self.gram_probabilities.items()), key=rank_key)
        return ranked if n is None else ranked[: max(0, int(n))]


def compute_gram_probabilities(
    data: PartitionedDataset[tuple[str, str]],
    gram_lengths: Sequence[int],
    language_profile_size: int,
    supported_languages: Sequence[str],
    *,
    on_event: Optional[EventHook] = None,
) -> PartitionedDataset[GramScores]:
    """
    Compute per-language scores for byte n-grams and keep each language's top grams.

    `data` holds (language, text) pairs, `supported_languages` fixes the order of every score
    vector and `language_profile_size` is the number of grams kept per language. Each
    intermediate stage is cached before the next one consumes it.
    """

    grams = compute_grams(data, gram_lengths).cache()
    _emit(
        on_event,
        {
            "stage": "grams",
            "n_observations": grams.count(),
            "preview": [
                {"lang": lang, "gram": _show_gram(g), "count": c}
                for lang, g, c in grams.take(_PREVIEW)
            ],
        },
    )

    reduced = reduce_grams(grams, supported_languages).cache()
    _emit(
        on_event,
        {
            "stage": "reduce",
            "n_records": reduced.count(),
            "occurrences_per_language": language_totals(reduced),
        },
    )

    probabilities = compute_probabilities(reduced, supported_languages).cache()
    _emit(
        on_event,
        {
            "stage": "probabilities",
            "n_grams": probabilities.count(),
            "preview": [
                {"gram": _show_gram(g), "scores": list(v)}
                for g, v in probabilities.take(_PREVIEW)
            ],
        },
    )

    top, top_set = filter_top_grams(probabilities, supported_languages, language_profile_size)
    _emit(
        on_event,
        {
            "stage": "top_grams",
            "language_profile_size": int(language_profile_size),
            "n_selected": len(top_set.value),
        },
    )
    return top


class LanguageDetector:
    """
    Trains a `LanguageDetectorModel` from labeled text.

    Input rows are mappings (read through `label_col` / `input_col`), `TrainingExample`s or
    (label, text) pairs; a `PartitionedDataset` of such rows keeps its own partitioning.
    """

    def __init__(
        self,
        supported_languages: Sequence[str],
        gram_lengths: Sequence[int],
        language_profile_size: int,
        *,
        uid: Optional[str] = None,
        label_col: str = DEFAULT_LABEL_COL,
        input_col: str = DEFAULT_INPUT_COL,
        n_partitions: int = 1,
        workers: int = 1,
        on_event: Optional[EventHook] = None,
    ) -> None:
        self.config = LanguageDetectorConfig(
            supported_languages=supported_languages,  # type: ignore[arg-type]
            gram_lengths=gram_lengths,  # type: ignore[arg-type]
            language_profile_size=language_profile_size,
            label_col=label_col,
            input_col=input_col,
            n_partitions=n_partitions,
            workers=workers,
        ).normalized()
        self.uid = uid or random_uid("LanguageDetector")
        self.on_event = on_event

    @classmethod
    def from_config(
        cls,
        config: LanguageDetectorConfig,
        *,
        uid: Optional[str] = None,
        on_event: Optional[EventHook] = None,
    ) -> "LanguageDetector":
        cfg = config.normalized()
        return cls(
            cfg.supported_languages,
            cfg.gram_lengths,
            cfg.language_profile_size,
            uid=uid,
            label_col=cfg.label_col,
            input_col=cfg.input_col,
            n_partitions=cfg.n_partitions,
            workers=cfg.workers,
            on_event=on_event,
        )

    @property
    def supported_languages(self) -> tuple[str, ...]:
        return self.config.supported_languages

    @property
    def gram_lengths(self) -> tuple[int, ...]:
        return self.config.gram_lengths

    @property
    def language_profile_size(self) -> int:
        return self.config.language_profile_size

    def fit(
        self,
        dataset: TrainingInput,
        label_col: Optional[str] = None,
        input_col: Optional[str] = None,
    ) -> LanguageDetectorModel:
        cfg = self.config
        label_col = label_col or cfg.label_col
        input_col = input_col or cfg.input_col
        languages = cfg.supported_languages
        supported = frozenset(languages)
        on_event = self.on_event

        if isinstance(dataset, PartitionedDataset):
            rows = dataset
        else:
            rows = PartitionedDataset.from_iterable(
                dataset, n_partitions=cfg.n_partitions, workers=cfg.workers
            )

        training = (
            rows.map(lambda row: select_label_text(row, label_col=label_col, input_col=input_col))
            .filter(lambda pair: pair[0] in supported)
            .cache()
        )
        _emit(on_event, {"stage": "select", "n_examples": training.count()})

        per_language = dict(
            training.map(lambda pair: (pair[0], 1))
            .group_by_key(lambda kv: kv[0])
            .reduce_groups(lambda a, b: (a[0], a[1] + b[1]))
            .map(lambda kv: kv[1])
            .collect()
        )
        counts = {lang: int(per_language.get(lang, 0)) for lang in languages}
        _emit(on_event, {"stage": "validate", "examples_per_language": counts})
        for lang in languages:
            if counts[lang] == 0:
                raise MissingLanguageError(lang)

        gram_probabilities = compute_gram_probabilities(
            training,
            cfg.gram_lengths,
            cfg.language_profile_size,
            languages,
            on_event=on_event,
        )
        profile = dict(gram_probabilities.collect())

        model = LanguageDetectorModel(
            gram_probabilities=profile,
            gram_lengths=cfg.gram_lengths,
            languages=languages,
            uid=self.uid,
        )
        _emit(on_event, {"stage": "done", "uid": self.uid, "n_grams": len(model)})
        return model

    def __repr__(self) -> str:
        return (
            f"LanguageDetector(uid={self.uid!r}, supported_languages={list(self.supported_languages)}, "
            f"gram_lengths={list(self.gram_lengths)}, language_profile_size={self.language_profile_size})"
        )
