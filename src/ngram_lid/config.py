from __future__ import annotations

from dataclasses import asdict, dataclass, fields
from typing import Any, Iterable

from .errors import InvalidConfigError

DEFAULT_LABEL_COL = "lang"
DEFAULT_INPUT_COL = "fulltext"


@dataclass(frozen=True)
class LanguageDetectorConfig:
    """
    Stable, SDK-first configuration for training a language profile.

    The CLI maps flags (or a JSON config file) to this object; `LanguageDetector.from_config`
    accepts it directly.
    """

    # Languages the model can score. This is also the order of every score vector.
    supported_languages: tuple[str, ...] = ()

    # Byte n-gram sizes to extract, e.g. (1, 2, 3).
    gram_lengths: tuple[int, ...] = (1, 2, 3)

    # Number of top grams kept per language.
    language_profile_size: int = 1000

    # Input columns for mapping rows.
    label_col: str = DEFAULT_LABEL_COL
    input_col: str = DEFAULT_INPUT_COL

    # Partitions used for input splitting and shuffles; threads for per-partition work.
    n_partitions: int = 1
    workers: int = 1

    # Serialization schema version for backwards-compatible config dicts.
    # NOTE: keep this field last to avoid breaking positional construction.
    schema_version: int = 1

    def normalized(self) -> "LanguageDetectorConfig":
        """Return a normalized config (types/constraints); raises InvalidConfigError."""

        languages = _as_str_tuple(self.supported_languages)
        if not languages:
            raise InvalidConfigError("supported_languages must contain at least one language")
        dupes = sorted({x for x in languages if languages.count(x) > 1})
        if dupes:
            raise InvalidConfigError(f"supported_languages has duplicates: {', '.join(dupes)}")

        gram_lengths = tuple(_as_int(n, key="gram_lengths") for n in _as_tuple(self.gram_lengths))
        if not gram_lengths:
            raise InvalidConfigError("gram_lengths must contain at least one length")
        if any(n < 1 for n in gram_lengths):
            raise InvalidConfigError("gram_lengths must all be >= 1")

        profile_size = _as_int(self.language_profile_size, key="language_profile_size")
        if profile_size < 1:
            raise InvalidConfigError("language_profile_size must be >= 1")

        label_col = str(self.label_col or "").strip()
        input_col = str(self.input_col or "").strip()
        if not label_col or not input_col:
            raise InvalidConfigError("label_col and input_col must be non-empty")

        n_partitions = _as_int(self.n_partitions, key="n_partitions")
        if n_partitions < 1:
            raise InvalidConfigError("n_partitions must be >= 1")
        workers = _as_int(self.workers, key="workers")
        if workers < 1:
            raise InvalidConfigError("workers must be >= 1")

        return LanguageDetectorConfig(
            supported_languages=languages,
            gram_lengths=gram_lengths,
            language_profile_size=profile_size,
            label_col=label_col,
            input_col=input_col,
            n_partitions=n_partitions,
            workers=workers,
            schema_version=max(1, _as_int(self.schema_version, key="schema_version")),
        )

    def to_dict(self) -> dict[str, object]:
        # Keep it JSON-friendly: tuples become lists.
        d = dict(asdict(self))
        d["supported_languages"] = list(self.supported_languages)
        d["gram_lengths"] = list(self.gram_lengths)
        return d

    @classmethod
    def from_dict(cls, data: dict[str, object], *, strict: bool = False) -> "LanguageDetectorConfig":
        """
        Load a config from a JSON-friendly dict.

        Backward compatibility policy:
          - Older dicts without `schema_version` are accepted.
          - Unknown keys are ignored by default (strict=False).
          - Values are coerced conservatively (e.g., "3" -> 3, "en,fr" -> ("en", "fr")).
        """

        if not isinstance(data, dict):
            raise InvalidConfigError("config must be a dict")

        allowed = {f.name for f in fields(cls)}
        unknown = sorted([k for k in data.keys() if k not in allowed])
        if unknown and strict:
            raise InvalidConfigError(f"Unknown config keys: {', '.join(unknown)}")

        kwargs: dict[str, Any] = {}
        if "supported_languages" in data:
            kwargs["supported_languages"] = _as_str_tuple(data.get("supported_languages"))
        if "gram_lengths" in data:
            kwargs["gram_lengths"] = tuple(
                _as_int(v, key="gram_lengths") for v in _as_tuple(data.get("gram_lengths"))
            )
        if "language_profile_size" in data:
            kwargs["language_profile_size"] = _as_int(
                data.get("language_profile_size"), key="language_profile_size"
            )
        if "label_col" in data:
            kwargs["label_col"] = str(data.get("label_col") or "").strip() or DEFAULT_LABEL_COL
        if "input_col" in data:
            kwargs["input_col"] = str(data.get("input_col") or "").strip() or DEFAULT_INPUT_COL
        if "n_partitions" in data:
            kwargs["n_partitions"] = _as_int(data.get("n_partitions"), key="n_partitions")
        if "workers" in data:
            kwargs["workers"] = _as_int(data.get("workers"), key="workers")

        # v1: schema_version introduced. Older dicts may not have it.
        v = data.get("schema_version")
        kwargs["schema_version"] = 1 if v is None else _as_int(v, key="schema_version")

        return cls(**kwargs).normalized()


def _as_tuple(v: Any) -> tuple[Any, ...]:
    if v is None:
        return ()
    if isinstance(v, str):
        return tuple(s.strip() for s in v.split(",") if s.strip())
    if isinstance(v, (set, frozenset)):
        raise InvalidConfigError("expected an ordered list, got an unordered set")
    if isinstance(v, Iterable):
        return tuple(v)
    return (v,)


def _as_str_tuple(v: Any) -> tuple[str, ...]:
    return tuple(s for s in (str(x).strip() for x in _as_tuple(v)) if s)


def _as_int(v: Any, *, key: str) -> int:
    # Accepts ints, integral floats and numeric strings; never truncates.
    if isinstance(v, bool):
        raise InvalidConfigError(f"{key} must be an integer, got {v!r}")
    if isinstance(v, float):
        if not v.is_integer():
            raise InvalidConfigError(f"{key} must be an integer, got {v!r}")
        return int(v)
    try:
        return int(v)
    except (TypeError, ValueError) as e:
        raise InvalidConfigError(f"{key} must be an integer, got {v!r}") from e
