from __future__ import annotations

import pytest

from ngram_lid.config import LanguageDetectorConfig
from ngram_lid.errors import InvalidConfigError


def _cfg() -> LanguageDetectorConfig:
    return LanguageDetectorConfig(
        supported_languages=("en", "fr"), gram_lengths=(1, 2), language_profile_size=50
    ).normalized()


def test_config_to_dict_includes_schema_version() -> None:
    d = _cfg().to_dict()
    assert isinstance(d, dict)
    assert int(d.get("schema_version", 0) or 0) >= 1
    assert d["supported_languages"] == ["en", "fr"]
    assert d["gram_lengths"] == [1, 2]


def test_config_roundtrip_to_from_dict() -> None:
    cfg = LanguageDetectorConfig(
        supported_languages=("en", "fr", "de"),
        gram_lengths=(1, 2, 3),
        language_profile_size=300,
        label_col="label",
        input_col="text",
        n_partitions=4,
        workers=2,
    ).normalized()
    cfg2 = LanguageDetectorConfig.from_dict(cfg.to_dict())
    assert cfg2 == cfg


def test_config_from_dict_accepts_v0_without_schema_version() -> None:
    old = {
        "supported_languages": "en, fr",
        "gram_lengths": ["1", 2],
        "language_profile_size": "10",
        # Unknown key should be ignored by default for back-compat.
        "some_future_field": "ignored",
    }
    cfg = LanguageDetectorConfig.from_dict(old)
    assert cfg.schema_version >= 1
    assert cfg.supported_languages == ("en", "fr")
    assert cfg.gram_lengths == (1, 2)
    assert cfg.language_profile_size == 10
    assert cfg.label_col == "lang"
    assert cfg.input_col == "fulltext"


def test_config_from_dict_strict_rejects_unknown_keys() -> None:
    with pytest.raises(InvalidConfigError):
        LanguageDetectorConfig.from_dict({"supported_languages": ["en"], "unknown": 1}, strict=True)


@pytest.mark.parametrize(
    "kwargs",
    [
        {"supported_languages": ()},
        {"supported_languages": ("en", "en")},
        {"supported_languages": ("en",), "gram_lengths": ()},
        {"supported_languages": ("en",), "gram_lengths": (0,)},
        {"supported_languages": ("en",), "language_profile_size": 0},
        {"supported_languages": ("en",), "n_partitions": 0},
        {"supported_languages": ("en",), "workers": 0},
        {"supported_languages": ("en",), "label_col": " "},
        {"supported_languages": {"en", "fr"}},
    ],
)
def test_invalid_configs_are_rejected(kwargs: dict[str, object]) -> None:
    with pytest.raises(InvalidConfigError):
        LanguageDetectorConfig(**kwargs).normalized()  # type: ignore[arg-type]


def test_non_integer_values_are_rejected() -> None:
    with pytest.raises(InvalidConfigError):
        LanguageDetectorConfig.from_dict({"supported_languages": ["en"], "workers": "many"})


def test_duplicate_gram_lengths_are_allowed() -> None:
    cfg = LanguageDetectorConfig(supported_languages=("en",), gram_lengths=(2, 2)).normalized()
    assert cfg.gram_lengths == (2, 2)


@pytest.mark.parametrize(
    "kwargs",
    [
        {"language_profile_size": 2.9},
        {"language_profile_size": "abc"},
        {"gram_lengths": (1, 2.5)},
        {"n_partitions": 1.5},
        {"workers": "two"},
    ],
)
def test_non_integral_values_are_rejected_not_truncated(kwargs: dict[str, object]) -> None:
    with pytest.raises(InvalidConfigError):
        LanguageDetectorConfig(supported_languages=("en",), **kwargs).normalized()  # type: ignore[arg-type]


def test_integral_floats_and_numeric_strings_are_accepted() -> None:
    cfg = LanguageDetectorConfig(
        supported_languages=("en",), gram_lengths=(1.0, "2"), language_profile_size=3.0
    ).normalized()
    assert cfg.gram_lengths == (1, 2)
    assert cfg.language_profile_size == 3
