from __future__ import annotations

import json
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Iterable, Mapping

from .config import DEFAULT_INPUT_COL, DEFAULT_LABEL_COL
from .errors import InvalidConfigError


@dataclass(frozen=True)
class TrainingExample:
    """
    One labeled text.

    Schema (JSONL, default columns):
      {"lang": "en", "fulltext": "..."}
    """

    lang: str
    text: str


def select_label_text(
    row: Any, *, label_col: str = DEFAULT_LABEL_COL, input_col: str = DEFAULT_INPUT_COL
) -> tuple[str, str]:
    """
    Project a row onto (label, text).

    Rows may be mappings (columns looked up by name), `TrainingExample`s or (label, text) pairs.
    """

    if isinstance(row, TrainingExample):
        return (row.lang, row.text)
    if isinstance(row, Mapping):
        for col in (label_col, input_col):
            if col not in row:
                raise InvalidConfigError(f"Row is missing column {col!r}")
        return (str(row[label_col]), str(row[input_col] or ""))
    if isinstance(row, (tuple, list)) and len(row) == 2:
        return (str(row[0]), str(row[1] or ""))
    raise InvalidConfigError(
        f"Unsupported training row of type {type(row).__name__}; "
        "expected a mapping, a TrainingExample or a (label, text) pair"
    )


def iter_jsonl(path: str | Path) -> Iterable[dict[str, Any]]:
    p = Path(path)
    with p.open("r", encoding="utf-8") as f:
        for line in f:
            s = (line or "").strip()
            if not s:
                continue
            yield json.loads(s)


def load_training_jsonl(
    path: str | Path, *, label_col: str = DEFAULT_LABEL_COL, input_col: str = DEFAULT_INPUT_COL
) -> list[TrainingExample]:
    out: list[TrainingExample] = []
    for rec in iter_jsonl(path):
        lang, text = select_label_text(rec, label_col=label_col, input_col=input_col)
        out.append(TrainingExample(lang=lang, text=text))
    return out
