from __future__ import annotations

import json
from pathlib import Path
from typing import Any, Optional

import typer
from rich.console import Console
from rich.table import Table
from rich.text import Text

from .config import LanguageDetectorConfig
from .detector import LanguageDetector, LanguageDetectorModel
from .errors import NgramLidError
from .grams import text_grams
from .training_data import load_training_jsonl

app = typer.Typer(add_completion=False, no_args_is_help=True)
_console = Console()
_err_console = Console(stderr=True)


def _load_config_file(path: Optional[Path]) -> dict[str, Any]:
    if path is None:
        return {}
    data = json.loads(path.read_text(encoding="utf-8"))
    if not isinstance(data, dict):
        raise ValueError(f"{path} must contain a JSON object")
    return data


def _print_event(event: dict[str, Any]) -> None:
    _err_console.print(json.dumps(event, ensure_ascii=False), markup=False, highlight=False)


def model_summary(model: LanguageDetectorModel, *, top: int) -> dict[str, object]:
    return {
        "uid": model.uid,
        "languages": list(model.languages),
        "gram_lengths": list(model.gram_lengths),
        "n_grams": len(model),
        "top_grams": {
            lang: [
                {"gram": g.decode("utf-8", errors="replace"), "hex": g.hex(), "score": s}
                for g, s in model.top_grams(lang, top)
            ]
            for lang in model.languages
        },
    }


@app.command()
def train(
    data: Path = typer.Argument(..., help="JSONL file with one labeled text per line."),
    lang: Optional[list[str]] = typer.Option(
        None, "--lang", "-l", help="Supported language (repeat for several; order is kept)."
    ),
    gram_length: Optional[list[int]] = typer.Option(
        None, "--gram-length", "-n", help="Byte n-gram length (repeatable)."
    ),
    profile_size: Optional[int] = typer.Option(
        None, "--profile-size", "-k", help="Number of top grams kept per language."
    ),
    label_col: Optional[str] = typer.Option(None, help="Label column (default: lang)."),
    input_col: Optional[str] = typer.Option(None, help="Text column (default: fulltext)."),
    partitions: Optional[int] = typer.Option(None, help="Number of data partitions."),
    workers: Optional[int] = typer.Option(None, help="Worker threads per stage."),
    config: Optional[Path] = typer.Option(
        None, help="JSON config file; command-line flags override its values."
    ),
    report: Optional[Path] = typer.Option(
        None, help="Write a JSON summary to this path (directories auto-created)."
    ),
    top: int = typer.Option(10, help="Grams shown per language in the summary."),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Print stage events to stderr."),
) -> None:
    """Train a byte n-gram language profile and print a summary."""
    try:
        raw = _load_config_file(config)
        overrides = {
            "supported_languages": lang or None,
            "gram_lengths": gram_length or None,
            "language_profile_size": profile_size,
            "label_col": label_col,
            "input_col": input_col,
            "n_partitions": partitions,
            "workers": workers,
        }
        raw.update({k: v for k, v in overrides.items() if v is not None})
        cfg = LanguageDetectorConfig.from_dict(raw)

        examples = load_training_jsonl(data, label_col=cfg.label_col, input_col=cfg.input_col)
        detector = LanguageDetector.from_config(cfg, on_event=_print_event if verbose else None)
        model = detector.fit(examples)
    except (NgramLidError, OSError, ValueError) as e:
        _console.print(f"[red]Training failed:[/red] {e}")
        raise typer.Exit(code=1)

    summary = model_summary(model, top=top)
    table = Table(title=f"{summary['n_grams']} grams, lengths {summary['gram_lengths']}")
    table.add_column("language")
    table.add_column("top grams")
    for lang_code in model.languages:
        shown = [g.decode("utf-8", errors="replace") for g, _ in model.top_grams(lang_code, top)]
        table.add_row(lang_code, Text(" ".join(repr(g) for g in shown)))
    _console.print(table)

    if report:
        report.parent.mkdir(parents=True, exist_ok=True)
        report.write_text(json.dumps(summary, ensure_ascii=False, indent=2) + "\n", encoding="utf-8")
        _console.print(f"[green]Wrote report:[/green] {report}")


@app.command()
def grams(
    text: str = typer.Argument(..., help="Text to decompose."),
    gram_length: list[int] = typer.Option(
        [1, 2, 3], "--gram-length", "-n", help="Byte n-gram length (repeatable)."
    ),
) -> None:
    """Show the byte n-gram counts extracted from one text."""
    if any(n < 1 for n in gram_length):
        _console.print("[red]--gram-length must be >= 1[/red]")
        raise typer.Exit(code=1)
    rows = [
        {"gram": g.decode("utf-8", errors="replace"), "hex": g.hex(), "count": c}
        for _, g, c in text_grams("", text, gram_length)
    ]
    _console.print(json.dumps(rows, ensure_ascii=False, indent=2), markup=False, highlight=False)
