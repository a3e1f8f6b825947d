from __future__ import annotations

import json

from typer.testing import CliRunner

from ngram_lid.cli import app

runner = CliRunner()


def _write_corpus(path, rows) -> None:
    path.write_text("\n".join(json.dumps(r, ensure_ascii=False) for r in rows) + "\n", encoding="utf-8")


def test_train_writes_report(tmp_path) -> None:
    data = tmp_path / "corpus.jsonl"
    _write_corpus(data, [{"lang": "en", "fulltext": "aa"}, {"lang": "fr", "fulltext": "bb"}])
    report = tmp_path / "out" / "summary.json"

    r = runner.invoke(
        app,
        ["train", str(data), "-l", "en", "-l", "fr", "-n", "1", "-k", "1", "--report", str(report)],
    )
    assert r.exit_code == 0, r.output
    summary = json.loads(report.read_text(encoding="utf-8"))
    assert summary["languages"] == ["en", "fr"]
    assert summary["gram_lengths"] == [1]
    assert summary["n_grams"] == 2
    assert summary["top_grams"]["en"][0]["gram"] == "a"
    assert summary["top_grams"]["fr"][0]["hex"] == "62"


def test_train_reads_config_file_and_flags_override(tmp_path) -> None:
    data = tmp_path / "corpus.jsonl"
    _write_corpus(data, [{"label": "en", "text": "abc"}, {"label": "fr", "text": "xyz"}])
    cfg = tmp_path / "cfg.json"
    cfg.write_text(
        json.dumps(
            {
                "supported_languages": ["en", "fr"],
                "gram_lengths": [1, 2],
                "language_profile_size": 100,
                "label_col": "label",
                "input_col": "text",
            }
        ),
        encoding="utf-8",
    )
    report = tmp_path / "summary.json"

    r = runner.invoke(
        app, ["train", str(data), "--config", str(cfg), "-k", "1", "--report", str(report), "-v"]
    )
    assert r.exit_code == 0, r.output
    summary = json.loads(report.read_text(encoding="utf-8"))
    assert summary["gram_lengths"] == [1, 2]
    assert summary["n_grams"] == 2


def test_train_missing_language_exits_with_error(tmp_path) -> None:
    data = tmp_path / "corpus.jsonl"
    _write_corpus(data, [{"lang": "en", "fulltext": "hello"}])

    r = runner.invoke(app, ["train", str(data), "-l", "en", "-l", "fr", "-n", "1", "-k", "5"])
    assert r.exit_code == 1
    assert "Training failed" in r.output
    assert "language fr" in r.output


def test_train_rejects_missing_file(tmp_path) -> None:
    r = runner.invoke(app, ["train", str(tmp_path / "nope.jsonl"), "-l", "en"])
    assert r.exit_code == 1


def test_grams_command_prints_counts() -> None:
    r = runner.invoke(app, ["grams", "abab", "-n", "2"])
    assert r.exit_code == 0, r.output
    rows = json.loads(r.stdout)
    assert {row["gram"]: row["count"] for row in rows} == {"ab": 2, "ba": 1}


def test_train_accepts_escaped_lone_surrogate(tmp_path) -> None:
    data = tmp_path / "corpus.jsonl"
    data.write_text(
        '{"lang": "en", "fulltext": "a\\ud800b"}\n{"lang": "fr", "fulltext": "cc"}\n',
        encoding="utf-8",
    )
    report = tmp_path / "summary.json"

    r = runner.invoke(
        app, ["train", str(data), "-l", "en", "-l", "fr", "-n", "1", "-k", "5", "--report", str(report)]
    )
    assert r.exit_code == 0, r.output
    summary = json.loads(report.read_text(encoding="utf-8"))
    assert "3f" in {row["hex"] for row in summary["top_grams"]["en"]}
