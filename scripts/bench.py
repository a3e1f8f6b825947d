from __future__ import annotations

import argparse
import random
import statistics
import time

from ngram_lid import LanguageDetector


def _samples() -> list[tuple[str, str]]:
    return [
        ("en", "the quick brown fox jumps over the lazy dog"),
        ("en", "a journey of a thousand miles begins with a single step"),
        ("fr", "le vif renard brun saute par-dessus le chien paresseux"),
        ("fr", "petit à petit, l'oiseau fait son nid"),
        ("de", "der schnelle braune fuchs springt über den faulen hund"),
        ("de", "übung macht den meister"),
    ]


def _corpus(n_texts: int, seed: int) -> list[tuple[str, str]]:
    # Shuffled word salads per language, so gram counts grow with n_texts.
    rng = random.Random(seed)
    words = {lang: [] for lang, _ in _samples()}
    for lang, text in _samples():
        words[lang].extend(text.split())
    out: list[tuple[str, str]] = []
    langs = sorted(words)
    for i in range(n_texts):
        lang = langs[i % len(langs)]
        out.append((lang, " ".join(rng.choices(words[lang], k=30))))
    return out


def _bench_fit(n: int, *, n_texts: int, partitions: int, workers: int) -> dict[str, float]:
    data = _corpus(n_texts, seed=7)
    detector = LanguageDetector(
        ["en", "fr", "de"], [1, 2, 3], 200, n_partitions=partitions, workers=workers
    )

    # Warmup.
    _ = detector.fit(data)

    vals: list[float] = []
    n_grams = 0
    for _ in range(n):
        t0 = time.perf_counter()
        n_grams = len(detector.fit(data))
        vals.append(time.perf_counter() - t0)

    return {
        "runs": float(n),
        "n_texts": float(len(data)),
        "n_grams": float(n_grams),
        "mean_s": float(statistics.mean(vals)) if vals else 0.0,
        "p50_s": float(statistics.median(vals)) if vals else 0.0,
        "min_s": float(min(vals)) if vals else 0.0,
    }


def main() -> None:
    p = argparse.ArgumentParser(description="Micro-benchmark for ngram-lid training.")
    p.add_argument("--n", type=int, default=5, help="Number of benchmark iterations.")
    p.add_argument("--texts", type=int, default=3000, help="Number of synthetic training texts.")
    p.add_argument("--partitions", type=int, default=1, help="Number of data partitions.")
    p.add_argument("--workers", type=int, default=1, help="Worker threads per stage.")
    args = p.parse_args()

    res = _bench_fit(
        max(1, int(args.n)),
        n_texts=max(3, int(args.texts)),
        partitions=max(1, int(args.partitions)),
        workers=max(1, int(args.workers)),
    )
    print(res)


if __name__ == "__main__":
    main()
