"""ngram-lid.

Train byte n-gram language profiles. Prefer `LanguageDetector` + `LanguageDetectorConfig` for SDK
usage; the returned `LanguageDetectorModel` holds the gram -> per-language score table.
"""

from .aggregate import reduce_grams
from .config import LanguageDetectorConfig
from .dataset import Broadcast, GroupedDataset, PartitionedDataset, broadcast
from .detector import (
    EventHook,
    LanguageDetector,
    LanguageDetectorModel,
    compute_gram_probabilities,
)
from .errors import (
    ConfigurationError,
    InternalConsistencyError,
    InvalidConfigError,
    MissingLanguageError,
    NgramLidError,
)
from .grams import compute_grams, sliding_grams, text_grams
from .probabilities import compute_probabilities, score_vector
from .profile import filter_top_grams, select_top_grams
from .training_data import TrainingExample, load_training_jsonl

__all__ = [
    "LanguageDetector",
    "LanguageDetectorConfig",
    "LanguageDetectorModel",
    "EventHook",
    "TrainingExample",
    "load_training_jsonl",
    "compute_gram_probabilities",
    "compute_grams",
    "sliding_grams",
    "text_grams",
    "reduce_grams",
    "compute_probabilities",
    "score_vector",
    "filter_top_grams",
    "select_top_grams",
    "PartitionedDataset",
    "GroupedDataset",
    "Broadcast",
    "broadcast",
    "NgramLidError",
    "ConfigurationError",
    "InvalidConfigError",
    "MissingLanguageError",
    "InternalConsistencyError",
]

__version__ = "0.1.0"
