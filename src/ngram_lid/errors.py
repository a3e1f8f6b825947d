from __future__ import annotations


class NgramLidError(Exception):
    """
    Base error class for ngram-lid.

    Callers can catch NgramLidError for package-level issues while still relying on the
    built-in exception types mixed into each subclass.
    """


class ConfigurationError(ValueError, NgramLidError):
    """
    Raised when the detector configuration or the training set cannot produce a model.

    Subclasses ValueError so plain `except ValueError` keeps working.
    """


class InvalidConfigError(ConfigurationError):
    """
    Raised when a user-provided config/argument is invalid.
    """


class MissingLanguageError(ConfigurationError):
    """
    Raised when a supported language has no training examples.
    """

    def __init__(self, language: str) -> None:
        self.language = language
        super().__init__(
            f"No training examples found for language {language}. "
            "Provide examples for each language"
        )


class InternalConsistencyError(RuntimeError, NgramLidError):
    """
    Raised when aggregated counts and probability estimation disagree (e.g. a zero total).
    """

    def __init__(self, message: str, *, gram: bytes | None = None) -> None:
        self.gram = gram
        super().__init__(message)
