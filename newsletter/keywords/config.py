"""
Configuration for keyword extraction.
"""

from __future__ import annotations

import os
from dataclasses import dataclass, field
from enum import Enum

from newsletter.config import get_env_int

from .stopwords import DEFAULT_STOP_WORDS


class Segmentation(str, Enum):
    """How raw text is split into candidate tokens."""

    # Hangul/CJK runs and Latin-alphanumeric runs extracted independently.
    SCRIPT_AWARE = "script_aware"
    # Split on whitespace and punctuation only.
    WHITESPACE = "whitespace"


@dataclass(frozen=True)
class ExtractionConfig:
    """Immutable settings shared by Tokenizer, StopWordFilter and FrequencyRanker."""

    segmentation: Segmentation = Segmentation.SCRIPT_AWARE
    min_length: int = 2
    max_keywords: int = 10
    strip_suffixes: bool = True
    fold_latin_case: bool = True
    stop_words: frozenset = field(default=DEFAULT_STOP_WORDS)

    def __post_init__(self) -> None:
        if self.min_length < 1:
            raise ValueError("min_length must be >= 1")
        if self.max_keywords < 1:
            raise ValueError("max_keywords must be >= 1")

    @classmethod
    def from_env(cls) -> "ExtractionConfig":
        """Build the process-wide config from KEYWORD_* environment variables."""
        raw = os.getenv("KEYWORD_SEGMENTATION", Segmentation.SCRIPT_AWARE.value)
        try:
            segmentation = Segmentation(raw.strip().lower())
        except ValueError:
            segmentation = Segmentation.SCRIPT_AWARE
        return cls(
            segmentation=segmentation,
            min_length=max(1, get_env_int("KEYWORD_MIN_LENGTH", 2)),
            max_keywords=max(1, get_env_int("KEYWORD_LIMIT", 10)),
        )


DEFAULT_CONFIG = ExtractionConfig()
