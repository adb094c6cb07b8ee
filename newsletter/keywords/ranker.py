"""
Per-document keyword counting and top-N selection.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Dict, Iterable, List, Optional

from .config import DEFAULT_CONFIG, ExtractionConfig
from .stopwords import StopWordFilter
from .tokenizer import Tokenizer

NUMERIC_RE = re.compile(r"\d+")
LATIN_TOKEN_RE = re.compile(r"[A-Za-z0-9]+")


def fold_keyword(token: str) -> str:
    """Canonical stored form: Latin-alphanumeric keywords lower-cased, others unchanged."""
    return token.lower() if LATIN_TOKEN_RE.fullmatch(token) else token


@dataclass(frozen=True)
class KeywordCount:
    """A keyword and its number of occurrences within one document."""

    keyword: str
    frequency: int


class FrequencyRanker:
    """
    Count surviving tokens and return the most frequent ones.

    Latin-alphanumeric tokens are folded to lower case when
    ``fold_latin_case`` is set, so "GPT4" and "gpt4" count together and
    report as "gpt4" in every article. Other scripts are counted as-is.
    """

    def __init__(
        self,
        config: Optional[ExtractionConfig] = None,
        stop_words: Optional[StopWordFilter] = None,
    ) -> None:
        self.config = config or DEFAULT_CONFIG
        self.stop_words = stop_words or StopWordFilter(self.config.stop_words)

    def _is_candidate(self, token: str) -> bool:
        if len(token) < self.config.min_length:
            return False
        if NUMERIC_RE.fullmatch(token):
            return False
        return not self.stop_words.is_stop_word(token)

    def _count_key(self, token: str) -> str:
        return fold_keyword(token) if self.config.fold_latin_case else token

    def rank(self, tokens: Iterable[str], limit: Optional[int] = None) -> List[KeywordCount]:
        """
        Return up to ``limit`` (default: config.max_keywords) keywords.

        Sorted by descending frequency; ties keep first-occurrence order.
        """
        cap = self.config.max_keywords if limit is None else limit
        if cap <= 0:
            return []

        # dicts keep insertion order, i.e. first occurrence
        counts: Dict[str, int] = {}
        for token in tokens:
            if not isinstance(token, str):
                raise TypeError(f"token must be str, got {type(token).__name__}")
            token = token.strip()
            if not token or not self._is_candidate(token):
                continue
            key = self._count_key(token)
            counts[key] = counts.get(key, 0) + 1

        ordered = sorted(counts.items(), key=lambda item: item[1], reverse=True)
        return [KeywordCount(keyword=key, frequency=freq) for key, freq in ordered[:cap]]


class KeywordExtractor:
    """Tokenizer -> StopWordFilter -> FrequencyRanker over one document."""

    def __init__(self, config: Optional[ExtractionConfig] = None) -> None:
        self.config = config or DEFAULT_CONFIG
        self.tokenizer = Tokenizer(self.config)
        self.stop_words = StopWordFilter(self.config.stop_words)
        self.ranker = FrequencyRanker(self.config, self.stop_words)

    def extract(self, text: str, limit: Optional[int] = None) -> List[KeywordCount]:
        return self.ranker.rank(self.tokenizer.iter_tokens(text), limit=limit)


def extract_keywords(
    text: str,
    config: Optional[ExtractionConfig] = None,
    limit: Optional[int] = None,
) -> List[KeywordCount]:
    """Convenience wrapper building a one-off KeywordExtractor."""
    return KeywordExtractor(config).extract(text, limit=limit)
