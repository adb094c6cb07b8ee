"""
Segmentation of raw document text into candidate keyword tokens.
"""

from __future__ import annotations

import re
from typing import AbstractSet, Iterator, List, Optional

from .config import DEFAULT_CONFIG, ExtractionConfig, Segmentation
from .stopwords import POSTPOSITIONS

# Hangul syllables, CJK ideographs, hiragana / katakana.
_SCRIPT_CLASS = "가-힣一-鿿぀-ゟ゠-ヿ"

# One alternation so matches come back in text order from a single scan.
SCRIPT_AWARE_RE = re.compile(rf"(?P<script>[{_SCRIPT_CLASS}]{{2,}})|(?P<latin>[A-Za-z0-9]{{2,}})")
WHITESPACE_SPLIT_RE = re.compile(r"[\s,.!?()\[\]{}'\"“”‘’:;<>/|·…]+")

# Longest first so "에서" wins over "에", "으로" over "로".
SUFFIXES = tuple(sorted(POSTPOSITIONS, key=len, reverse=True))


def strip_suffix(token: str, min_stem: int = 2, stop_words: AbstractSet[str] = frozenset()) -> str:
    """
    Remove one trailing particle if what remains is at least ``min_stem`` long.

    A shorter remainder is still split off when it is itself a stop word
    ("것을" -> "것"), so that the stop-word filter can drop it.
    """
    for suffix in SUFFIXES:
        if not token.endswith(suffix) or len(token) == len(suffix):
            continue
        stem = token[: -len(suffix)]
        if len(stem) >= min_stem or stem in stop_words:
            return stem
    return token


class Tokenizer:
    """Splits text into tokens according to an ExtractionConfig."""

    def __init__(self, config: Optional[ExtractionConfig] = None) -> None:
        self.config = config or DEFAULT_CONFIG

    def _raw_tokens(self, text: str) -> Iterator[str]:
        if self.config.segmentation is Segmentation.WHITESPACE:
            for part in WHITESPACE_SPLIT_RE.split(text):
                if part:
                    yield part
            return
        for match in SCRIPT_AWARE_RE.finditer(text):
            yield match.group(0)

    def iter_tokens(self, text: str) -> Iterator[str]:
        if not isinstance(text, str):
            raise TypeError(f"text must be str, got {type(text).__name__}")
        for tok in self._raw_tokens(text):
            if self.config.strip_suffixes:
                tok = strip_suffix(tok, stop_words=self.config.stop_words)
            if len(tok) < self.config.min_length:
                continue
            yield tok

    def tokenize(self, text: str) -> List[str]:
        """Return candidate tokens in first-occurrence order."""
        return list(self.iter_tokens(text))


def tokenize(text: str, config: Optional[ExtractionConfig] = None) -> List[str]:
    return Tokenizer(config).tokenize(text)
