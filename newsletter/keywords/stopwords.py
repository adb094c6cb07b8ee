"""
Fixed reference tables of words that carry no keyword value.
"""

from __future__ import annotations

import re
from typing import Iterable, Optional

# Postpositions; the tokenizer also strips these as word suffixes.
POSTPOSITIONS = frozenset({
    "이", "가", "은", "는", "을", "를", "에", "에서", "에게", "께서", "의",
    "도", "만", "로", "으로", "와", "과", "랑", "이랑", "한테", "부터", "까지",
    "보다", "처럼",
})

PARTICLES = POSTPOSITIONS | {"및", "등"}

VERB_ADJECTIVE_STEMS = frozenset({
    "이다", "하다", "있다", "되다", "않다", "없다", "있는", "없는", "하는", "되는",
    "했다", "한다", "된다", "했고", "하고", "있고", "있었다", "없었다", "됐다",
    "위해", "통해", "대한", "대해", "같은", "라고", "이라고", "또한", "그리고",
    "하지만", "그러나", "따라", "밝혔다", "말했다",
})

PRONOUNS = frozenset({
    "이", "그", "저", "것", "수", "우리", "저희", "그것", "이것", "저것",
    "그들", "이들", "여기", "거기", "저기", "누구", "무엇", "자신",
})

TEMPORAL_SPATIAL_NOUNS = frozenset({
    "오늘", "어제", "내일", "올해", "작년", "내년", "지난", "이번", "현재",
    "최근", "당시", "이후", "이전", "동안", "가운데", "경우", "때문", "정도",
    "관련", "사이", "안팎",
})

ENGLISH_CONNECTORS = frozenset({
    "the", "and", "or", "but", "in", "on", "at", "to", "for", "of", "with",
    "a", "an", "is", "are", "was", "were", "be", "been", "as", "by", "from",
    "it", "its", "this", "that", "these", "those",
})

DEFAULT_STOP_WORDS = frozenset(
    PARTICLES | VERB_ADJECTIVE_STEMS | PRONOUNS | TEMPORAL_SPATIAL_NOUNS | ENGLISH_CONNECTORS
)

_LATIN_RE = re.compile(r"[A-Za-z0-9]+")


class StopWordFilter:
    """Lookup over a fixed stop-word table. Latin tokens match case-insensitively."""

    def __init__(self, words: Optional[Iterable[str]] = None) -> None:
        table = DEFAULT_STOP_WORDS if words is None else words
        self._words = frozenset(w.lower() if _LATIN_RE.fullmatch(w) else w for w in table)

    def is_stop_word(self, token: str) -> bool:
        if not isinstance(token, str):
            raise TypeError(f"token must be str, got {type(token).__name__}")
        if token in self._words:
            return True
        return _LATIN_RE.fullmatch(token) is not None and token.lower() in self._words

    def __contains__(self, token: str) -> bool:
        return self.is_stop_word(token)
