"""
Keyword extraction and aggregation.

- Tokenizer: script-aware or whitespace segmentation with particle stripping
- StopWordFilter: fixed reference table lookup
- FrequencyRanker: per-document top-N with first-occurrence tie-break
- AggregationQuery: cross-article rankings over a date window
"""

from .aggregation import AggregatedKeyword, AggregationQuery, DateWindow, RelatedArticle
from .config import DEFAULT_CONFIG, ExtractionConfig, Segmentation
from .ranker import FrequencyRanker, KeywordCount, KeywordExtractor, extract_keywords, fold_keyword
from .stopwords import DEFAULT_STOP_WORDS, StopWordFilter
from .tokenizer import Tokenizer, strip_suffix, tokenize

__all__ = [
    "AggregatedKeyword",
    "AggregationQuery",
    "DateWindow",
    "RelatedArticle",
    "DEFAULT_CONFIG",
    "ExtractionConfig",
    "Segmentation",
    "FrequencyRanker",
    "KeywordCount",
    "KeywordExtractor",
    "extract_keywords",
    "fold_keyword",
    "DEFAULT_STOP_WORDS",
    "StopWordFilter",
    "Tokenizer",
    "strip_suffix",
    "tokenize",
]
