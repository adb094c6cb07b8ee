"""
Cross-article keyword rankings over a trailing date window.
"""

from __future__ import annotations

import datetime as dt
from dataclasses import dataclass, field
from typing import Dict, List, Optional, Set

from sqlalchemy import and_, func, select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.sql.elements import ColumnElement

from newsletter.db.models import Article, Keyword
from newsletter.db.session import storage_errors

from .config import DEFAULT_CONFIG, ExtractionConfig
from .ranker import fold_keyword


@dataclass(frozen=True)
class RelatedArticle:
    """An article that produced a given keyword."""

    title: str
    url: str
    date: dt.date


@dataclass
class AggregatedKeyword:
    """Query-time projection: a keyword summed across articles in a window."""

    keyword: str
    total_frequency: int
    related_articles: List[RelatedArticle] = field(default_factory=list)


@dataclass(frozen=True)
class DateWindow:
    """Inclusive date range ``[start, end]``."""

    start: dt.date
    end: dt.date

    @classmethod
    def trailing(cls, days: int, today: Optional[dt.date] = None) -> "DateWindow":
        if days < 0:
            raise ValueError("window days must be >= 0")
        end = today or dt.date.today()
        return cls(start=end - dt.timedelta(days=days), end=end)

    def predicate(self) -> ColumnElement[bool]:
        return and_(Article.date >= self.start, Article.date <= self.end)


class AggregationQuery:
    """
    Read-side keyword aggregation. Holds no state between calls.

    ``top_keywords`` sums per-article frequencies inside a window and
    attaches the articles that contributed. The related-article lookup
    reuses the exact window predicate of the totals query, so an article
    outside the window can never show up next to a keyword it did not
    count towards.

    Drill-down input is folded the same way the ranker folds stored
    keywords, so "GPT4" finds rows stored as "gpt4".
    """

    def __init__(self, session: AsyncSession, config: Optional[ExtractionConfig] = None) -> None:
        self.session = session
        self.config = config or DEFAULT_CONFIG

    async def top_keywords(
        self,
        window_days: int = 7,
        limit: int = 10,
        today: Optional[dt.date] = None,
    ) -> List[AggregatedKeyword]:
        if limit <= 0:
            return []
        window = DateWindow.trailing(window_days, today)
        in_window = window.predicate()

        total = func.sum(Keyword.frequency).label("total_frequency")
        totals_query = (
            select(Keyword.keyword, total)
            .join(Article, Keyword.article_seq == Article.seq)
            .where(in_window)
            .group_by(Keyword.keyword)
            .order_by(total.desc(), Keyword.keyword)
            .limit(limit)
        )
        async with storage_errors(self.session, "aggregating keywords"):
            rows = (await self.session.execute(totals_query)).all()
            if not rows:
                return []
            ranked = [
                AggregatedKeyword(keyword=keyword, total_frequency=int(freq))
                for keyword, freq in rows
            ]
            by_keyword = {item.keyword: item for item in ranked}

            related_query = (
                select(Keyword.keyword, Article.seq, Article.title, Article.url, Article.date)
                .join(Article, Keyword.article_seq == Article.seq)
                .where(in_window, Keyword.keyword.in_(list(by_keyword)))
                .order_by(Article.date.desc(), Article.seq.desc())
            )
            related_rows = (await self.session.execute(related_query)).all()

        seen: Dict[str, Set[int]] = {keyword: set() for keyword in by_keyword}
        for keyword, seq, title, url, date in related_rows:
            if seq in seen[keyword]:
                continue
            seen[keyword].add(seq)
            by_keyword[keyword].related_articles.append(
                RelatedArticle(title=title, url=url, date=date)
            )
        return ranked

    async def related_articles_for(self, keyword: str, limit: int = 5) -> List[RelatedArticle]:
        """All articles containing ``keyword`` regardless of date, newest first."""
        if not isinstance(keyword, str):
            raise TypeError(f"keyword must be str, got {type(keyword).__name__}")
        if limit <= 0:
            return []
        if self.config.fold_latin_case:
            keyword = fold_keyword(keyword)
        query = (
            select(Article.title, Article.url, Article.date)
            .join(Keyword, Keyword.article_seq == Article.seq)
            .where(Keyword.keyword == keyword)
            .distinct()
            .order_by(Article.date.desc(), Article.url)
            .limit(limit)
        )
        async with storage_errors(self.session, "loading related articles"):
            rows = (await self.session.execute(query)).all()
        return [RelatedArticle(title=title, url=url, date=date) for title, url, date in rows]
