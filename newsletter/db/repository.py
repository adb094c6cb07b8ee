"""
Article / keyword persistence on top of an AsyncSession.
"""

from __future__ import annotations

import datetime as dt
import logging
from collections import Counter
from dataclasses import dataclass, field
from typing import Dict, Iterable, List, Optional, Tuple

from sqlalchemy import distinct, func, or_, select
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from newsletter.errors import DuplicateError, NotFoundError, StorageError
from newsletter.keywords.ranker import KeywordCount

from .models import Article, Keyword
from .session import storage_errors

logger = logging.getLogger(__name__)


def _keyword_rows(keywords: Iterable[KeywordCount]) -> List[Keyword]:
    """One row per keyword; repeated keywords are merged, non-positive counts dropped."""
    merged: Dict[str, int] = {}
    for kw in keywords:
        if kw.frequency <= 0:
            continue
        merged[kw.keyword] = merged.get(kw.keyword, 0) + kw.frequency
    return [Keyword(keyword=word, frequency=freq) for word, freq in merged.items()]


@dataclass
class ArticleStats:
    """Admin dashboard counters."""

    total_articles: int = 0
    unique_domains: int = 0
    total_keywords: int = 0
    unique_keywords: int = 0
    avg_keyword_frequency: Optional[float] = None
    top_domain: Optional[str] = None
    top_keyword: Optional[str] = None
    hourly_stats: List[Tuple[int, int]] = field(default_factory=list)


class ArticleRepository:
    """Transactional CRUD over articles and their keyword rows."""

    def __init__(self, session: AsyncSession) -> None:
        self.session = session

    async def get_by_url(self, url: str) -> Optional[Article]:
        async with storage_errors(self.session, "looking up article by url"):
            result = await self.session.execute(select(Article).where(Article.url == url))
            return result.scalar_one_or_none()

    async def get_article(self, seq: int) -> Article:
        async with storage_errors(self.session, "loading article"):
            result = await self.session.execute(
                select(Article)
                .options(selectinload(Article.keywords))
                .where(Article.seq == seq)
            )
            article = result.scalar_one_or_none()
        if article is None:
            raise NotFoundError(f"Article not found: {seq}")
        return article

    async def add_article(
        self,
        *,
        url: str,
        title: str,
        date: dt.date,
        content: str,
        domain: str,
        keywords: Iterable[KeywordCount] = (),
    ) -> Article:
        """
        Insert an article together with its keyword rows in one transaction.

        Either the article and its full keyword set become visible, or
        nothing does. A URL that already exists raises DuplicateError and
        leaves the stored row untouched.
        """
        article = Article(
            url=url,
            title=title,
            date=date,
            content=content,
            domain=domain,
            keywords=_keyword_rows(keywords),
        )
        self.session.add(article)
        try:
            await self.session.commit()
        except IntegrityError as exc:
            await self.session.rollback()
            if await self.get_by_url(url) is not None:
                raise DuplicateError(url) from exc
            logger.error("Integrity failure inserting %s: %s", url, exc)
            raise StorageError("Integrity failure while inserting article") from exc
        except SQLAlchemyError as exc:
            await self.session.rollback()
            logger.error("Storage failure inserting %s: %s", url, exc)
            raise StorageError("Storage failure while inserting article") from exc
        return article

    async def delete_article(self, seq: int) -> None:
        """Delete an article; its keyword rows are removed with it."""
        article = await self.get_article(seq)
        async with storage_errors(self.session, "deleting article"):
            await self.session.delete(article)
            await self.session.commit()

    async def replace_keywords(self, seq: int, keywords: Iterable[KeywordCount]) -> Article:
        """Swap an article's keyword set in a single transaction."""
        article = await self.get_article(seq)
        rows = _keyword_rows(keywords)
        async with storage_errors(self.session, "replacing keywords"):
            article.keywords.clear()
            # Old rows must be gone before the new ones hit the unique constraint.
            await self.session.flush()
            article.keywords.extend(rows)
            await self.session.commit()
        return article

    async def list_recent(
        self,
        days: int = 7,
        limit: int = 10,
        today: Optional[dt.date] = None,
    ) -> List[Article]:
        today = today or dt.date.today()
        cutoff = today - dt.timedelta(days=days)
        async with storage_errors(self.session, "listing recent articles"):
            result = await self.session.execute(
                select(Article)
                .options(selectinload(Article.keywords))
                .where(Article.date >= cutoff)
                .order_by(Article.date.desc(), Article.seq.desc())
                .limit(limit)
            )
            return list(result.scalars().all())

    async def search(
        self,
        *,
        keyword: Optional[str] = None,
        start_date: Optional[dt.date] = None,
        end_date: Optional[dt.date] = None,
        limit: int = 10,
    ) -> List[Article]:
        """Case-insensitive substring match on title or content, within inclusive date bounds."""
        query = select(Article).options(selectinload(Article.keywords))
        if keyword:
            needle = keyword.lower()
            query = query.where(
                or_(
                    func.lower(Article.title).contains(needle, autoescape=True),
                    func.lower(Article.content).contains(needle, autoescape=True),
                )
            )
        if start_date is not None:
            query = query.where(Article.date >= start_date)
        if end_date is not None:
            query = query.where(Article.date <= end_date)
        query = query.order_by(Article.date.desc(), Article.seq.desc()).limit(limit)
        async with storage_errors(self.session, "searching articles"):
            result = await self.session.execute(query)
            return list(result.scalars().all())

    async def list_page(self, page: int = 1, limit: int = 10) -> Tuple[List[Article], int]:
        """Return one page of articles (newest first) and the total article count."""
        page = max(page, 1)
        async with storage_errors(self.session, "listing articles"):
            total = await self.session.scalar(select(func.count(Article.seq)))
            result = await self.session.execute(
                select(Article)
                .options(selectinload(Article.keywords))
                .order_by(Article.date.desc(), Article.seq.desc())
                .offset((page - 1) * limit)
                .limit(limit)
            )
            return list(result.scalars().all()), int(total or 0)

    async def stats(self) -> ArticleStats:
        async with storage_errors(self.session, "computing stats"):
            total_articles = await self.session.scalar(select(func.count(Article.seq)))
            unique_domains = await self.session.scalar(select(func.count(distinct(Article.domain))))
            total_keywords = await self.session.scalar(select(func.count(Keyword.id)))
            unique_keywords = await self.session.scalar(select(func.count(distinct(Keyword.keyword))))
            avg_frequency = await self.session.scalar(select(func.avg(Keyword.frequency)))
            top_domain = await self.session.scalar(
                select(Article.domain)
                .group_by(Article.domain)
                .order_by(func.count(Article.seq).desc(), Article.domain)
                .limit(1)
            )
            top_keyword = await self.session.scalar(
                select(Keyword.keyword)
                .group_by(Keyword.keyword)
                .order_by(func.sum(Keyword.frequency).desc(), Keyword.keyword)
                .limit(1)
            )
            created = (await self.session.execute(select(Article.created_at))).scalars().all()

        # Hour extraction differs per dialect; bucket in Python.
        hours = Counter(ts.hour for ts in created if ts is not None)
        return ArticleStats(
            total_articles=int(total_articles or 0),
            unique_domains=int(unique_domains or 0),
            total_keywords=int(total_keywords or 0),
            unique_keywords=int(unique_keywords or 0),
            avg_keyword_frequency=float(avg_frequency) if avg_frequency is not None else None,
            top_domain=top_domain,
            top_keyword=top_keyword,
            hourly_stats=sorted(hours.items()),
        )
