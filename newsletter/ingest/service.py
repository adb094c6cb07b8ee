"""
Ingestion: URL -> fetched page -> keywords -> stored article.
"""

from __future__ import annotations

import logging
from typing import Optional
from urllib.parse import urlparse

from sqlalchemy.ext.asyncio import AsyncSession

from newsletter.db.models import Article
from newsletter.db.repository import ArticleRepository
from newsletter.errors import DuplicateError, ValidationError
from newsletter.fetch.fetcher import PageFetcher
from newsletter.keywords import DEFAULT_CONFIG, ExtractionConfig, KeywordExtractor

logger = logging.getLogger(__name__)


def validate_url(url: object) -> str:
    """Return the trimmed URL or raise ValidationError."""
    if not isinstance(url, str) or not url.strip():
        raise ValidationError("URL is required")
    url = url.strip()
    parsed = urlparse(url)
    if parsed.scheme not in ("http", "https") or not parsed.hostname:
        raise ValidationError(f"Invalid URL: {url}")
    return url


class IngestionService:
    """
    Orchestrates adding an article.

    The duplicate pre-check avoids a pointless fetch; the unique constraint
    on ``articles.url`` still decides races between concurrent requests,
    and the repository reports the loser as DuplicateError.
    """

    def __init__(
        self,
        session: AsyncSession,
        fetcher: PageFetcher,
        config: Optional[ExtractionConfig] = None,
    ) -> None:
        self.repo = ArticleRepository(session)
        self.fetcher = fetcher
        self.extractor = KeywordExtractor(config or DEFAULT_CONFIG)

    async def add_article(self, url: str) -> Article:
        url = validate_url(url)

        if await self.repo.get_by_url(url) is not None:
            logger.warning("Rejected duplicate article: %s", url)
            raise DuplicateError(url)

        logger.info("Processing article from URL: %s", url)
        page = await self.fetcher.fetch_page(url)

        keywords = self.extractor.extract(f"{page.title} {page.content}")
        try:
            article = await self.repo.add_article(
                url=url,
                title=page.title,
                date=page.date,
                content=page.content,
                domain=page.domain,
                keywords=keywords,
            )
        except DuplicateError:
            logger.warning("Rejected duplicate article (concurrent insert): %s", url)
            raise
        logger.info("Article saved: seq=%s keywords=%d title=%r", article.seq, len(keywords), article.title)
        return article

    async def reextract(self, seq: int) -> Article:
        """Recompute an article's keywords from its stored text."""
        article = await self.repo.get_article(seq)
        keywords = self.extractor.extract(f"{article.title} {article.content}")
        article = await self.repo.replace_keywords(seq, keywords)
        logger.info("Re-extracted keywords: seq=%s keywords=%d", seq, len(keywords))
        return article

    async def delete_article(self, seq: int) -> None:
        await self.repo.delete_article(seq)
        logger.info("Article deleted: seq=%s", seq)
