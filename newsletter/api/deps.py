"""
Dependency providers and domain-error translation for the API.
"""

from __future__ import annotations

from typing import NoReturn

from fastapi import HTTPException, Request, status

from newsletter.db.models import Article
from newsletter.errors import (
    DuplicateError,
    FetchError,
    NewsletterError,
    NotFoundError,
    StorageError,
    ValidationError,
)
from newsletter.fetch.fetcher import HttpPageFetcher, PageFetcher
from newsletter.keywords import DEFAULT_CONFIG, ExtractionConfig

from .models import AdminArticleOut, ArticleDetail, ArticleOut, KeywordOut


def get_extraction_config(request: Request) -> ExtractionConfig:
    """Process-wide config built in the lifespan; defaults when the app was not started."""
    return getattr(request.app.state, "extraction_config", None) or DEFAULT_CONFIG


def get_fetcher(request: Request) -> PageFetcher:
    fetcher = getattr(request.app.state, "fetcher", None)
    if fetcher is None:
        fetcher = HttpPageFetcher()
        request.app.state.fetcher = fetcher
    return fetcher


def raise_http(exc: NewsletterError) -> NoReturn:
    """Translate a domain error into an HTTPException with a matching status."""
    if isinstance(exc, ValidationError):
        code = status.HTTP_400_BAD_REQUEST
        detail = str(exc)
    elif isinstance(exc, DuplicateError):
        code = status.HTTP_409_CONFLICT
        detail = "Article with this URL already exists"
    elif isinstance(exc, FetchError):
        code = status.HTTP_502_BAD_GATEWAY
        detail = f"Failed to load the page ({exc.reason}). Please check the URL and try again."
    elif isinstance(exc, NotFoundError):
        code = status.HTTP_404_NOT_FOUND
        detail = str(exc)
    elif isinstance(exc, StorageError):
        code = status.HTTP_500_INTERNAL_SERVER_ERROR
        detail = "Internal storage error"
    else:
        code = status.HTTP_500_INTERNAL_SERVER_ERROR
        detail = str(exc)
    raise HTTPException(status_code=code, detail=detail) from exc


def _keywords_out(article: Article) -> list[KeywordOut]:
    return [KeywordOut(keyword=k.keyword, frequency=k.frequency) for k in article.keywords]


def article_out(article: Article) -> ArticleOut:
    return ArticleOut(
        seq=article.seq,
        url=article.url,
        title=article.title,
        date=article.date,
        domain=article.domain,
        created_at=article.created_at,
        keywords=_keywords_out(article),
    )


def article_detail(article: Article) -> ArticleDetail:
    return ArticleDetail(
        **article_out(article).model_dump(),
        content=article.content,
    )


def admin_article_out(article: Article) -> AdminArticleOut:
    return AdminArticleOut(
        **article_out(article).model_dump(),
        keyword_count=len(article.keywords),
        content_length=len(article.content or ""),
    )
