"""
Article routes: add, delete, recent, search.
"""

from __future__ import annotations

import datetime as dt
from typing import Annotated, List, Optional

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from newsletter.db.repository import ArticleRepository
from newsletter.db.session import get_db
from newsletter.errors import NewsletterError
from newsletter.fetch.fetcher import PageFetcher
from newsletter.ingest import IngestionService
from newsletter.keywords import ExtractionConfig

from .deps import article_out, get_extraction_config, get_fetcher, raise_http
from .models import AddArticleRequest, ArticleOut, DeleteArticleResponse

router = APIRouter(prefix="/api/articles", tags=["articles"])


@router.post("", response_model=ArticleOut, status_code=status.HTTP_201_CREATED)
async def add_article(
    payload: AddArticleRequest,
    db: Annotated[AsyncSession, Depends(get_db)],
    fetcher: Annotated[PageFetcher, Depends(get_fetcher)],
    config: Annotated[ExtractionConfig, Depends(get_extraction_config)],
) -> ArticleOut:
    """Fetch a page, extract its keywords and store both."""
    svc = IngestionService(db, fetcher, config)
    try:
        article = await svc.add_article(payload.url)
    except NewsletterError as exc:
        raise_http(exc)
    return article_out(article)


@router.get("/recent", response_model=List[ArticleOut])
async def recent_articles(
    db: Annotated[AsyncSession, Depends(get_db)],
    days: int = Query(7, ge=1, le=365),
    limit: int = Query(10, ge=1, le=100),
) -> List[ArticleOut]:
    try:
        articles = await ArticleRepository(db).list_recent(days=days, limit=limit)
    except NewsletterError as exc:
        raise_http(exc)
    return [article_out(a) for a in articles]


@router.get("/search", response_model=List[ArticleOut])
async def search_articles(
    db: Annotated[AsyncSession, Depends(get_db)],
    keyword: Optional[str] = Query(None, description="Substring matched against title and content"),
    start_date: Optional[dt.date] = Query(None),
    end_date: Optional[dt.date] = Query(None),
    limit: int = Query(10, ge=1, le=100),
) -> List[ArticleOut]:
    try:
        articles = await ArticleRepository(db).search(
            keyword=keyword,
            start_date=start_date,
            end_date=end_date,
            limit=limit,
        )
    except NewsletterError as exc:
        raise_http(exc)
    return [article_out(a) for a in articles]


@router.delete("/{seq}", response_model=DeleteArticleResponse)
async def delete_article(
    seq: int,
    db: Annotated[AsyncSession, Depends(get_db)],
    fetcher: Annotated[PageFetcher, Depends(get_fetcher)],
) -> DeleteArticleResponse:
    """Delete an article together with its keyword rows."""
    try:
        await IngestionService(db, fetcher).delete_article(seq)
    except NewsletterError as exc:
        raise_http(exc)
    return DeleteArticleResponse(ok=True, seq=seq)
