from __future__ import annotations

import math
from typing import Annotated

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from newsletter.db.repository import ArticleRepository
from newsletter.db.session import get_db
from newsletter.errors import NewsletterError
from newsletter.fetch.fetcher import PageFetcher
from newsletter.ingest import IngestionService
from newsletter.keywords import ExtractionConfig

from .deps import admin_article_out, article_detail, get_extraction_config, get_fetcher, raise_http
from .models import (
    AdminArticlesResponse,
    ArticleDetail,
    HourlyCount,
    Pagination,
    StatsResponse,
)

router = APIRouter(prefix="/api/admin", tags=["admin"])


@router.get("/articles", response_model=AdminArticlesResponse)
async def list_articles(
    db: Annotated[AsyncSession, Depends(get_db)],
    page: int = Query(1, ge=1),
    limit: int = Query(10, ge=1, le=100),
) -> AdminArticlesResponse:
    try:
        articles, total = await ArticleRepository(db).list_page(page=page, limit=limit)
    except NewsletterError as exc:
        raise_http(exc)
    return AdminArticlesResponse(
        articles=[admin_article_out(a) for a in articles],
        pagination=Pagination(
            total=total,
            page=page,
            limit=limit,
            total_pages=math.ceil(total / limit),
        ),
    )


@router.get("/articles/{seq}", response_model=ArticleDetail)
async def article_details(
    seq: int,
    db: Annotated[AsyncSession, Depends(get_db)],
) -> ArticleDetail:
    try:
        article = await ArticleRepository(db).get_article(seq)
    except NewsletterError as exc:
        raise_http(exc)
    return article_detail(article)


@router.post("/articles/{seq}/reextract", response_model=ArticleDetail)
async def reextract_keywords(
    seq: int,
    db: Annotated[AsyncSession, Depends(get_db)],
    fetcher: Annotated[PageFetcher, Depends(get_fetcher)],
    config: Annotated[ExtractionConfig, Depends(get_extraction_config)],
) -> ArticleDetail:
    """Recompute an article's keywords from its stored text with the current config."""
    try:
        article = await IngestionService(db, fetcher, config).reextract(seq)
    except NewsletterError as exc:
        raise_http(exc)
    return article_detail(article)


@router.get("/stats", response_model=StatsResponse)
async def stats(
    db: Annotated[AsyncSession, Depends(get_db)],
) -> StatsResponse:
    try:
        result = await ArticleRepository(db).stats()
    except NewsletterError as exc:
        raise_http(exc)
    return StatsResponse(
        total_articles=result.total_articles,
        unique_domains=result.unique_domains,
        total_keywords=result.total_keywords,
        unique_keywords=result.unique_keywords,
        avg_keyword_frequency=result.avg_keyword_frequency,
        top_domain=result.top_domain,
        top_keyword=result.top_keyword,
        hourly_stats=[HourlyCount(hour=h, count=c) for h, c in result.hourly_stats],
    )
