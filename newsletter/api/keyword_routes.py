"""
Keyword routes: windowed top keywords and keyword drill-down.
"""

from __future__ import annotations

from typing import Annotated, List

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from newsletter.db.session import get_db
from newsletter.errors import NewsletterError
from newsletter.keywords import AggregationQuery, ExtractionConfig

from .deps import get_extraction_config, raise_http
from .models import RelatedArticleOut, TopKeywordOut

router = APIRouter(prefix="/api/keywords", tags=["keywords"])


@router.get("/top", response_model=List[TopKeywordOut])
async def top_keywords(
    db: Annotated[AsyncSession, Depends(get_db)],
    days: int = Query(7, ge=1, le=365),
    limit: int = Query(10, ge=1, le=100),
) -> List[TopKeywordOut]:
    """Keywords ranked by summed frequency over the last ``days`` days."""
    try:
        ranked = await AggregationQuery(db).top_keywords(window_days=days, limit=limit)
    except NewsletterError as exc:
        raise_http(exc)
    return [
        TopKeywordOut(
            keyword=item.keyword,
            total_frequency=item.total_frequency,
            related_articles=[
                RelatedArticleOut(title=a.title, url=a.url, date=a.date)
                for a in item.related_articles
            ],
        )
        for item in ranked
    ]


@router.get("/{keyword}/articles", response_model=List[RelatedArticleOut])
async def related_articles(
    keyword: str,
    db: Annotated[AsyncSession, Depends(get_db)],
    config: Annotated[ExtractionConfig, Depends(get_extraction_config)],
    limit: int = Query(5, ge=1, le=100),
) -> List[RelatedArticleOut]:
    try:
        articles = await AggregationQuery(db, config).related_articles_for(keyword, limit=limit)
    except NewsletterError as exc:
        raise_http(exc)
    return [RelatedArticleOut(title=a.title, url=a.url, date=a.date) for a in articles]
