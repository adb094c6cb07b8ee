"""
Request and response models for the newsletter API.
"""

from __future__ import annotations

import datetime as dt
from typing import List, Optional

from pydantic import BaseModel, Field


class AddArticleRequest(BaseModel):
    """Request body for POST /api/articles."""

    url: str = Field(..., min_length=1, description="Article URL to ingest")


class KeywordOut(BaseModel):
    keyword: str
    frequency: int


class ArticleOut(BaseModel):
    """Article summary with its keyword set."""

    seq: int
    url: str
    title: str
    date: dt.date
    domain: str
    created_at: dt.datetime
    keywords: List[KeywordOut] = Field(default_factory=list)


class ArticleDetail(ArticleOut):
    """Full article including stored text."""

    content: str = ""


class AdminArticleOut(ArticleOut):
    keyword_count: int = 0
    content_length: int = 0


class Pagination(BaseModel):
    total: int
    page: int
    limit: int
    total_pages: int


class AdminArticlesResponse(BaseModel):
    """Response for GET /api/admin/articles."""

    articles: List[AdminArticleOut] = Field(default_factory=list)
    pagination: Pagination


class DeleteArticleResponse(BaseModel):
    ok: bool = True
    seq: int


class RelatedArticleOut(BaseModel):
    title: str
    url: str
    date: dt.date


class TopKeywordOut(BaseModel):
    """One aggregated keyword with the articles that contributed to it."""

    keyword: str
    total_frequency: int
    related_articles: List[RelatedArticleOut] = Field(default_factory=list)


class HourlyCount(BaseModel):
    hour: int = Field(..., ge=0, le=23)
    count: int


class StatsResponse(BaseModel):
    """Response for GET /api/admin/stats."""

    total_articles: int = 0
    unique_domains: int = 0
    total_keywords: int = 0
    unique_keywords: int = 0
    avg_keyword_frequency: Optional[float] = None
    top_domain: Optional[str] = None
    top_keyword: Optional[str] = None
    hourly_stats: List[HourlyCount] = Field(default_factory=list)


class HealthResponse(BaseModel):
    """Response for GET /api/health."""

    status: str = "ok"
    timestamp: dt.datetime
