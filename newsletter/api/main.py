"""
FastAPI application for the newsletter keyword service.
"""

from __future__ import annotations

import datetime as dt
import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from newsletter import config
from newsletter.db.session import engine, init_models
from newsletter.fetch.fetcher import HttpPageFetcher
from newsletter.keywords import ExtractionConfig

from .admin_routes import router as admin_router
from .article_routes import router as article_router
from .keyword_routes import router as keyword_router
from .models import HealthResponse

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Configure logging, build shared collaborators, create tables in dev."""
    logging.basicConfig(
        level=config.LOG_LEVEL,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    app.state.extraction_config = ExtractionConfig.from_env()
    app.state.fetcher = HttpPageFetcher()
    if config.AUTO_CREATE_TABLES:
        await init_models()
    logger.info("Service started (segmentation=%s)", app.state.extraction_config.segmentation.value)
    yield
    await engine.dispose()


app = FastAPI(
    title="Newsletter Keyword API",
    description="Ingest articles by URL and serve keyword statistics",
    version="0.1.0",
    lifespan=lifespan,
)
app.add_middleware(
    CORSMiddleware,
    allow_origins=config.CORS_ORIGINS,
    allow_methods=["GET", "POST", "DELETE"],
    allow_headers=["*"],
    allow_credentials=True,
)
app.include_router(article_router)
app.include_router(keyword_router)
app.include_router(admin_router)


@app.get("/api/health", response_model=HealthResponse)
async def health() -> HealthResponse:
    """Health check."""
    return HealthResponse(status="ok", timestamp=dt.datetime.now(dt.timezone.utc))
