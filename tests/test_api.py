"""
Tests for the FastAPI routes against a temporary SQLite database.
"""

from __future__ import annotations

import datetime as dt
from typing import Dict

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.exc import OperationalError
from sqlalchemy.pool import NullPool

from newsletter.api.deps import get_fetcher
from newsletter.api.main import app
from newsletter.db.models import Base
from newsletter.db.session import create_engine_for, create_sessionmaker, get_db
from newsletter.errors import FetchError
from newsletter.fetch import FetchedPage

TODAY = dt.date.today()


class _FakeFetcher:
    def __init__(self, pages: Dict[str, FetchedPage]):
        self.pages = pages

    async def fetch_page(self, url: str) -> FetchedPage:
        if url not in self.pages:
            raise FetchError(url, "HTTP 404")
        return self.pages[url]


def _page(url: str, title: str, content: str, days_ago: int = 0) -> FetchedPage:
    return FetchedPage(
        url=url,
        title=title,
        date=TODAY - dt.timedelta(days=days_ago),
        content=content,
        domain=url.split("/")[2],
    )


GPT_URL = "https://news.example.com/gpt4"
CHIP_URL = "https://tech.example.org/chips"
OLD_URL = "https://news.example.com/old"

PAGES = {
    GPT_URL: _page(GPT_URL, "GPT4 launch", "GPT4 helps developers. The developers love GPT4."),
    CHIP_URL: _page(CHIP_URL, "Chip demand", "Chip makers report record chip demand from developers.", days_ago=1),
    OLD_URL: _page(OLD_URL, "Archive", "GPT4 rumours from long ago.", days_ago=30),
}


@pytest.fixture
def client(tmp_path):
    db_path = tmp_path / "api.db"
    sync_engine = create_engine(f"sqlite:///{db_path}")
    Base.metadata.create_all(sync_engine)
    sync_engine.dispose()

    # NullPool: each request runs on its own event loop, so never reuse connections.
    engine = create_engine_for(f"sqlite+aiosqlite:///{db_path}", poolclass=NullPool)
    factory = create_sessionmaker(engine)

    async def _get_db():
        async with factory() as session:
            yield session

    fetcher = _FakeFetcher(PAGES)
    app.dependency_overrides[get_db] = _get_db
    app.dependency_overrides[get_fetcher] = lambda: fetcher
    yield TestClient(app)
    app.dependency_overrides.clear()


def _add(client: TestClient, url: str) -> dict:
    r = client.post("/api/articles", json={"url": url})
    assert r.status_code == 201, r.text
    return r.json()


def test_health(client: TestClient):
    r = client.get("/api/health")
    assert r.status_code == 200
    assert r.json()["status"] == "ok"


def test_add_article_requires_url(client: TestClient):
    assert client.post("/api/articles", json={}).status_code == 422
    assert client.post("/api/articles", json={"url": ""}).status_code == 422


def test_add_article_rejects_malformed_url(client: TestClient):
    r = client.post("/api/articles", json={"url": "not a url"})
    assert r.status_code == 400
    assert "Invalid URL" in r.json()["detail"]


def test_add_article_returns_keywords(client: TestClient):
    data = _add(client, GPT_URL)
    assert data["url"] == GPT_URL
    assert data["domain"] == "news.example.com"
    assert data["keywords"][0] == {"keyword": "gpt4", "frequency": 3}
    assert data["keywords"][1] == {"keyword": "developers", "frequency": 2}


def test_duplicate_url_returns_conflict(client: TestClient):
    _add(client, GPT_URL)
    r = client.post("/api/articles", json={"url": GPT_URL})
    assert r.status_code == 409
    assert r.json()["detail"] == "Article with this URL already exists"


def test_unreachable_page_returns_bad_gateway(client: TestClient):
    r = client.post("/api/articles", json={"url": "https://nowhere.example.com/x"})
    assert r.status_code == 502
    assert "try again" in r.json()["detail"]


def test_top_keywords_window_and_related_articles(client: TestClient):
    _add(client, GPT_URL)
    _add(client, CHIP_URL)
    _add(client, OLD_URL)

    r = client.get("/api/keywords/top", params={"days": 7, "limit": 3})
    assert r.status_code == 200
    top = r.json()
    # Three-way tie at 3 is broken by keyword order.
    assert [k["keyword"] for k in top] == ["chip", "developers", "gpt4"]
    gpt = top[2]
    assert gpt["total_frequency"] == 3
    # The 30-day-old article mentions GPT4 but lies outside the window.
    assert [a["url"] for a in gpt["related_articles"]] == [GPT_URL]
    assert [a["url"] for a in top[1]["related_articles"]] == [GPT_URL, CHIP_URL]
    assert [a["url"] for a in top[0]["related_articles"]] == [CHIP_URL]


def test_top_keywords_validates_params(client: TestClient):
    assert client.get("/api/keywords/top", params={"days": 0}).status_code == 422
    assert client.get("/api/keywords/top", params={"limit": 1000}).status_code == 422


def test_related_articles_for_keyword(client: TestClient):
    _add(client, GPT_URL)
    _add(client, OLD_URL)

    r = client.get("/api/keywords/GPT4/articles")
    assert r.status_code == 200
    assert [a["url"] for a in r.json()] == [GPT_URL, OLD_URL]

    r = client.get("/api/keywords/GPT4/articles", params={"limit": 1})
    assert [a["url"] for a in r.json()] == [GPT_URL]


def test_recent_and_search(client: TestClient):
    _add(client, GPT_URL)
    _add(client, CHIP_URL)
    _add(client, OLD_URL)

    recent = client.get("/api/articles/recent").json()
    assert [a["url"] for a in recent] == [GPT_URL, CHIP_URL]

    hits = client.get("/api/articles/search", params={"keyword": "chip"}).json()
    assert [a["url"] for a in hits] == [CHIP_URL]

    dated = client.get(
        "/api/articles/search",
        params={"end_date": (TODAY - dt.timedelta(days=2)).isoformat()},
    ).json()
    assert [a["url"] for a in dated] == [OLD_URL]


def test_delete_article_cascades(client: TestClient):
    created = _add(client, GPT_URL)
    seq = created["seq"]

    r = client.delete(f"/api/articles/{seq}")
    assert r.status_code == 200
    assert r.json() == {"ok": True, "seq": seq}

    assert client.delete(f"/api/articles/{seq}").status_code == 404
    assert client.get("/api/keywords/top").json() == []
    assert client.get("/api/keywords/GPT4/articles").json() == []


def test_admin_list_detail_and_stats(client: TestClient):
    _add(client, GPT_URL)
    chip = _add(client, CHIP_URL)

    listing = client.get("/api/admin/articles", params={"page": 1, "limit": 1}).json()
    assert listing["pagination"] == {"total": 2, "page": 1, "limit": 1, "total_pages": 2}
    first = listing["articles"][0]
    assert first["url"] == GPT_URL
    assert first["keyword_count"] == len(first["keywords"])
    assert first["content_length"] == len(PAGES[GPT_URL].content)

    detail = client.get(f"/api/admin/articles/{chip['seq']}").json()
    assert detail["content"] == PAGES[CHIP_URL].content
    assert client.get("/api/admin/articles/9999").status_code == 404

    stats = client.get("/api/admin/stats").json()
    assert stats["total_articles"] == 2
    assert stats["unique_domains"] == 2
    assert stats["top_keyword"] == "chip"
    assert sum(h["count"] for h in stats["hourly_stats"]) == 2


def test_admin_reextract(client: TestClient):
    created = _add(client, CHIP_URL)

    r = client.post(f"/api/admin/articles/{created['seq']}/reextract")
    assert r.status_code == 200
    assert r.json()["keywords"] == created["keywords"]
    assert client.post("/api/admin/articles/9999/reextract").status_code == 404


class _BrokenSession:
    """Session stand-in whose database calls fail at the driver level."""

    async def execute(self, *args, **kwargs):
        raise OperationalError("SELECT", {}, Exception("database is locked"))

    async def scalar(self, *args, **kwargs):
        raise OperationalError("SELECT", {}, Exception("database is locked"))

    async def rollback(self):
        return None


def test_storage_failure_returns_server_error(client: TestClient):
    async def _broken_db():
        yield _BrokenSession()

    app.dependency_overrides[get_db] = _broken_db

    for path in ("/api/articles/recent", "/api/keywords/top", "/api/admin/stats"):
        r = client.get(path)
        assert r.status_code == 500, path
        assert r.json()["detail"] == "Internal storage error"
