"""
Tests for article / keyword persistence.
"""

from __future__ import annotations

import datetime as dt

import pytest
from sqlalchemy import delete, func, select, text
from sqlalchemy.ext.asyncio import AsyncSession

from newsletter.db.models import Article, Keyword
from newsletter.db.repository import ArticleRepository
from newsletter.db.session import storage_errors
from newsletter.errors import DuplicateError, NotFoundError, StorageError
from newsletter.keywords import KeywordCount

TODAY = dt.date.today()


async def _keyword_rows(session: AsyncSession, seq: int) -> list[tuple[str, int]]:
    result = await session.execute(
        select(Keyword.keyword, Keyword.frequency)
        .where(Keyword.article_seq == seq)
        .order_by(Keyword.keyword)
    )
    return [tuple(row) for row in result.all()]


async def _add(repo: ArticleRepository, url: str, **kwargs) -> Article:
    fields = {
        "title": "Title",
        "date": TODAY,
        "content": "Body text",
        "domain": "example.com",
        "keywords": [KeywordCount("alpha", 2), KeywordCount("beta", 1)],
    }
    fields.update(kwargs)
    return await repo.add_article(url=url, **fields)


@pytest.mark.anyio
async def test_add_article_persists_keywords(session: AsyncSession):
    repo = ArticleRepository(session)
    article = await _add(repo, "https://example.com/a")

    assert article.seq is not None
    assert await _keyword_rows(session, article.seq) == [("alpha", 2), ("beta", 1)]
    loaded = await repo.get_article(article.seq)
    assert [(k.keyword, k.frequency) for k in loaded.keywords] == [("alpha", 2), ("beta", 1)]


@pytest.mark.anyio
async def test_duplicate_url_is_rejected_and_original_untouched(session: AsyncSession):
    repo = ArticleRepository(session)
    original = await _add(repo, "https://example.com/a", title="Original")
    # The failed insert rolls back the session and expires loaded objects.
    seq = original.seq

    with pytest.raises(DuplicateError):
        await _add(
            repo,
            "https://example.com/a",
            title="Replacement",
            keywords=[KeywordCount("gamma", 9)],
        )

    count = await session.scalar(select(func.count(Article.seq)))
    assert count == 1
    stored = await repo.get_article(seq)
    assert stored.title == "Original"
    assert await _keyword_rows(session, seq) == [("alpha", 2), ("beta", 1)]


@pytest.mark.anyio
async def test_repeated_keywords_are_merged_into_one_row(session: AsyncSession):
    repo = ArticleRepository(session)
    article = await _add(
        repo,
        "https://example.com/a",
        keywords=[KeywordCount("alpha", 1), KeywordCount("alpha", 2), KeywordCount("zero", 0)],
    )
    assert await _keyword_rows(session, article.seq) == [("alpha", 3)]


@pytest.mark.anyio
async def test_failed_keyword_batch_leaves_no_article(session: AsyncSession):
    repo = ArticleRepository(session)
    with pytest.raises(StorageError):
        await _add(
            repo,
            "https://example.com/a",
            keywords=[KeywordCount("ok", 1), KeywordCount(None, 2)],  # type: ignore[arg-type]
        )

    assert await session.scalar(select(func.count(Article.seq))) == 0
    assert await session.scalar(select(func.count(Keyword.id))) == 0
    # The session is still usable after the rollback.
    article = await _add(repo, "https://example.com/a")
    assert await _keyword_rows(session, article.seq) == [("alpha", 2), ("beta", 1)]


@pytest.mark.anyio
async def test_storage_errors_wraps_driver_failures(session: AsyncSession):
    with pytest.raises(StorageError, match="running a broken query"):
        async with storage_errors(session, "running a broken query"):
            await session.execute(text("SELECT * FROM missing_table"))

    assert await session.scalar(select(func.count(Article.seq))) == 0


@pytest.mark.anyio
async def test_delete_article_cascades_to_keywords(session: AsyncSession):
    repo = ArticleRepository(session)
    article = await _add(repo, "https://example.com/a")
    other = await _add(repo, "https://example.com/b")

    await repo.delete_article(article.seq)

    assert await _keyword_rows(session, article.seq) == []
    assert await _keyword_rows(session, other.seq) == [("alpha", 2), ("beta", 1)]
    with pytest.raises(NotFoundError):
        await repo.get_article(article.seq)
    with pytest.raises(NotFoundError):
        await repo.delete_article(article.seq)


@pytest.mark.anyio
async def test_database_level_delete_also_cascades(session: AsyncSession):
    repo = ArticleRepository(session)
    article = await _add(repo, "https://example.com/a")

    await session.execute(delete(Article).where(Article.seq == article.seq))
    await session.commit()

    assert await _keyword_rows(session, article.seq) == []


@pytest.mark.anyio
async def test_replace_keywords_swaps_set_without_duplicates(session: AsyncSession):
    repo = ArticleRepository(session)
    article = await _add(repo, "https://example.com/a")

    await repo.replace_keywords(article.seq, [KeywordCount("alpha", 5), KeywordCount("delta", 1)])
    assert await _keyword_rows(session, article.seq) == [("alpha", 5), ("delta", 1)]

    await repo.replace_keywords(article.seq, [KeywordCount("alpha", 5), KeywordCount("delta", 1)])
    assert await _keyword_rows(session, article.seq) == [("alpha", 5), ("delta", 1)]


@pytest.mark.anyio
async def test_list_recent_filters_by_date(session: AsyncSession):
    repo = ArticleRepository(session)
    await _add(repo, "https://example.com/new", date=TODAY)
    await _add(repo, "https://example.com/mid", date=TODAY - dt.timedelta(days=3))
    await _add(repo, "https://example.com/old", date=TODAY - dt.timedelta(days=30))

    recent = await repo.list_recent(days=7, limit=10, today=TODAY)
    assert [a.url for a in recent] == ["https://example.com/new", "https://example.com/mid"]
    assert len(await repo.list_recent(days=7, limit=1, today=TODAY)) == 1


@pytest.mark.anyio
async def test_search_matches_title_or_content_case_insensitively(session: AsyncSession):
    repo = ArticleRepository(session)
    await _add(repo, "https://example.com/a", title="GPU shortage", date=TODAY)
    await _add(repo, "https://example.com/b", content="new gpu drivers", date=TODAY - dt.timedelta(days=2))
    await _add(repo, "https://example.com/c", title="Weather", date=TODAY)

    hits = await repo.search(keyword="Gpu")
    assert [a.url for a in hits] == ["https://example.com/a", "https://example.com/b"]

    bounded = await repo.search(keyword="gpu", start_date=TODAY - dt.timedelta(days=1))
    assert [a.url for a in bounded] == ["https://example.com/a"]

    until = await repo.search(end_date=TODAY - dt.timedelta(days=1))
    assert [a.url for a in until] == ["https://example.com/b"]


@pytest.mark.anyio
async def test_search_escapes_like_wildcards(session: AsyncSession):
    repo = ArticleRepository(session)
    await _add(repo, "https://example.com/a", title="100% growth")
    await _add(repo, "https://example.com/b", title="100 units")

    hits = await repo.search(keyword="100%")
    assert [a.url for a in hits] == ["https://example.com/a"]


@pytest.mark.anyio
async def test_list_page_paginates(session: AsyncSession):
    repo = ArticleRepository(session)
    for i in range(5):
        await _add(repo, f"https://example.com/{i}", date=TODAY - dt.timedelta(days=i))

    first, total = await repo.list_page(page=1, limit=2)
    last, _ = await repo.list_page(page=3, limit=2)

    assert total == 5
    assert [a.url for a in first] == ["https://example.com/0", "https://example.com/1"]
    assert [a.url for a in last] == ["https://example.com/4"]


@pytest.mark.anyio
async def test_stats(session: AsyncSession):
    repo = ArticleRepository(session)
    await _add(repo, "https://a.com/1", domain="a.com", keywords=[KeywordCount("alpha", 4)])
    await _add(repo, "https://a.com/2", domain="a.com", keywords=[KeywordCount("alpha", 1), KeywordCount("beta", 3)])
    await _add(repo, "https://b.com/1", domain="b.com", keywords=[])

    stats = await repo.stats()

    assert stats.total_articles == 3
    assert stats.unique_domains == 2
    assert stats.total_keywords == 3
    assert stats.unique_keywords == 2
    assert stats.avg_keyword_frequency == pytest.approx(8 / 3)
    assert stats.top_domain == "a.com"
    assert stats.top_keyword == "alpha"
    assert sum(count for _, count in stats.hourly_stats) == 3
    assert all(0 <= hour <= 23 for hour, _ in stats.hourly_stats)


@pytest.mark.anyio
async def test_stats_on_empty_store(session: AsyncSession):
    stats = await ArticleRepository(session).stats()
    assert stats.total_articles == 0
    assert stats.avg_keyword_frequency is None
    assert stats.top_domain is None
    assert stats.hourly_stats == []
