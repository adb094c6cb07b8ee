"""
Batch ingestion of article URLs.

Reads one URL per line (blank lines and '#' comments are skipped) and
runs each through the same ingestion path as POST /api/articles.

Usage:
    python -m scripts.ingest_urls urls.txt
    python -m scripts.ingest_urls urls.txt --dry-run
"""

from __future__ import annotations

import argparse
import asyncio
from collections import Counter
from pathlib import Path
from typing import List

from newsletter import config
from newsletter.db.repository import ArticleRepository
from newsletter.db.session import AsyncSessionLocal, engine, init_models
from newsletter.errors import DuplicateError, FetchError, StorageError, ValidationError
from newsletter.fetch.fetcher import HttpPageFetcher
from newsletter.ingest import IngestionService, validate_url
from newsletter.keywords import ExtractionConfig


def read_urls(path: Path) -> List[str]:
    urls: List[str] = []
    with path.open("r", encoding="utf-8") as f:
        for line in f:
            line = line.strip()
            if not line or line.startswith("#"):
                continue
            urls.append(line)
    return urls


async def ingest(urls: List[str], *, dry_run: bool) -> Counter:
    outcomes: Counter = Counter()
    if config.AUTO_CREATE_TABLES:
        await init_models()
    fetcher = HttpPageFetcher()
    extraction = ExtractionConfig.from_env()
    async with AsyncSessionLocal() as session:
        svc = IngestionService(session, fetcher, extraction)
        repo = ArticleRepository(session)
        for url in urls:
            try:
                if dry_run:
                    url = validate_url(url)
                    if await repo.get_by_url(url) is not None:
                        raise DuplicateError(url)
                    print(f"[ok]        {url}")
                    outcomes["ok"] += 1
                    continue
                article = await svc.add_article(url)
            except ValidationError as exc:
                print(f"[invalid]   {url}: {exc}")
                outcomes["invalid"] += 1
            except DuplicateError:
                print(f"[duplicate] {url}")
                outcomes["duplicate"] += 1
            except FetchError as exc:
                print(f"[fetch]     {url}: {exc.reason}")
                outcomes["fetch_failed"] += 1
            except StorageError as exc:
                print(f"[storage]   {url}: {exc}")
                outcomes["storage_failed"] += 1
            else:
                keywords = ", ".join(k.keyword for k in article.keywords[:5])
                print(f"[added]     {url} (seq={article.seq}) {keywords}")
                outcomes["added"] += 1
    await engine.dispose()
    return outcomes


def main() -> None:
    parser = argparse.ArgumentParser(description="Ingest article URLs from a file.")
    parser.add_argument("file", type=Path, help="Text file with one URL per line")
    parser.add_argument(
        "--dry-run",
        action="store_true",
        help="Only validate URLs and report duplicates; no fetching or writes.",
    )
    args = parser.parse_args()

    urls = read_urls(args.file)
    outcomes = asyncio.run(ingest(urls, dry_run=args.dry_run))
    summary = ", ".join(f"{k}={v}" for k, v in sorted(outcomes.items()))
    print(f"Processed {len(urls)} URLs: {summary or 'nothing to do'}")


if __name__ == "__main__":
    main()
