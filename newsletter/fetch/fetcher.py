"""
Page fetching and article field extraction.

Downloads a page with httpx and pulls title, publication date and body
text out of the HTML with BeautifulSoup, trying common article selectors
before falling back to whole-document values.
"""

from __future__ import annotations

import datetime as dt
import logging
import re
from dataclasses import dataclass
from typing import Optional, Protocol, Sequence
from urllib.parse import urlparse

import httpx
from bs4 import BeautifulSoup
from dateutil import parser as dateparser

from newsletter import config
from newsletter.errors import FetchError

logger = logging.getLogger(__name__)

TITLE_SELECTORS: Sequence[str] = ("h1", "article h1", ".article-title", ".entry-title")
DATE_SELECTORS: Sequence[str] = ("[datetime]", "time", ".date", ".published")
CONTENT_SELECTORS: Sequence[str] = ("article", ".article-content", ".entry-content")

_WS_RE = re.compile(r"\s+")


@dataclass
class FetchedPage:
    """Fields extracted from one fetched article page."""

    url: str
    title: str
    date: dt.date
    content: str
    domain: str


class PageFetcher(Protocol):
    async def fetch_page(self, url: str) -> FetchedPage: ...


def _clean(text: str) -> str:
    return _WS_RE.sub(" ", text).strip()


def _first_text(soup: BeautifulSoup, selectors: Sequence[str]) -> str:
    for selector in selectors:
        element = soup.select_one(selector)
        if element is None:
            continue
        text = _clean(element.get_text(" "))
        if text:
            return text
    return ""


def _parse_date(soup: BeautifulSoup, today: dt.date) -> dt.date:
    for selector in DATE_SELECTORS:
        element = soup.select_one(selector)
        if element is None:
            continue
        raw = element.get("datetime") or element.get_text(" ")
        if not raw or not raw.strip():
            continue
        try:
            return dateparser.parse(raw.strip(), fuzzy=True).date()
        except (ValueError, OverflowError):
            continue
    return today


def parse_page(url: str, html: str, today: Optional[dt.date] = None) -> FetchedPage:
    """
    Extract article fields from HTML.

    Raises FetchError when the page has neither a title nor any text.
    """
    soup = BeautifulSoup(html, "html.parser")
    for tag in soup(["script", "style", "noscript"]):
        tag.decompose()

    title = _first_text(soup, TITLE_SELECTORS)
    if not title and soup.title is not None:
        title = _clean(soup.title.get_text(" "))

    content = _first_text(soup, CONTENT_SELECTORS)
    if not content:
        body = soup.body or soup
        content = _clean(body.get_text(" "))

    if not title and not content:
        raise FetchError(url, "page has no readable title or content")

    return FetchedPage(
        url=url,
        title=title,
        date=_parse_date(soup, today or dt.date.today()),
        content=content,
        domain=urlparse(url).hostname or "",
    )


class HttpPageFetcher:
    """Fetch pages over HTTP with a bounded timeout."""

    def __init__(
        self,
        timeout: Optional[float] = None,
        user_agent: Optional[str] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ) -> None:
        self.timeout = timeout if timeout is not None else config.FETCH_TIMEOUT_SECONDS
        self.user_agent = user_agent or config.FETCH_USER_AGENT
        self._transport = transport

    async def fetch_page(self, url: str) -> FetchedPage:
        headers = {"User-Agent": self.user_agent}
        try:
            async with httpx.AsyncClient(
                timeout=self.timeout,
                headers=headers,
                follow_redirects=True,
                transport=self._transport,
            ) as client:
                resp = await client.get(url)
        except httpx.TimeoutException as exc:
            logger.warning("Timed out fetching %s: %s", url, exc)
            raise FetchError(url, f"timed out after {self.timeout:g}s") from exc
        except (httpx.HTTPError, httpx.InvalidURL) as exc:
            logger.warning("Error fetching %s: %s", url, exc)
            raise FetchError(url, f"{type(exc).__name__}: {exc}") from exc

        if resp.status_code >= 400:
            logger.warning("HTTP %s fetching %s", resp.status_code, url)
            raise FetchError(url, f"HTTP {resp.status_code}")

        return parse_page(url, resp.text)
