from .fetcher import FetchedPage, HttpPageFetcher, PageFetcher, parse_page

__all__ = ["FetchedPage", "HttpPageFetcher", "PageFetcher", "parse_page"]
