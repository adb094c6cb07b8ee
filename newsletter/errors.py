"""
Error kinds surfaced by ingestion, storage and query code.

Every failure path raises one of these so callers (API routes, CLI) can
tell them apart without inspecting messages.
"""

from __future__ import annotations


class NewsletterError(Exception):
    """Base class for all domain errors."""


class ValidationError(NewsletterError):
    """Missing or malformed URL / parameters. User-correctable."""


class DuplicateError(NewsletterError):
    """An article with this URL has already been ingested."""

    def __init__(self, url: str) -> None:
        super().__init__(f"Article with this URL already exists: {url}")
        self.url = url


class FetchError(NewsletterError):
    """The source page could not be loaded or parsed."""

    def __init__(self, url: str, reason: str) -> None:
        super().__init__(f"Failed to load {url}: {reason}")
        self.url = url
        self.reason = reason


class StorageError(NewsletterError):
    """Persistence layer failure."""


class NotFoundError(NewsletterError):
    """Referenced article or keyword does not exist."""
