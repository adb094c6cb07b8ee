from __future__ import annotations

import datetime as dt
from typing import List

from sqlalchemy import (
    Date,
    DateTime,
    ForeignKey,
    Integer,
    String,
    Text,
    UniqueConstraint,
)
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column, relationship


def utcnow() -> dt.datetime:
    return dt.datetime.now(dt.timezone.utc)


class Base(DeclarativeBase):
    """Base class for all ORM models."""


class Article(Base):
    __tablename__ = "articles"

    seq: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    url: Mapped[str] = mapped_column(String(2048), unique=True, nullable=False)
    title: Mapped[str] = mapped_column(Text, nullable=False, default="")
    # Publication date; aggregation windows filter on this column.
    date: Mapped[dt.date] = mapped_column(Date, nullable=False, index=True)
    content: Mapped[str] = mapped_column(Text, nullable=False, default="")
    domain: Mapped[str] = mapped_column(String(255), nullable=False, index=True)
    created_at: Mapped[dt.datetime] = mapped_column(
        DateTime(timezone=True),
        default=utcnow,
        nullable=False,
    )

    # Keyword rows are owned by the article and die with it.
    keywords: Mapped[List["Keyword"]] = relationship(
        back_populates="article",
        cascade="all, delete-orphan",
        order_by=lambda: (Keyword.frequency.desc(), Keyword.id),
    )


class Keyword(Base):
    """One KeywordOccurrence: (keyword, article, frequency within that article)."""

    __tablename__ = "keywords"
    __table_args__ = (
        UniqueConstraint("keyword", "article_seq", name="uq_keywords_keyword_article"),
    )

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    keyword: Mapped[str] = mapped_column(String(255), nullable=False, index=True)
    article_seq: Mapped[int] = mapped_column(
        ForeignKey("articles.seq", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    frequency: Mapped[int] = mapped_column(Integer, nullable=False)
    created_at: Mapped[dt.datetime] = mapped_column(
        DateTime(timezone=True),
        default=utcnow,
        nullable=False,
    )

    article: Mapped["Article"] = relationship(back_populates="keywords")
