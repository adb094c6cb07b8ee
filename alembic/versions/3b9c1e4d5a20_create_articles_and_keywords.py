"""create articles and keywords

Revision ID: 3b9c1e4d5a20
Revises:
Create Date: 2026-10-19 10:00:00.000000

"""

from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision: str = "3b9c1e4d5a20"
down_revision: Union[str, Sequence[str], None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    """Upgrade schema."""
    op.create_table(
        "articles",
        sa.Column("seq", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("url", sa.String(length=2048), nullable=False),
        sa.Column("title", sa.Text(), nullable=False),
        sa.Column("date", sa.Date(), nullable=False),
        sa.Column("content", sa.Text(), nullable=False),
        sa.Column("domain", sa.String(length=255), nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
        sa.PrimaryKeyConstraint("seq"),
        sa.UniqueConstraint("url"),
    )
    op.create_index("ix_articles_date", "articles", ["date"], unique=False)
    op.create_index("ix_articles_domain", "articles", ["domain"], unique=False)

    op.create_table(
        "keywords",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("keyword", sa.String(length=255), nullable=False),
        sa.Column("article_seq", sa.Integer(), nullable=False),
        sa.Column("frequency", sa.Integer(), nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
        sa.ForeignKeyConstraint(["article_seq"], ["articles.seq"], ondelete="CASCADE"),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("keyword", "article_seq", name="uq_keywords_keyword_article"),
    )
    op.create_index("ix_keywords_keyword", "keywords", ["keyword"], unique=False)
    op.create_index("ix_keywords_article_seq", "keywords", ["article_seq"], unique=False)


def downgrade() -> None:
    """Downgrade schema."""
    op.drop_index("ix_keywords_article_seq", table_name="keywords")
    op.drop_index("ix_keywords_keyword", table_name="keywords")
    op.drop_table("keywords")
    op.drop_index("ix_articles_domain", table_name="articles")
    op.drop_index("ix_articles_date", table_name="articles")
    op.drop_table("articles")
