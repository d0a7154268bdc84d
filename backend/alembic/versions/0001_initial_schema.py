"""Initial schema: ranked list documents and thumbs ratings.

Revision ID: 0001
Revises:
Create Date: 2026-10-19 00:00:00
"""
from typing import Sequence, Union

import sqlalchemy as sa
from alembic import op
from sqlalchemy.dialects import postgresql

revision: str = "0001"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None

JSONDocument = sa.JSON().with_variant(postgresql.JSONB(), "postgresql")


def upgrade() -> None:
    op.create_table(
        "ranked_lists",
        sa.Column("id", sa.Uuid(), primary_key=True),
        sa.Column("list_id", sa.String(length=64), nullable=False),
        sa.Column("items", JSONDocument, nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=False),
    )
    op.create_index("ix_ranked_lists_list_id", "ranked_lists", ["list_id"], unique=True)

    op.create_table(
        "movie_ratings",
        sa.Column("id", sa.Uuid(), primary_key=True),
        sa.Column("catalog_id", sa.String(length=64), nullable=False),
        sa.Column(
            "rating",
            sa.Enum("double_up", "up", "down", name="thumb_rating"),
            nullable=False,
        ),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=False),
    )
    op.create_index("ix_movie_ratings_catalog_id", "movie_ratings", ["catalog_id"], unique=True)


def downgrade() -> None:
    op.drop_index("ix_movie_ratings_catalog_id", table_name="movie_ratings")
    op.drop_table("movie_ratings")
    op.drop_index("ix_ranked_lists_list_id", table_name="ranked_lists")
    op.drop_table("ranked_lists")
    sa.Enum(name="thumb_rating").drop(op.get_bind(), checkfirst=True)
