"""Create slugs table

Revision ID: 001_slugs
Revises:
Create Date: 2026-10-19

One row per slug an owning record has held. Owners are referenced by
(sluggable_type, sluggable_id); the id column orders rows by recency.
"""
from __future__ import annotations

import sqlalchemy as sa
from alembic import op

# revision identifiers, used by Alembic.
revision = "001_slugs"
down_revision = None
branch_labels = None
depends_on = None


def upgrade() -> None:
    op.create_table(
        "slugs",
        sa.Column("id", sa.Integer, primary_key=True, autoincrement=True),
        sa.Column("slug", sa.String(length=255), nullable=False),
        # Owner columns
        sa.Column("sluggable_id", sa.Integer, nullable=False),
        sa.Column("sluggable_type", sa.String(length=50), nullable=False),
        # Scoped and translated owners
        sa.Column("scope", sa.String(length=255), nullable=True),
        sa.Column("locale", sa.String(length=16), nullable=True),
        sa.Column(
            "created_at",
            sa.DateTime(timezone=True),
            nullable=False,
            server_default=sa.func.now(),
        ),
    )

    op.create_index(
        "ix_slugs_type_slug",
        "slugs",
        ["sluggable_type", "slug"],
    )
    op.create_index(
        "ix_slugs_type_owner",
        "slugs",
        ["sluggable_type", "sluggable_id"],
    )
    op.create_index(
        "ix_slugs_slug_type_scope",
        "slugs",
        ["slug", "sluggable_type", "scope"],
    )
    op.create_index("ix_slugs_locale", "slugs", ["locale"])


def downgrade() -> None:
    op.drop_index("ix_slugs_locale", table_name="slugs")
    op.drop_index("ix_slugs_slug_type_scope", table_name="slugs")
    op.drop_index("ix_slugs_type_owner", table_name="slugs")
    op.drop_index("ix_slugs_type_slug", table_name="slugs")
    op.drop_table("slugs")
