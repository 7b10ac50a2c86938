"""
SQLAlchemy model for slug history records.

One row per slug an owning record has ever held. Owners are referenced by a
(type, id) pair rather than a foreign key, so a single table serves every
sluggable model.
"""

from typing import Any, Dict, NamedTuple

from sqlalchemy import Column, DateTime, Index, Integer, String
from sqlalchemy.sql import func

from .base import Base


class SluggableRef(NamedTuple):
    """Tagged reference to the owner of a slug record."""

    sluggable_type: str
    sluggable_id: int


class SlugModel(Base):
    """A slug once (or currently) held by an owning record.

    Rows are append-only. The auto-increment id orders them by recency.
    """

    __tablename__ = "slugs"

    id = Column(Integer, primary_key=True, autoincrement=True)
    slug = Column(String(255), nullable=False)

    # Owner (polymorphic)
    sluggable_id = Column(Integer, nullable=False)
    sluggable_type = Column(String(50), nullable=False)

    # Serialized scope for scoped owners, locale for translated owners
    scope = Column(String(255), nullable=True)
    locale = Column(String(16), nullable=True)

    created_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now())

    __table_args__ = (
        Index("ix_slugs_type_slug", "sluggable_type", "slug"),
        Index("ix_slugs_type_owner", "sluggable_type", "sluggable_id"),
        Index("ix_slugs_slug_type_scope", "slug", "sluggable_type", "scope"),
        Index("ix_slugs_locale", "locale"),
    )

    @property
    def sluggable(self) -> SluggableRef:
        return SluggableRef(self.sluggable_type, self.sluggable_id)

    def to_dict(self) -> Dict[str, Any]:
        """Convert model to dictionary."""
        return {
            "id": self.id,
            "slug": self.slug,
            "sluggable_type": self.sluggable_type,
            "sluggable_id": self.sluggable_id,
            "scope": self.scope,
            "locale": self.locale,
            "created_at": self.created_at.isoformat() if self.created_at else None,
        }

    def __repr__(self) -> str:
        return f"<SlugModel {self.sluggable_type}:{self.sluggable_id} {self.slug!r}>"
