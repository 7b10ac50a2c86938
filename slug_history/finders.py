"""
Slug History Finders.

Resolve a lookup key to a live record. The current slug column is always tried
first; the history table is the fallback, newest row first.
"""

from dataclasses import dataclass
from typing import Any, List, Optional, Union

from sqlalchemy import and_, select
from sqlalchemy.orm import Session
from sqlalchemy.sql import Select

from .db.models import SlugModel
from .locale import current_locale
from .sluggable import SlugHistory

Key = Union[str, int]


@dataclass(frozen=True)
class SlugResolution:
    """A found record and the lookup path that found it."""

    entity: Any
    key: Key
    via: str  # "slug", "history" or "primary_key"

    @property
    def is_stale(self) -> bool:
        """True when the key is not the record's current slug.

        Callers typically redirect to the canonical URL in that case.
        """
        return self.via != "slug"


# Largest value a signed 64-bit primary key column can hold
MAX_PRIMARY_KEY = 2**63 - 1


def as_primary_key(key: Key) -> Optional[int]:
    """Parse a key that can only be a primary key, or return None.

    Accepts ints and ASCII digit strings within the signed 64-bit range.
    """
    if isinstance(key, bool):
        return None
    if isinstance(key, int):
        value = key
    else:
        text = str(key).strip()
        if not (text.isascii() and text.isdigit()):
            return None
        value = int(text)
    if 0 <= value <= MAX_PRIMARY_KEY:
        return value
    return None


def is_numeric_key(key: Key) -> bool:
    """Whether the key can only be a primary key."""
    return as_primary_key(key) is not None


class SlugFinder:
    """Finder for one sluggable model.

    Usage:
        finder = SlugFinder(db, Post, history)
        post = finder.find_by_slug("hello-world")

    ``base`` narrows both lookup paths, e.g.
    ``select(Post).where(Post.category_id == 3)``.
    """

    def __init__(
        self,
        db: Session,
        model: type,
        history: SlugHistory,
        base: Optional[Select] = None,
    ):
        self.db = db
        self.model = model
        self.history = history
        self.config = history.config_for(model)
        self.base = base if base is not None else select(model)

    # Lookup paths

    def _direct(self, key: Key) -> Select:
        config = self.config
        stmt = self.base
        if config.translated:
            stmt = stmt.join(config.locales.relationship).where(
                config.locales.column(config.locales.locale_column) == current_locale()
            )
        return stmt.where(config.slug_attribute == key)

    def _historical(self, key: Key) -> Select:
        config = self.config
        stmt = self.base.join(
            SlugModel,
            and_(
                SlugModel.sluggable_type == config.sluggable_type,
                SlugModel.sluggable_id == config.primary_key,
            ),
        ).where(SlugModel.slug == key)
        if config.translated:
            stmt = stmt.where(SlugModel.locale == current_locale())
        return stmt.order_by(SlugModel.id.desc())

    # Public API

    def resolve(self, key: Key) -> Optional[SlugResolution]:
        """Find a record by current or historical slug, or by primary key."""
        primary_key = as_primary_key(key)
        if primary_key is not None:
            entity = self._by_primary_key(primary_key)
            return SlugResolution(entity, key, "primary_key") if entity is not None else None
        if isinstance(key, int) and not isinstance(key, bool):
            # Out of range for any primary key and never a slug
            return None

        entity = self.db.scalars(self._direct(key).limit(1)).first()
        if entity is not None:
            return SlugResolution(entity, key, "slug")

        entity = self.db.scalars(self._historical(key).limit(1)).first()
        if entity is not None:
            return SlugResolution(entity, key, "history")

        return None

    def find_by_slug(self, key: str) -> Optional[Any]:
        """Find a record by current slug, falling back to slug history."""
        entity = self.db.scalars(self._direct(key).limit(1)).first()
        if entity is not None:
            return entity
        return self.db.scalars(self._historical(key).limit(1)).first()

    def exists_by_slug(self, key: str) -> bool:
        """Whether any record holds or once held ``key``."""
        if self.db.scalar(select(self._direct(key).exists())):
            return True
        return bool(self.db.scalar(select(self._historical(key).order_by(None).exists())))

    def find(self, key: Key) -> Optional[Any]:
        """Find by primary key for numeric keys, by slug otherwise."""
        resolution = self.resolve(key)
        return resolution.entity if resolution is not None else None

    def history_for(self, entity: Any) -> List[SlugModel]:
        """Slug rows recorded for ``entity``, newest first."""
        return list(
            self.db.scalars(
                select(SlugModel)
                .where(
                    SlugModel.sluggable_type == self.config.sluggable_type,
                    SlugModel.sluggable_id == self.config.surrogate_key(entity),
                )
                .order_by(SlugModel.id.desc())
            )
        )

    def _by_primary_key(self, key: int) -> Optional[Any]:
        return self.db.scalars(
            self.base.where(self.config.primary_key == key).limit(1)
        ).first()
