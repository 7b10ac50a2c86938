"""
Slug History Writer.

Records an owner's current slug in the history table after the owner has been
flushed. Runs on the flushing session's connection so every delete and insert
here belongs to the same transaction as the owner's save.
"""

import logging
from typing import TYPE_CHECKING, Any, Optional

from sqlalchemy import and_, delete, insert, select
from sqlalchemy.engine import Connection
from sqlalchemy.exc import IntegrityError

from ..exceptions import SlugConflictError
from .models import SlugModel

if TYPE_CHECKING:
    from ..sluggable import SluggableConfig

logger = logging.getLogger(__name__)

slugs = SlugModel.__table__


class HistoryWriter:
    """Writes and prunes slug history rows for registered owners.

    Usage:
        writer = HistoryWriter()
        writer.record_slug(session.connection(), config, post)
    """

    def record_slug(self, connection: Connection, config: "SluggableConfig", entity: Any) -> int:
        """Record the entity's current slug once per relevant locale.

        Returns the number of rows inserted.
        """
        inserted = 0
        for locale in config.locales.locales_for(entity):
            if self._record_for_locale(connection, config, entity, locale):
                inserted += 1
        return inserted

    def purge(self, connection: Connection, config: "SluggableConfig", entity: Any) -> int:
        """Delete every history row of a deleted owner."""
        sluggable_id = config.surrogate_key(entity)
        result = connection.execute(
            delete(slugs).where(self._owned_by(config.sluggable_type, sluggable_id))
        )
        logger.debug(
            "Purged %s slug rows for %s:%s",
            result.rowcount,
            config.sluggable_type,
            sluggable_id,
        )
        return result.rowcount

    def _record_for_locale(
        self,
        connection: Connection,
        config: "SluggableConfig",
        entity: Any,
        locale: Optional[str],
    ) -> bool:
        slug = config.locales.slug_for(entity, config.slug_column, locale)
        if not slug:
            return False

        sluggable_id = config.surrogate_key(entity)
        owned = and_(
            self._owned_by(config.sluggable_type, sluggable_id),
            slugs.c.locale == locale,
        )

        latest = connection.execute(
            select(slugs.c.slug).where(owned).order_by(slugs.c.id.desc()).limit(1)
        ).scalar()
        if latest == slug:
            return False

        # Reverting to a slug used before: drop the old rows first
        stale = and_(owned, slugs.c.slug == slug)
        scope = config.serialized_scope(entity) if config.scoped else None
        if config.scoped:
            stale = and_(stale, slugs.c.scope == scope)
        removed = connection.execute(delete(slugs).where(stale)).rowcount
        if removed:
            logger.debug(
                "Removed %s stale %r rows for %s:%s",
                removed,
                slug,
                config.sluggable_type,
                sluggable_id,
            )

        try:
            connection.execute(
                insert(slugs).values(
                    slug=slug,
                    sluggable_type=config.sluggable_type,
                    sluggable_id=sluggable_id,
                    scope=scope,
                    locale=locale,
                )
            )
        except IntegrityError as exc:
            logger.warning(
                "Slug row rejected for %s:%s (%r)",
                config.sluggable_type,
                sluggable_id,
                slug,
            )
            raise SlugConflictError(config.sluggable_type, sluggable_id, slug, locale) from exc

        logger.debug(
            "Recorded slug %r for %s:%s locale=%s",
            slug,
            config.sluggable_type,
            sluggable_id,
            locale,
        )
        return True

    @staticmethod
    def _owned_by(sluggable_type: str, sluggable_id: int):
        return and_(
            slugs.c.sluggable_type == sluggable_type,
            slugs.c.sluggable_id == sluggable_id,
        )
