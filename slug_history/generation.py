"""
Slug availability checks for slug generation.

A record's own history must not block it from taking back a slug it held
before, so the history side of the conflict query excludes the record's rows.
"""

from typing import Any, Optional

from sqlalchemy import select
from sqlalchemy.orm import Session
from sqlalchemy.sql import Select

from .db.models import SlugModel
from .locale import current_locale
from .sluggable import SlugHistory


def scope_for_generation(history: SlugHistory, entity: Any, base: Optional[Select] = None) -> Select:
    """Narrow a slug-row conflict query so it ignores the entity's own history."""
    config = history.config_for(entity)
    if base is None:
        base = select(SlugModel).where(SlugModel.sluggable_type == config.sluggable_type)
    if config.is_new(entity):
        return base

    stmt = base.where(SlugModel.sluggable_id != config.surrogate_key(entity))
    if config.scoped:
        stmt = stmt.where(SlugModel.scope == config.serialized_scope(entity))
    return stmt


def is_slug_available(db: Session, history: SlugHistory, entity: Any, candidate: str) -> bool:
    """Whether ``entity`` may take ``candidate`` as its slug.

    Checks live records holding the slug right now and slug rows of other
    records, both within the entity's scope.
    """
    config = history.config_for(entity)
    model = config.model

    live = select(model)
    if config.translated:
        locale_column = config.locales.column(config.locales.locale_column)
        live = live.join(config.locales.relationship).where(locale_column == current_locale())
    live = live.where(config.slug_attribute == candidate)
    for column in config.scope_columns:
        live = live.where(getattr(model, column) == getattr(entity, column))
    if not config.is_new(entity):
        live = live.where(config.primary_key != config.surrogate_key(entity))
    if db.scalar(select(live.exists())):
        return False

    taken = select(SlugModel).where(
        SlugModel.sluggable_type == config.sluggable_type,
        SlugModel.slug == candidate,
    )
    if config.translated:
        taken = taken.where(SlugModel.locale == current_locale())
    if config.scoped and config.is_new(entity):
        taken = taken.where(SlugModel.scope == config.serialized_scope(entity))
    taken = scope_for_generation(history, entity, taken)
    return not db.scalar(select(taken.exists()))
