"""
Sluggable model registry and the flush hook that keeps slug history current.

Models opt in at composition time:

    history = SlugHistory()

    @history.register(scope_columns=("category_id",))
    class Post(Base):
        ...

    history.install(SessionLocal)

After every flush of an installed session, registered owners that were
inserted or updated get their slug recorded, and deleted owners lose their
history rows, all inside the flush's transaction.
"""

import logging
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, List, Optional, Tuple, Type, Union

from sqlalchemy import Column, event, inspect
from sqlalchemy.orm import Session, sessionmaker

from .db.history_writer import HistoryWriter
from .db.models import SluggableRef
from .exceptions import UnregisteredModelError
from .locale import current_locale

logger = logging.getLogger(__name__)


class SingleLocale:
    """Locale dimension of a model with one slug column.

    Yields a single implicit ``None`` tag.
    """

    translated = False

    def bind(self, model: type) -> None:
        pass

    def locales_for(self, entity: Any) -> List[Optional[str]]:
        return [None]

    def slug_for(self, entity: Any, slug_column: str, locale: Optional[str]) -> Optional[str]:
        return getattr(entity, slug_column)


class TranslatedLocales:
    """Locale dimension of a model whose slug lives on per-locale translation rows.

    Args:
        translations: Name of the owner's one-to-many relationship to its
            translation rows.
        locale_column: Locale attribute on the translation model.
        owner: Name of the translation's many-to-one relationship back to the
            owner. Defaults to the relationship's ``back_populates``.
    """

    translated = True

    def __init__(
        self,
        translations: str = "translations",
        locale_column: str = "locale",
        owner: Optional[str] = None,
    ):
        self.translations = translations
        self.locale_column = locale_column
        self._owner = owner
        self._model: Optional[type] = None

    def bind(self, model: type) -> None:
        self._model = model

    @property
    def relationship(self):
        return getattr(self._model, self.translations)

    @property
    def translation_model(self) -> type:
        return inspect(self._model).relationships[self.translations].mapper.class_

    @property
    def owner(self) -> str:
        if self._owner is None:
            self._owner = inspect(self._model).relationships[self.translations].back_populates
        return self._owner

    def column(self, name: str) -> Column:
        return getattr(self.translation_model, name)

    def locales_for(self, entity: Any) -> List[Optional[str]]:
        translations = getattr(entity, self.translations)
        if len(translations) > 1:
            return [getattr(t, self.locale_column) for t in translations]
        return [current_locale()]

    def slug_for(self, entity: Any, slug_column: str, locale: Optional[str]) -> Optional[str]:
        for translation in getattr(entity, self.translations):
            if getattr(translation, self.locale_column) == locale:
                return getattr(translation, slug_column)
        return None

    def owner_of(self, translation: Any) -> Any:
        return getattr(translation, self.owner)


LocaleDimension = Union[SingleLocale, TranslatedLocales]


@dataclass
class SluggableConfig:
    """How one model exposes its slug, scope and locales to the history."""

    model: type
    sluggable_type: str
    slug_column: str = "slug"
    scope_columns: Tuple[str, ...] = ()
    locales: LocaleDimension = field(default_factory=SingleLocale)

    @property
    def scoped(self) -> bool:
        return bool(self.scope_columns)

    @property
    def translated(self) -> bool:
        return self.locales.translated

    @property
    def primary_key(self) -> Column:
        return inspect(self.model).primary_key[0]

    @property
    def slug_attribute(self):
        """Column holding the current slug (translation column when translated)."""
        if self.translated:
            return self.locales.column(self.slug_column)
        return getattr(self.model, self.slug_column)

    def serialized_scope(self, entity: Any) -> str:
        return ",".join(
            f"{column}:{getattr(entity, column)}" for column in sorted(self.scope_columns)
        )

    def surrogate_key(self, entity: Any) -> Optional[int]:
        state = inspect(entity)
        if state.identity:
            return state.identity[0]
        return state.mapper.primary_key_from_instance(entity)[0]

    def is_new(self, entity: Any) -> bool:
        return not inspect(entity).has_identity


class SlugHistory:
    """Registry of sluggable models plus the session hook writing their history."""

    def __init__(self, writer: Optional[HistoryWriter] = None):
        self.writer = writer or HistoryWriter()
        self._configs: Dict[type, SluggableConfig] = {}
        self._types: Dict[str, type] = {}

    def register(
        self,
        model: Optional[type] = None,
        *,
        slug_column: str = "slug",
        scope_columns: Tuple[str, ...] = (),
        locales: Optional[LocaleDimension] = None,
        sluggable_type: Optional[str] = None,
    ) -> Union[type, Callable[[type], type]]:
        """Register a model for slug history. Usable as a class decorator."""
        if model is None:
            return lambda cls: self.register(
                cls,
                slug_column=slug_column,
                scope_columns=scope_columns,
                locales=locales,
                sluggable_type=sluggable_type,
            )

        # Subclasses sharing a table share the base class history namespace
        type_name = sluggable_type or inspect(model).base_mapper.class_.__name__
        dimension = locales if locales is not None else SingleLocale()
        dimension.bind(model)

        config = SluggableConfig(
            model=model,
            sluggable_type=type_name,
            slug_column=slug_column,
            scope_columns=tuple(scope_columns),
            locales=dimension,
        )
        self._configs[model] = config
        self._types[type_name] = model
        logger.debug("Registered %s for slug history as %r", model.__name__, type_name)
        return model

    def find_config(self, model: type) -> Optional[SluggableConfig]:
        for cls in model.__mro__:
            config = self._configs.get(cls)
            if config is not None:
                return config
        return None

    def config_for(self, model_or_entity: Any) -> SluggableConfig:
        model = model_or_entity if isinstance(model_or_entity, type) else type(model_or_entity)
        config = self.find_config(model)
        if config is None:
            raise UnregisteredModelError(model.__name__)
        return config

    def model_for_type(self, sluggable_type: str) -> type:
        try:
            return self._types[sluggable_type]
        except KeyError:
            raise UnregisteredModelError(sluggable_type) from None

    def resolve_owner(self, db: Session, ref: SluggableRef) -> Optional[Any]:
        """Load the live owner a slug record points at."""
        return db.get(self.model_for_type(ref.sluggable_type), ref.sluggable_id)

    def install(self, target: Union[Type[Session], sessionmaker, Session] = Session) -> None:
        """Attach the history hook to a Session class, sessionmaker or session."""
        if not event.contains(target, "after_flush", self._after_flush):
            event.listen(target, "after_flush", self._after_flush)
            logger.info("Slug history hook installed on %r", target)

    def uninstall(self, target: Union[Type[Session], sessionmaker, Session] = Session) -> None:
        if event.contains(target, "after_flush", self._after_flush):
            event.remove(target, "after_flush", self._after_flush)

    def _after_flush(self, session: Session, flush_context) -> None:
        deleted = list(session.deleted)
        saved = self._saved_owners(session, deleted)
        if not deleted and not saved:
            return

        connection = session.connection()
        for obj in deleted:
            config = self.find_config(type(obj))
            if config is not None:
                self.writer.purge(connection, config, obj)
        for config, owner in saved:
            self.writer.record_slug(connection, config, owner)

    def _saved_owners(self, session: Session, deleted: List[Any]) -> List[Tuple[SluggableConfig, Any]]:
        deleted_ids = {id(obj) for obj in deleted}
        owners: Dict[int, Tuple[SluggableConfig, Any]] = {}
        for obj in list(session.new) + list(session.dirty):
            config = self.find_config(type(obj))
            if config is not None:
                owner = obj
            else:
                config, owner = self._owner_of_translation(obj)
                if owner is None:
                    if config is not None:
                        logger.debug(
                            "Skipping %s with no %r owner attached; slug history not recorded",
                            type(obj).__name__,
                            config.locales.owner,
                        )
                    continue
            if id(owner) not in deleted_ids:
                owners.setdefault(id(owner), (config, owner))
        return list(owners.values())

    def _owner_of_translation(self, obj: Any) -> Tuple[Optional[SluggableConfig], Any]:
        for config in self._configs.values():
            if config.translated and isinstance(obj, config.locales.translation_model):
                return config, config.locales.owner_of(obj)
        return None, None
