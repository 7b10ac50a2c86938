"""Test configuration and fixtures."""

from typing import Generator

import pytest
from sqlalchemy import Column, ForeignKey, Integer, String, create_engine, func, select
from sqlalchemy.orm import DeclarativeBase, Session, relationship, sessionmaker

from slug_history.db.base import Base
from slug_history.db.models import SlugModel
from slug_history.sluggable import SlugHistory, TranslatedLocales

history = SlugHistory()


class ModelBase(DeclarativeBase):
    """Declarative base for the sample owning models."""

    pass


@history.register
class Post(ModelBase):
    __tablename__ = "posts"

    id = Column(Integer, primary_key=True)
    title = Column(String(200), nullable=False, default="")
    slug = Column(String(255), nullable=True)


@history.register
class Page(ModelBase):
    __tablename__ = "pages"

    id = Column(Integer, primary_key=True)
    slug = Column(String(255), nullable=True)


@history.register(scope_columns=("category_id",))
class Article(ModelBase):
    __tablename__ = "articles"

    id = Column(Integer, primary_key=True)
    category_id = Column(Integer, nullable=False)
    slug = Column(String(255), nullable=True)


@history.register(locales=TranslatedLocales())
class Novel(ModelBase):
    __tablename__ = "novels"

    id = Column(Integer, primary_key=True)
    author = Column(String(200), nullable=False, default="")
    translations = relationship(
        "NovelTranslation",
        back_populates="novel",
        cascade="all, delete-orphan",
        order_by="NovelTranslation.id",
    )

    def translation(self, locale: str) -> "NovelTranslation":
        return next(t for t in self.translations if t.locale == locale)


class NovelTranslation(ModelBase):
    __tablename__ = "novel_translations"

    id = Column(Integer, primary_key=True)
    novel_id = Column(Integer, ForeignKey("novels.id"), nullable=False)
    locale = Column(String(16), nullable=False)
    slug = Column(String(255), nullable=True)
    novel = relationship("Novel", back_populates="translations")


@history.register
class Vehicle(ModelBase):
    __tablename__ = "vehicles"

    id = Column(Integer, primary_key=True)
    kind = Column(String(20), nullable=False)
    slug = Column(String(255), nullable=True)

    __mapper_args__ = {"polymorphic_on": kind, "polymorphic_identity": "vehicle"}


class Car(Vehicle):
    __mapper_args__ = {"polymorphic_identity": "car"}


@pytest.fixture
def engine():
    """Create a fresh in-memory database for each test."""
    engine = create_engine("sqlite:///:memory:")
    Base.metadata.create_all(engine)
    ModelBase.metadata.create_all(engine)
    yield engine
    engine.dispose()


@pytest.fixture
def db_session(engine) -> Generator[Session, None, None]:
    """Session with the slug history hook installed."""
    SessionLocal = sessionmaker(bind=engine)
    history.install(SessionLocal)
    session = SessionLocal()
    yield session
    session.close()


def save(db: Session, entity):
    """Add and commit an entity, returning it."""
    db.add(entity)
    db.commit()
    return entity


def slug_rows(db: Session, entity, sluggable_type: str = None):
    """Slug values recorded for an entity, newest first."""
    return list(
        db.scalars(
            select(SlugModel.slug)
            .where(
                SlugModel.sluggable_type == (sluggable_type or type(entity).__name__),
                SlugModel.sluggable_id == entity.id,
            )
            .order_by(SlugModel.id.desc())
        )
    )


def slug_count(db: Session) -> int:
    return db.scalar(select(func.count()).select_from(SlugModel))
