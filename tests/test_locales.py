"""
Tests for translated models and the active locale.

Verifies:
- One history row per translation locale
- Lookups only match rows of the active locale
- with_locale() switching and restoring the active locale
- Translation rows with no owner attached are skipped with a DEBUG log
"""

import logging

from sqlalchemy import select

from slug_history.db.models import SlugModel
from slug_history.finders import SlugFinder
from slug_history.locale import current_locale, with_locale
from tests.conftest import Novel, NovelTranslation, history, save


def rows_by_locale(db, novel):
    rows = db.scalars(
        select(SlugModel)
        .where(SlugModel.sluggable_type == "Novel", SlugModel.sluggable_id == novel.id)
        .order_by(SlugModel.id)
    ).all()
    return [(r.locale, r.slug) for r in rows]


class TestCurrentLocale:
    """Tests for current_locale() and with_locale()."""

    def test_defaults_to_settings(self):
        assert current_locale() == "en"

    def test_with_locale_restores(self):
        with with_locale("fr"):
            assert current_locale() == "fr"
            with with_locale("de"):
                assert current_locale() == "de"
            assert current_locale() == "fr"
        assert current_locale() == "en"


class TestTranslatedHistory:
    """Tests for recording slugs of translated models."""

    def test_single_translation_uses_active_locale(self, db_session):
        novel = save(
            db_session,
            Novel(author="Tolstoy", translations=[NovelTranslation(locale="en", slug="war")]),
        )
        assert rows_by_locale(db_session, novel) == [("en", "war")]

    def test_single_translation_in_other_locale_is_noop(self, db_session):
        with with_locale("fr"):
            novel = save(
                db_session,
                Novel(translations=[NovelTranslation(locale="en", slug="war")]),
            )
        assert rows_by_locale(db_session, novel) == []

    def test_each_translation_recorded(self, db_session):
        novel = save(
            db_session,
            Novel(
                translations=[
                    NovelTranslation(locale="en", slug="war"),
                    NovelTranslation(locale="fr", slug="guerre"),
                ]
            ),
        )
        assert sorted(rows_by_locale(db_session, novel)) == [("en", "war"), ("fr", "guerre")]

    def test_translation_change_records_only_that_locale(self, db_session):
        novel = save(
            db_session,
            Novel(
                translations=[
                    NovelTranslation(locale="en", slug="war"),
                    NovelTranslation(locale="fr", slug="guerre"),
                ]
            ),
        )

        novel.translation("fr").slug = "la-guerre"
        db_session.commit()

        rows = rows_by_locale(db_session, novel)
        assert [slug for locale, slug in rows if locale == "en"] == ["war"]
        assert [slug for locale, slug in rows if locale == "fr"] == ["guerre", "la-guerre"]

    def test_same_slug_in_two_locales(self, db_session):
        novel = save(
            db_session,
            Novel(
                translations=[
                    NovelTranslation(locale="en", slug="anna"),
                    NovelTranslation(locale="de", slug="anna"),
                ]
            ),
        )
        assert sorted(rows_by_locale(db_session, novel)) == [("de", "anna"), ("en", "anna")]

    def test_delete_purges_all_locales(self, db_session):
        novel = save(
            db_session,
            Novel(
                translations=[
                    NovelTranslation(locale="en", slug="war"),
                    NovelTranslation(locale="fr", slug="guerre"),
                ]
            ),
        )
        db_session.delete(novel)
        db_session.commit()

        assert db_session.scalars(select(SlugModel)).all() == []

    def test_translation_without_owner_is_skipped(self, db_session, monkeypatch, caplog):
        novel = save(
            db_session,
            Novel(
                translations=[
                    NovelTranslation(locale="en", slug="war"),
                    NovelTranslation(locale="fr", slug="guerre"),
                ]
            ),
        )
        locales = history.config_for(Novel).locales
        monkeypatch.setattr(locales, "owner_of", lambda translation: None)

        novel.translation("fr").slug = "la-guerre"
        with caplog.at_level(logging.DEBUG, logger="slug_history.sluggable"):
            db_session.commit()

        assert sorted(rows_by_locale(db_session, novel)) == [("en", "war"), ("fr", "guerre")]
        assert "Skipping NovelTranslation with no 'novel' owner attached" in caplog.text


class TestTranslatedLookups:
    """Tests for SlugFinder on translated models."""

    def _novel(self, db):
        novel = save(
            db,
            Novel(
                translations=[
                    NovelTranslation(locale="en", slug="war"),
                    NovelTranslation(locale="fr", slug="guerre"),
                ]
            ),
        )
        novel.translation("fr").slug = "la-guerre"
        db.commit()
        return novel

    def test_direct_lookup_in_active_locale(self, db_session):
        novel = self._novel(db_session)
        novels = SlugFinder(db_session, Novel, history)

        assert novels.resolve("war").via == "slug"
        assert novels.find_by_slug("la-guerre") is None
        with with_locale("fr"):
            resolution = novels.resolve("la-guerre")
            assert resolution.via == "slug"
            assert resolution.entity is novel

    def test_history_lookup_in_active_locale(self, db_session):
        novel = self._novel(db_session)
        novels = SlugFinder(db_session, Novel, history)

        assert novels.find_by_slug("guerre") is None
        assert not novels.exists_by_slug("guerre")
        with with_locale("fr"):
            resolution = novels.resolve("guerre")
            assert resolution.via == "history"
            assert resolution.entity is novel
            assert novels.exists_by_slug("guerre")
