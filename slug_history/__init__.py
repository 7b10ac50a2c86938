"""
slug-history

Keeps every slug a record has held so old URLs keep resolving.
"""

import importlib.metadata

__version__ = importlib.metadata.version("slug-history")

from .db.history_writer import HistoryWriter
from .db.models import SluggableRef, SlugModel
from .exceptions import SlugConflictError, SlugHistoryError, UnregisteredModelError
from .finders import SlugFinder, SlugResolution
from .generation import is_slug_available, scope_for_generation
from .locale import current_locale, with_locale
from .sluggable import SingleLocale, SluggableConfig, SlugHistory, TranslatedLocales

__all__ = [
    "HistoryWriter",
    "SingleLocale",
    "SlugConflictError",
    "SlugFinder",
    "SlugHistory",
    "SlugHistoryError",
    "SlugModel",
    "SlugResolution",
    "SluggableConfig",
    "SluggableRef",
    "TranslatedLocales",
    "UnregisteredModelError",
    "current_locale",
    "is_slug_available",
    "scope_for_generation",
    "with_locale",
]
