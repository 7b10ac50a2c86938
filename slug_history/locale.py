"""
Active locale for slug writes and lookups.

Translated models store one slug per locale. Finders and the history writer
read the active locale from here; ``with_locale`` switches it for a block.
"""

from contextlib import contextmanager
from contextvars import ContextVar
from typing import Iterator, Optional

from .config import get_settings

_current_locale: ContextVar[Optional[str]] = ContextVar("slug_history_locale", default=None)


def current_locale() -> str:
    """Return the active locale, falling back to the configured default."""
    locale = _current_locale.get()
    if locale is None:
        return get_settings().default_locale
    return locale


@contextmanager
def with_locale(locale: str) -> Iterator[str]:
    """Run a block with ``locale`` as the active locale."""
    token = _current_locale.set(locale)
    try:
        yield locale
    finally:
        _current_locale.reset(token)
