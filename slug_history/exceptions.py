"""
Exceptions raised by slug-history.

Lookups that find nothing return None; these cover misconfiguration and
storage failures only.
"""

from typing import Any, Dict, Optional


class SlugHistoryError(Exception):
    """Base class for slug-history errors."""

    code = "SLUG_HISTORY_ERROR"

    def __init__(self, message: str):
        self.message = message
        super().__init__(message)

    def to_dict(self) -> Dict[str, Any]:
        return {"error": self.code, "message": self.message}


class UnregisteredModelError(SlugHistoryError):
    """Raised when a model or sluggable type has no history registration."""

    code = "UNREGISTERED_MODEL"

    def __init__(self, name: str):
        self.name = name
        super().__init__(f"{name} is not registered for slug history.")


class SlugConflictError(SlugHistoryError):
    """Raised when storage rejects a slug history row."""

    code = "SLUG_CONFLICT"

    def __init__(
        self,
        sluggable_type: str,
        sluggable_id: int,
        slug: str,
        locale: Optional[str] = None,
    ):
        self.sluggable_type = sluggable_type
        self.sluggable_id = sluggable_id
        self.slug = slug
        self.locale = locale
        super().__init__(
            f"Could not record slug {slug!r} for {sluggable_type}:{sluggable_id}"
            + (f" (locale {locale})" if locale else "")
        )

    def to_dict(self) -> Dict[str, Any]:
        data = super().to_dict()
        data.update(
            {
                "sluggable_type": self.sluggable_type,
                "sluggable_id": self.sluggable_id,
                "slug": self.slug,
                "locale": self.locale,
            }
        )
        return data
