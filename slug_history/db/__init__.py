"""
Database package for slug-history.
"""

from .base import Base, get_db, get_engine, get_session_local, init_database
from .models import SluggableRef, SlugModel

__all__ = [
    "Base",
    "get_db",
    "get_engine",
    "get_session_local",
    "init_database",
    "SlugModel",
    "SluggableRef",
]
