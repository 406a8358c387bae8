"""
Storage module - the per-user library of saved transcriptions and speech.

Importing the package registers ``SavedItem`` on ``Base.metadata`` so that
``init_db()`` creates its table.
"""

from src.services.storage.database import Base, close_db, get_session, init_db
from src.services.storage.models_db import SavedItem
from src.services.storage.repository import (
    CANCELLED_MESSAGE,
    STALLED_AFTER_MS,
    SavedItemRepository,
)

__all__ = [
    "CANCELLED_MESSAGE",
    "STALLED_AFTER_MS",
    "Base",
    "SavedItem",
    "SavedItemRepository",
    "close_db",
    "get_session",
    "init_db",
]
