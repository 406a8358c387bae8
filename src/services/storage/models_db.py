"""
SQLAlchemy ORM models for the Afroglot library.

Table: ``saved_items`` - one row per saved transcription or generated speech.
"""

import uuid

from sqlalchemy import Index, String, Text
from sqlalchemy.orm import Mapped, mapped_column
from sqlalchemy.types import JSON

from src.core.utils import epoch_ms, utc_iso
from src.services.storage.database import Base


def _new_id() -> str:
    return uuid.uuid4().hex


class SavedItem(Base):
    """A transcription or generated speech saved to a user's library.

    The text is persisted first; audio fields are filled in (or the error
    fields set) once the CDN upload settles.
    """

    __tablename__ = "saved_items"
    __table_args__ = (Index("ix_saved_items_user_start", "user_id", "processing_start_time"),)

    id: Mapped[str] = mapped_column(String(32), primary_key=True, default=_new_id)
    user_id: Mapped[str] = mapped_column(String(128), index=True)
    text: Mapped[str] = mapped_column(Text, default="")
    language: Mapped[str] = mapped_column(String(32), default="yoruba")
    type: Mapped[str] = mapped_column(String(32), index=True)
    voice_gender: Mapped[str | None] = mapped_column(String(16), nullable=True)
    voice: Mapped[str | None] = mapped_column(String(64), nullable=True)
    timestamp: Mapped[str] = mapped_column(String(40), default=utc_iso)
    segments: Mapped[list | None] = mapped_column(JSON, nullable=True)

    is_processing: Mapped[bool] = mapped_column(default=True)
    processing_start_time: Mapped[int] = mapped_column(default=epoch_ms)

    audio_url: Mapped[str | None] = mapped_column(String(1024), nullable=True)
    audio_public_id: Mapped[str | None] = mapped_column(String(255), nullable=True)
    audio_duration: Mapped[float | None] = mapped_column(nullable=True)
    audio_format: Mapped[str | None] = mapped_column(String(32), nullable=True)
    audio_error: Mapped[bool] = mapped_column(default=False)
    error_message: Mapped[str | None] = mapped_column(Text, nullable=True)

    def __repr__(self) -> str:
        return f"<SavedItem id={self.id} type={self.type!r} processing={self.is_processing}>"
