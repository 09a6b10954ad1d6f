import uuid
from datetime import datetime
from typing import Optional

from sqlalchemy import DateTime, Float, String, Text, Uuid
from sqlalchemy.orm import Mapped, mapped_column

from liaise.models.base import Base, TimestampMixin


class Transcription(Base, TimestampMixin):
    """Recorded consultation: transcript plus derived notes and summary.

    Created empty when recording starts, then filled in two steps:
    the transcript, then clinical notes and patient summary together.
    """

    __tablename__ = "transcriptions"

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    user_id: Mapped[uuid.UUID] = mapped_column(Uuid, index=True, nullable=False)

    patient_name: Mapped[str] = mapped_column(String(255), nullable=False)
    patient_email: Mapped[Optional[str]] = mapped_column(String(320), nullable=True)
    original_filename: Mapped[Optional[str]] = mapped_column(String(500), nullable=True)
    audio_duration: Mapped[Optional[float]] = mapped_column(
        Float, nullable=True, comment="Seconds"
    )

    transcription_text: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    clinical_notes: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    patient_summary: Mapped[Optional[str]] = mapped_column(Text, nullable=True)

    clinical_notes_sent_at: Mapped[Optional[datetime]] = mapped_column(
        DateTime(timezone=True), nullable=True
    )
    patient_summary_sent_at: Mapped[Optional[datetime]] = mapped_column(
        DateTime(timezone=True), nullable=True
    )

    def __repr__(self) -> str:
        return f"<Transcription(id={self.id}, user_id={self.user_id})>"
