import uuid
from datetime import datetime
from typing import Any, Optional

from sqlalchemy import JSON, Boolean, DateTime, ForeignKey, String, Text, Uuid, func
from sqlalchemy.orm import Mapped, mapped_column, relationship

from liaise.models.base import Base, TimestampMixin


class Summary(Base, TimestampMixin):
    """Patient-friendly rewrite of a medical document."""

    __tablename__ = "summaries"

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    user_id: Mapped[uuid.UUID] = mapped_column(
        Uuid, index=True, nullable=False, comment="Owning clinician (auth user id)"
    )

    patient_name: Mapped[str] = mapped_column(String(255), nullable=False)
    original_filename: Mapped[str] = mapped_column(String(500), nullable=False)
    summary_content: Mapped[str] = mapped_column(Text, nullable=False)

    patient_email: Mapped[Optional[str]] = mapped_column(String(320), nullable=True)
    sent_at: Mapped[Optional[datetime]] = mapped_column(
        DateTime(timezone=True), nullable=True
    )
    follow_up_sent: Mapped[Optional[bool]] = mapped_column(
        Boolean, nullable=True, default=False
    )
    follow_up_sent_at: Mapped[Optional[datetime]] = mapped_column(
        DateTime(timezone=True), nullable=True
    )

    chat_history: Mapped[Optional[list[dict[str, Any]]]] = mapped_column(
        JSON, nullable=True, comment="Ordered list of {role, content} turns"
    )

    access_tokens: Mapped[list["PatientAccessToken"]] = relationship(
        back_populates="summary", cascade="all, delete-orphan"
    )

    def __repr__(self) -> str:
        return f"<Summary(id={self.id}, user_id={self.user_id})>"


class PatientAccessToken(Base):
    """Emailed portal link granting time-limited read access to one summary."""

    __tablename__ = "patient_access_tokens"

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    summary_id: Mapped[uuid.UUID] = mapped_column(
        ForeignKey("summaries.id", ondelete="CASCADE"),
        index=True,
        nullable=False,
    )
    token_hash: Mapped[str] = mapped_column(
        String(64), index=True, nullable=False, comment="SHA-256 of the emailed token"
    )
    expires_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now(), nullable=False
    )

    summary: Mapped["Summary"] = relationship(back_populates="access_tokens")

    def __repr__(self) -> str:
        return f"<PatientAccessToken(summary_id={self.summary_id}, expires_at={self.expires_at})>"
