import uuid
from typing import Optional

from sqlalchemy import ForeignKey, SmallInteger, String, Text, Uuid
from sqlalchemy.orm import Mapped, mapped_column

from liaise.models.base import Base, TimestampMixin


class Feedback(Base, TimestampMixin):
    """Anonymous patient feedback. Inserted once, never updated."""

    __tablename__ = "feedback"

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    session_id: Mapped[str] = mapped_column(String(64), index=True, nullable=False)
    summary_id: Mapped[Optional[uuid.UUID]] = mapped_column(
        ForeignKey("summaries.id", ondelete="SET NULL"),
        nullable=True,
    )
    user_id: Mapped[Optional[uuid.UUID]] = mapped_column(Uuid, nullable=True)

    overall_rating: Mapped[Optional[int]] = mapped_column(SmallInteger, nullable=True)
    clarity_rating: Mapped[Optional[int]] = mapped_column(SmallInteger, nullable=True)
    usefulness_rating: Mapped[Optional[int]] = mapped_column(SmallInteger, nullable=True)
    accuracy_rating: Mapped[Optional[int]] = mapped_column(SmallInteger, nullable=True)
    recommendation_rating: Mapped[Optional[int]] = mapped_column(
        SmallInteger, nullable=True, comment="1-10"
    )
    open_feedback: Mapped[Optional[str]] = mapped_column(Text, nullable=True)

    def __repr__(self) -> str:
        return f"<Feedback(id={self.id}, session_id={self.session_id})>"
