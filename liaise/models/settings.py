import uuid
from typing import Optional

from sqlalchemy import Boolean, Integer, String, Text, UniqueConstraint, Uuid
from sqlalchemy.orm import Mapped, mapped_column

from liaise.models.base import Base, TimestampMixin

CUSTOM_TEMPLATE_KEY = "custom"


class TemplatePreset(Base, TimestampMixin):
    """Admin-curated prompt template selectable by name."""

    __tablename__ = "template_presets"

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    name: Mapped[str] = mapped_column(String(100), unique=True, nullable=False)
    description: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    template_content: Mapped[str] = mapped_column(Text, nullable=False)
    is_active: Mapped[Optional[bool]] = mapped_column(Boolean, nullable=True, default=True)

    def __repr__(self) -> str:
        return f"<TemplatePreset(name='{self.name}')>"


class UserCustomTemplate(Base, TimestampMixin):
    """Prompt template saved by a clinician for reuse."""

    __tablename__ = "user_custom_templates"

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    user_id: Mapped[uuid.UUID] = mapped_column(Uuid, index=True, nullable=False)
    name: Mapped[str] = mapped_column(String(100), nullable=False)
    template_content: Mapped[str] = mapped_column(Text, nullable=False)

    def __repr__(self) -> str:
        return f"<UserCustomTemplate(user_id={self.user_id}, name='{self.name}')>"


class UserSettings(Base, TimestampMixin):
    """Per-clinician template choice and retention preference."""

    __tablename__ = "user_settings"

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    user_id: Mapped[uuid.UUID] = mapped_column(Uuid, index=True, nullable=False)

    summary_template: Mapped[Optional[str]] = mapped_column(
        String(100),
        nullable=True,
        comment="Preset name, custom template name, or 'custom' for custom_template",
    )
    custom_template: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    clinical_notes_template: Mapped[Optional[str]] = mapped_column(String(100), nullable=True)
    custom_clinical_template: Mapped[Optional[str]] = mapped_column(Text, nullable=True)

    auto_delete_enabled: Mapped[Optional[bool]] = mapped_column(
        Boolean, nullable=True, default=True
    )
    retention_hours: Mapped[Optional[int]] = mapped_column(
        Integer, nullable=True, default=72, comment="NULL keeps rows until deleted manually"
    )

    __table_args__ = (UniqueConstraint("user_id", name="uq_user_settings_user_id"),)

    def __repr__(self) -> str:
        return f"<UserSettings(user_id={self.user_id})>"
