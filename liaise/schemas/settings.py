"""Schemas for user settings and prompt templates."""

from datetime import datetime
from uuid import UUID

from pydantic import ConfigDict, Field

from liaise.schemas.common import CamelModel

RETENTION_CHOICES_HOURS = (24, 72, 168, 720)


class UserSettingsResponse(CamelModel):
    model_config = ConfigDict(from_attributes=True)

    summary_template: str | None = None
    custom_template: str | None = None
    clinical_notes_template: str | None = None
    custom_clinical_template: str | None = None
    auto_delete_enabled: bool | None = True
    retention_hours: int | None = 72


class UserSettingsUpdate(CamelModel):
    summary_template: str | None = Field(None, max_length=100)
    custom_template: str | None = Field(None, max_length=20_000)
    clinical_notes_template: str | None = Field(None, max_length=100)
    custom_clinical_template: str | None = Field(None, max_length=20_000)
    auto_delete_enabled: bool | None = None
    retention_hours: int | None = Field(None, description="Hours to keep rows; -1 keeps forever")


class TemplatePresetItem(CamelModel):
    model_config = ConfigDict(from_attributes=True)

    id: UUID
    name: str
    description: str | None = None
    template_content: str


class CustomTemplateCreate(CamelModel):
    name: str = Field(..., min_length=1, max_length=100)
    template_content: str = Field(..., min_length=1, max_length=20_000)


class CustomTemplateItem(CamelModel):
    model_config = ConfigDict(from_attributes=True)

    id: UUID
    name: str
    template_content: str
    created_at: datetime


class ProfileResponse(CamelModel):
    model_config = ConfigDict(from_attributes=True)

    id: UUID
    email: str | None = None
    first_name: str | None = None
    last_name: str | None = None
    full_name: str | None = None
    organization: str | None = None


class ProfileUpdate(CamelModel):
    first_name: str | None = Field(None, max_length=255)
    last_name: str | None = Field(None, max_length=255)
    organization: str | None = Field(None, max_length=255)
