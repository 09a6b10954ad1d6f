"""Schemas for summary generation and summary management."""

from datetime import datetime
from uuid import UUID

from pydantic import ConfigDict, Field, model_validator

from liaise.schemas.common import CamelModel, ChatTurn


class ConvertRequest(CamelModel):
    """Request to rewrite a medical document for the patient."""

    medical_text: str | None = Field(None, max_length=500_000)
    additional_notes: str | None = Field(None, max_length=10_000)
    file_data: str | None = Field(None, description="Base64-encoded original file")
    file_name: str | None = Field(None, max_length=500)
    mime_type: str | None = Field(None, max_length=200)
    custom_template: str | None = Field(None, max_length=20_000)
    patient_name: str | None = Field(None, max_length=255)
    original_filename: str | None = Field(None, max_length=500)

    @model_validator(mode="after")
    def require_content(self) -> "ConvertRequest":
        if not (self.medical_text and self.medical_text.strip()) and not self.file_data:
            raise ValueError("medicalText or fileData is required")
        return self


class ConvertResponse(CamelModel):
    summary: str
    word_count: int
    readability_score: str = "Grade 9 Level"
    summary_id: UUID | None = None


class SummaryItem(CamelModel):
    model_config = ConfigDict(from_attributes=True)

    id: UUID
    patient_name: str
    original_filename: str
    summary_content: str
    patient_email: str | None = None
    sent_at: datetime | None = None
    follow_up_sent: bool | None = None
    follow_up_sent_at: datetime | None = None
    chat_history: list[ChatTurn] | None = None
    created_at: datetime


class ChatHistoryAppend(CamelModel):
    """Turns to append to a summary's stored chat transcript."""

    turns: list[ChatTurn] = Field(..., min_length=1, max_length=50)


class ChatHistoryResponse(CamelModel):
    summary_id: UUID
    chat_history: list[ChatTurn]


class ExtractTextResponse(CamelModel):
    text: str
    placeholder: bool = False
    file_name: str
