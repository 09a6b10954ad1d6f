"""Schemas for patient-facing summary access."""

from datetime import datetime
from uuid import UUID

from pydantic import Field

from liaise.schemas.common import CamelModel, ChatTurn


class SummaryByTokenRequest(CamelModel):
    summary_id: UUID
    token: str = Field(..., min_length=1, max_length=256)


class SummaryByEmailRequest(CamelModel):
    summary_id: UUID
    email: str = Field(..., min_length=1, max_length=320)


class PatientChatHistoryAppend(SummaryByEmailRequest):
    turns: list[ChatTurn] = Field(..., min_length=1, max_length=50)


class PatientSummary(CamelModel):
    id: UUID
    patient_name: str
    summary_content: str
    created_at: datetime
    chat_history: list[ChatTurn] = Field(default_factory=list)
