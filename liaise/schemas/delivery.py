"""Schemas for summary and follow-up emails."""

from uuid import UUID

from pydantic import Field

from liaise.schemas.common import CamelModel


class SendSummaryEmailRequest(CamelModel):
    summary_id: UUID
    # Syntax is checked in the route, after ownership.
    patient_email: str = Field(..., max_length=320)
    patient_name: str | None = Field(None, max_length=255)


class SendSummaryEmailResponse(CamelModel):
    success: bool = True
    email_id: str | None = None


class SendFollowUpEmailRequest(SendSummaryEmailRequest):
    pass


class SendFollowUpEmailResponse(SendSummaryEmailResponse):
    session_id: str
    feedback_url: str
