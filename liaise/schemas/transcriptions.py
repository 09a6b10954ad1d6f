"""Schemas for audio transcription and clinical notes."""

from datetime import datetime
from uuid import UUID

from pydantic import ConfigDict, Field

from liaise.schemas.common import CamelModel


class TranscriptionCreate(CamelModel):
    patient_name: str = Field(..., min_length=1, max_length=255)
    patient_email: str | None = Field(None, max_length=320)
    original_filename: str | None = Field(None, max_length=500)
    audio_duration: float | None = Field(None, ge=0)


class TranscriptionItem(CamelModel):
    model_config = ConfigDict(from_attributes=True)

    id: UUID
    patient_name: str
    patient_email: str | None = None
    original_filename: str | None = None
    audio_duration: float | None = None
    transcription_text: str | None = None
    clinical_notes: str | None = None
    patient_summary: str | None = None
    clinical_notes_sent_at: datetime | None = None
    patient_summary_sent_at: datetime | None = None
    created_at: datetime


class TranscribeAudioRequest(CamelModel):
    audio: str = Field(..., min_length=1, description="Base64-encoded audio (webm)")
    transcription_id: UUID


class TranscribeAudioResponse(CamelModel):
    text: str
    transcription_id: UUID


class ClinicalNotesRequest(CamelModel):
    transcription_text: str = Field(..., min_length=1, max_length=200_000)
    transcription_id: UUID


class ClinicalNotesResponse(CamelModel):
    clinical_notes: str
    patient_summary: str
    transcription_id: UUID


class ShareTranscriptionRequest(CamelModel):
    """Create a deliverable summary from a transcription's patient summary."""

    patient_email: str = Field(..., max_length=320)
    patient_name: str | None = Field(None, max_length=255)


class ShareTranscriptionResponse(CamelModel):
    summary_id: UUID
    transcription_id: UUID
