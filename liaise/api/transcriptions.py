"""Consultation recording endpoints: transcription and clinical notes."""

import asyncio
import logging
import uuid
from datetime import datetime, timezone
from typing import Annotated

from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy import select

from liaise.api.deps import (
    AUTHENTICATED,
    RATE_LIMITED,
    AuthenticatedUser,
    DbSession,
    get_owned_transcription,
)
from liaise.config import settings
from liaise.models import Summary, Transcription
from liaise.schemas.common import SuccessResponse
from liaise.schemas.transcriptions import (
    ClinicalNotesRequest,
    ClinicalNotesResponse,
    ShareTranscriptionRequest,
    ShareTranscriptionResponse,
    TranscribeAudioRequest,
    TranscribeAudioResponse,
    TranscriptionCreate,
    TranscriptionItem,
)
from liaise.services.audio import decode_base64_chunks
from liaise.services.email import normalize_email
from liaise.services.openai_client import OpenAIService, get_openai_service
from liaise.services.retention import delete_old_transcriptions
from liaise.services.templates import (
    PATIENT_SUMMARY_PROMPT,
    get_user_settings,
    resolve_clinical_notes_template,
)

router = APIRouter(tags=["Transcriptions"], dependencies=AUTHENTICATED)
logger = logging.getLogger("liaise.transcriptions")

OpenAI = Annotated[OpenAIService, Depends(get_openai_service)]


@router.post("/transcriptions", response_model=TranscriptionItem, status_code=status.HTTP_201_CREATED)
async def create_transcription(
    payload: TranscriptionCreate,
    db: DbSession,
    current_user: AuthenticatedUser,
):
    """Create the empty row a recording is transcribed into."""
    transcription = Transcription(
        id=uuid.uuid4(),
        user_id=current_user.id,
        patient_name=payload.patient_name,
        patient_email=payload.patient_email,
        original_filename=payload.original_filename,
        audio_duration=payload.audio_duration,
    )
    db.add(transcription)
    await db.commit()
    await db.refresh(transcription)
    return TranscriptionItem.model_validate(transcription)


@router.get("/transcriptions", response_model=list[TranscriptionItem])
async def list_transcriptions(db: DbSession, current_user: AuthenticatedUser):
    user_settings = await get_user_settings(db, current_user.id)
    if await delete_old_transcriptions(db, current_user.id, user_settings):
        await db.commit()
    result = await db.execute(
        select(Transcription)
        .where(Transcription.user_id == current_user.id)
        .order_by(Transcription.created_at.desc())
    )
    return [TranscriptionItem.model_validate(row) for row in result.scalars().all()]


@router.delete("/transcriptions/{transcription_id}", response_model=SuccessResponse)
async def delete_transcription(
    transcription_id: uuid.UUID,
    db: DbSession,
    current_user: AuthenticatedUser,
):
    transcription = await get_owned_transcription(db, transcription_id, current_user)
    await db.delete(transcription)
    await db.commit()
    return SuccessResponse()


@router.post(
    "/transcribe-audio",
    response_model=TranscribeAudioResponse,
    dependencies=RATE_LIMITED,
)
async def transcribe_audio(
    payload: TranscribeAudioRequest,
    db: DbSession,
    current_user: AuthenticatedUser,
    openai: OpenAI,
):
    """Transcribe base64 webm audio into the caller's transcription row."""
    transcription = await get_owned_transcription(db, payload.transcription_id, current_user)

    try:
        audio = decode_base64_chunks(payload.audio)
    except ValueError as exc:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(exc))
    if not audio:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Empty audio payload")
    if len(audio) > settings.max_request_body_bytes:
        raise HTTPException(
            status_code=status.HTTP_413_REQUEST_ENTITY_TOO_LARGE,
            detail=f"Decoded audio of {len(audio)} bytes is too large",
        )

    logger.info("Transcribing %d bytes for transcription %s", len(audio), transcription.id)
    text = await openai.transcribe(audio)

    transcription.transcription_text = text
    await db.commit()
    return TranscribeAudioResponse(text=text, transcription_id=transcription.id)


@router.post(
    "/generate-clinical-notes",
    response_model=ClinicalNotesResponse,
    dependencies=RATE_LIMITED,
)
async def generate_clinical_notes(
    payload: ClinicalNotesRequest,
    db: DbSession,
    current_user: AuthenticatedUser,
    openai: OpenAI,
):
    """Produce clinical notes and a patient summary from one transcript.

    Both completions run concurrently. If either fails nothing is written.
    """
    transcription = await get_owned_transcription(db, payload.transcription_id, current_user)
    clinical_prompt = await resolve_clinical_notes_template(db, current_user.id)
    transcript = f"Consultation transcription:\n\n{payload.transcription_text}"

    clinical_notes, patient_summary = await asyncio.gather(
        openai.chat(
            [
                {"role": "system", "content": clinical_prompt},
                {"role": "user", "content": transcript},
            ],
            model=settings.openai_notes_model,
            temperature=settings.openai_notes_temperature,
        ),
        openai.chat(
            [
                {"role": "system", "content": PATIENT_SUMMARY_PROMPT},
                {"role": "user", "content": transcript},
            ],
            model=settings.openai_notes_model,
            temperature=settings.openai_notes_temperature,
        ),
    )

    transcription.transcription_text = payload.transcription_text
    transcription.clinical_notes = clinical_notes
    transcription.patient_summary = patient_summary
    await db.commit()
    return ClinicalNotesResponse(
        clinical_notes=clinical_notes,
        patient_summary=patient_summary,
        transcription_id=transcription.id,
    )


@router.post("/transcriptions/{transcription_id}/share", response_model=ShareTranscriptionResponse)
async def share_transcription(
    transcription_id: uuid.UUID,
    payload: ShareTranscriptionRequest,
    db: DbSession,
    current_user: AuthenticatedUser,
):
    """Turn a transcription's patient summary into a deliverable summary."""
    transcription = await get_owned_transcription(db, transcription_id, current_user)
    if not transcription.patient_summary:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=f"Transcription {transcription_id} has no patient summary yet",
        )
    email = normalize_email(payload.patient_email)
    if email is None:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Invalid email address")

    summary = Summary(
        id=uuid.uuid4(),
        user_id=current_user.id,
        patient_name=payload.patient_name or transcription.patient_name,
        original_filename=transcription.original_filename or "Consultation recording",
        summary_content=transcription.patient_summary,
        chat_history=[],
    )
    db.add(summary)
    transcription.patient_email = email
    transcription.patient_summary_sent_at = datetime.now(timezone.utc)
    await db.commit()
    return ShareTranscriptionResponse(summary_id=summary.id, transcription_id=transcription.id)
