"""Summary generation and summary library endpoints."""

import logging
import uuid
from typing import Annotated

from fastapi import APIRouter, Depends, File, HTTPException, UploadFile, status
from sqlalchemy import select

from liaise.api.deps import (
    AUTHENTICATED,
    RATE_LIMITED,
    AuthenticatedUser,
    DbSession,
    get_owned_summary,
)
from liaise.config import settings
from liaise.models import Summary
from liaise.schemas.common import SuccessResponse
from liaise.schemas.summaries import (
    ChatHistoryAppend,
    ChatHistoryResponse,
    ConvertRequest,
    ConvertResponse,
    ExtractTextResponse,
    SummaryItem,
)
from liaise.services.audio import decode_base64_chunks
from liaise.services.extraction import extract_text_from_file, guess_mime_type, validate_upload
from liaise.services.gemini import GeminiService, get_gemini_service
from liaise.services.retention import delete_old_summaries
from liaise.services.templates import (
    build_summary_prompt,
    get_user_settings,
    resolve_summary_template,
)

router = APIRouter(tags=["Summaries"], dependencies=AUTHENTICATED)
logger = logging.getLogger("liaise.summaries")


def _check_upload_size(size: int) -> None:
    if size > settings.max_upload_size:
        raise HTTPException(
            status_code=status.HTTP_413_REQUEST_ENTITY_TOO_LARGE,
            detail=f"Upload of {size} bytes exceeds {settings.max_upload_size}",
        )


@router.post("/extract-text", response_model=ExtractTextResponse, dependencies=RATE_LIMITED)
async def extract_text(
    current_user: AuthenticatedUser,
    file: UploadFile = File(...),
):
    """Best-effort plain text from an uploaded document."""
    data = await file.read()
    filename = file.filename or "upload"
    _check_upload_size(len(data))
    mime_type = guess_mime_type(filename, file.content_type)
    error = validate_upload(
        mime_type,
        len(data),
        max_size=settings.max_upload_size,
        allowed_mime_types=settings.allowed_mime_types,
    )
    if error:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=error)

    result = extract_text_from_file(filename, data, mime_type)
    return ExtractTextResponse(text=result.text, placeholder=result.is_placeholder, file_name=filename)


@router.post(
    "/convert-to-patient-friendly",
    response_model=ConvertResponse,
    dependencies=RATE_LIMITED,
)
async def convert_to_patient_friendly(
    payload: ConvertRequest,
    db: DbSession,
    current_user: AuthenticatedUser,
    gemini: Annotated[GeminiService, Depends(get_gemini_service)],
):
    """Rewrite a medical document as a patient-friendly summary."""
    template = await resolve_summary_template(db, current_user.id, payload.custom_template)
    medical_text = payload.medical_text.strip() if payload.medical_text else None
    file_name = payload.file_name or payload.original_filename or "document"
    uploaded = None

    if payload.file_data:
        try:
            file_bytes = decode_base64_chunks(payload.file_data)
        except ValueError as exc:
            raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(exc))
        _check_upload_size(len(file_bytes))
        mime_type = guess_mime_type(file_name, payload.mime_type)
        error = validate_upload(
            mime_type,
            len(file_bytes),
            max_size=settings.max_upload_size,
            allowed_mime_types=[*settings.allowed_mime_types, *settings.gemini_file_mime_types],
        )
        if error:
            raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=error)

        if mime_type in settings.gemini_file_mime_types:
            uploaded = await gemini.upload_file(file_bytes, mime_type, file_name)
            uploaded = await gemini.wait_until_active(uploaded)
        elif not medical_text:
            extraction = extract_text_from_file(file_name, file_bytes, mime_type)
            if extraction.is_placeholder:
                raise HTTPException(
                    status_code=status.HTTP_400_BAD_REQUEST,
                    detail=f"No extractable text in {file_name}",
                )
            medical_text = extraction.text

    logger.info(
        "Generating summary for user %s (template=%s, file=%s, text_chars=%d)",
        current_user.id,
        template.source,
        bool(uploaded),
        len(medical_text or ""),
    )
    prompt = build_summary_prompt(template.content, medical_text, payload.additional_notes)
    summary_text = await gemini.generate(prompt, uploaded)

    summary_id = None
    if payload.patient_name:
        summary = Summary(
            id=uuid.uuid4(),
            user_id=current_user.id,
            patient_name=payload.patient_name,
            original_filename=payload.original_filename or payload.file_name or "Pasted text",
            summary_content=summary_text,
            chat_history=[],
        )
        db.add(summary)
        await db.commit()
        summary_id = summary.id

    return ConvertResponse(
        summary=summary_text,
        word_count=len(summary_text.split()),
        summary_id=summary_id,
    )


@router.get("/summaries", response_model=list[SummaryItem])
async def list_summaries(db: DbSession, current_user: AuthenticatedUser):
    """List the caller's summaries after applying their retention window."""
    user_settings = await get_user_settings(db, current_user.id)
    if await delete_old_summaries(db, current_user.id, user_settings):
        await db.commit()
    result = await db.execute(
        select(Summary)
        .where(Summary.user_id == current_user.id)
        .order_by(Summary.created_at.desc())
    )
    return [SummaryItem.model_validate(row) for row in result.scalars().all()]


@router.delete("/summaries/{summary_id}", response_model=SuccessResponse)
async def delete_summary(summary_id: uuid.UUID, db: DbSession, current_user: AuthenticatedUser):
    summary = await get_owned_summary(db, summary_id, current_user)
    await db.delete(summary)
    await db.commit()
    return SuccessResponse()


@router.post("/summaries/{summary_id}/chat-history", response_model=ChatHistoryResponse)
async def append_chat_history(
    summary_id: uuid.UUID,
    payload: ChatHistoryAppend,
    db: DbSession,
    current_user: AuthenticatedUser,
):
    """Append chat turns to a summary the caller owns.

    Not transactional: two concurrent appends can interleave.
    """
    summary = await get_owned_summary(db, summary_id, current_user)
    history = list(summary.chat_history or [])
    history.extend(turn.model_dump() for turn in payload.turns)
    summary.chat_history = history
    await db.commit()
    return ChatHistoryResponse(summary_id=summary.id, chat_history=history)
