"""Patient-facing summary access.

Two paths reach a summary without a clinician session: the emailed token
link and the older summary id plus patient email pair.
"""

import logging
import uuid

from fastapi import APIRouter, HTTPException, Request, status
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from liaise.api.deps import PUBLIC, DbSession, client_ip
from liaise.errors import PublicError
from liaise.logging import log_security_event
from liaise.models import PatientAccessToken, Summary
from liaise.schemas.portal import (
    PatientChatHistoryAppend,
    PatientSummary,
    SummaryByEmailRequest,
    SummaryByTokenRequest,
)
from liaise.services.access_tokens import hash_access_token, is_expired

router = APIRouter(tags=["Patient portal"], dependencies=PUBLIC)
logger = logging.getLogger("liaise.portal")

INVALID_LINK_MESSAGE = "Invalid or expired access link."
EXPIRED_LINK_MESSAGE = "This access link has expired."
NOT_FOUND_MESSAGE = "Could not retrieve summary."


def _patient_view(summary: Summary) -> PatientSummary:
    return PatientSummary(
        id=summary.id,
        patient_name=summary.patient_name,
        summary_content=summary.summary_content,
        created_at=summary.created_at,
        chat_history=summary.chat_history or [],
    )


async def _summary_for_email(
    db: AsyncSession, summary_id: uuid.UUID, email: str, request: Request
) -> Summary:
    summary = await db.get(Summary, summary_id)
    if summary is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=f"Summary {summary_id} not found",
        )
    stored = (summary.patient_email or "").strip().lower()
    if not stored or stored != email.strip().lower():
        log_security_event(
            "unauthorized_access",
            ip=client_ip(request),
            user_agent=request.headers.get("user-agent"),
            details={"table": "summaries", "row_id": str(summary_id), "path": "email"},
        )
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail=f"Email does not match summary {summary_id}",
        )
    return summary


@router.post("/get-summary-by-token", response_model=PatientSummary)
async def get_summary_by_token(payload: SummaryByTokenRequest, db: DbSession, request: Request):
    """Resolve an emailed portal link to its summary."""
    result = await db.execute(
        select(PatientAccessToken).where(
            PatientAccessToken.summary_id == payload.summary_id,
            PatientAccessToken.token_hash == hash_access_token(payload.token),
        )
    )
    access_token = result.scalars().first()
    if access_token is None:
        log_security_event(
            "auth_failure",
            ip=client_ip(request),
            user_agent=request.headers.get("user-agent"),
            details={"reason": "unknown_portal_token", "summary_id": str(payload.summary_id)},
        )
        raise PublicError(status_code=status.HTTP_401_UNAUTHORIZED, detail=INVALID_LINK_MESSAGE)
    if is_expired(access_token.expires_at):
        raise PublicError(status_code=status.HTTP_401_UNAUTHORIZED, detail=EXPIRED_LINK_MESSAGE)

    summary = await db.get(Summary, payload.summary_id)
    if summary is None:
        raise PublicError(status_code=status.HTTP_404_NOT_FOUND, detail=NOT_FOUND_MESSAGE)
    return _patient_view(summary)


@router.post("/patient-summary", response_model=PatientSummary)
async def get_patient_summary(payload: SummaryByEmailRequest, db: DbSession, request: Request):
    summary = await _summary_for_email(db, payload.summary_id, payload.email, request)
    return _patient_view(summary)


@router.post("/patient-summary/chat-history", response_model=PatientSummary)
async def append_patient_chat_history(
    payload: PatientChatHistoryAppend,
    db: DbSession,
    request: Request,
):
    summary = await _summary_for_email(db, payload.summary_id, payload.email, request)
    history = list(summary.chat_history or [])
    history.extend(turn.model_dump() for turn in payload.turns)
    summary.chat_history = history
    await db.commit()
    return _patient_view(summary)
