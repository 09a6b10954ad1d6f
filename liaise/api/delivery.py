"""Patient email delivery: summary emails and follow-up feedback requests."""

import logging
import uuid
from datetime import datetime, timezone
from typing import Annotated
from urllib.parse import urlencode

from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.exc import SQLAlchemyError

from liaise.api.deps import GUARDED, AuthenticatedUser, DbSession, get_owned_summary
from liaise.config import settings
from liaise.schemas.delivery import (
    SendFollowUpEmailRequest,
    SendFollowUpEmailResponse,
    SendSummaryEmailRequest,
    SendSummaryEmailResponse,
)
from liaise.services.access_tokens import mint_access_token, portal_url
from liaise.services.email import (
    FOLLOW_UP_EMAIL_SUBJECT,
    SUMMARY_EMAIL_SUBJECT,
    EmailSender,
    get_email_sender,
    normalize_email,
    render_follow_up_email,
    render_summary_email,
)

router = APIRouter(tags=["Delivery"], dependencies=GUARDED)
logger = logging.getLogger("liaise.delivery")

Sender = Annotated[EmailSender, Depends(get_email_sender)]


def _require_email(address: str) -> str:
    email = normalize_email(address)
    if email is None:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Invalid patient email address",
        )
    return email


def feedback_url(session_id: str, summary_id: uuid.UUID) -> str:
    query = urlencode({"session": session_id, "summary": str(summary_id)})
    return f"{settings.site_url.rstrip('/')}/feedback?{query}"


@router.post("/send-summary-email", response_model=SendSummaryEmailResponse)
async def send_summary_email(
    payload: SendSummaryEmailRequest,
    db: DbSession,
    current_user: AuthenticatedUser,
    sender: Sender,
):
    """Email a summary to the patient with a time-limited portal link."""
    summary = await get_owned_summary(db, payload.summary_id, current_user)
    email = _require_email(payload.patient_email)

    token, token_row = mint_access_token(summary.id)
    db.add(token_row)
    await db.commit()

    html_body = render_summary_email(
        payload.patient_name or summary.patient_name,
        summary.summary_content,
        portal_url(summary.id, token),
    )
    email_id = await sender.send([email], SUMMARY_EMAIL_SUBJECT, html_body)

    try:
        summary.patient_email = email
        summary.sent_at = datetime.now(timezone.utc)
        await db.commit()
    except SQLAlchemyError as exc:
        # The email is already out; only the bookkeeping is lost.
        logger.error("Failed to record delivery of summary %s: %s", summary.id, exc)
        await db.rollback()

    return SendSummaryEmailResponse(email_id=email_id)


@router.post("/send-follow-up-email", response_model=SendFollowUpEmailResponse)
async def send_follow_up_email(
    payload: SendFollowUpEmailRequest,
    db: DbSession,
    current_user: AuthenticatedUser,
    sender: Sender,
):
    summary = await get_owned_summary(db, payload.summary_id, current_user)
    email = _require_email(payload.patient_email)

    session_id = str(uuid.uuid4())
    url = feedback_url(session_id, summary.id)
    html_body = render_follow_up_email(payload.patient_name or summary.patient_name, url)
    email_id = await sender.send(
        [email],
        FOLLOW_UP_EMAIL_SUBJECT,
        html_body,
        sender=settings.follow_up_email_from,
    )

    try:
        summary.follow_up_sent = True
        summary.follow_up_sent_at = datetime.now(timezone.utc)
        await db.commit()
    except SQLAlchemyError as exc:
        logger.error("Failed to record follow-up for summary %s: %s", summary.id, exc)
        await db.rollback()

    return SendFollowUpEmailResponse(email_id=email_id, session_id=session_id, feedback_url=url)
