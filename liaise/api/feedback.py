"""Anonymous patient feedback and public usage statistics."""

import logging
import uuid

from fastapi import APIRouter
from sqlalchemy import distinct, func, select

from liaise.api.deps import PUBLIC, DbSession
from liaise.models import Feedback, Summary
from liaise.schemas.feedback import GlobalStats, SubmitFeedbackRequest, SubmitFeedbackResponse

router = APIRouter(tags=["Feedback"], dependencies=PUBLIC)
logger = logging.getLogger("liaise.feedback")


@router.post("/submit-feedback", response_model=SubmitFeedbackResponse)
async def submit_feedback(payload: SubmitFeedbackRequest, db: DbSession):
    ratings = payload.ratings
    feedback = Feedback(
        id=uuid.uuid4(),
        session_id=payload.session_id,
        summary_id=payload.summary_id,
        overall_rating=ratings.overall,
        clarity_rating=ratings.clarity,
        usefulness_rating=ratings.usefulness,
        accuracy_rating=ratings.accuracy,
        recommendation_rating=ratings.recommendation,
        open_feedback=payload.open_feedback.strip() if payload.open_feedback else None,
    )
    db.add(feedback)
    await db.commit()
    logger.info("Feedback %s recorded for session %s", feedback.id, payload.session_id)
    return SubmitFeedbackResponse(feedback_id=feedback.id)


@router.post("/get-global-stats", response_model=GlobalStats)
async def get_global_stats(db: DbSession):
    """Totals shown on the public landing page."""
    total_summaries = await db.scalar(select(func.count(Summary.id)))
    patients = await db.scalar(
        select(func.count(distinct(Summary.patient_email))).where(
            Summary.sent_at.is_not(None),
            Summary.patient_email.is_not(None),
        )
    )
    providers = await db.scalar(select(func.count(distinct(Summary.user_id))))
    average_overall = await db.scalar(
        select(func.avg(Feedback.overall_rating)).where(Feedback.overall_rating.is_not(None))
    )

    average_rating = None
    if average_overall is not None:
        # Stored on a 1-5 scale, shown out of 10.
        average_rating = round(float(average_overall) * 2, 1)

    return GlobalStats(
        total_summaries=total_summaries or 0,
        patients_impacted=patients or 0,
        average_rating=average_rating,
        providers_using_liaise=providers or 0,
    )
