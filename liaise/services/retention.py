"""Retention sweeps for a clinician's summaries and transcriptions."""

import logging
import uuid
from datetime import datetime, timedelta, timezone

from sqlalchemy import delete
from sqlalchemy.ext.asyncio import AsyncSession

from liaise.models import Summary, Transcription, UserSettings

logger = logging.getLogger("liaise.retention")


def retention_cutoff(user_settings: UserSettings | None, now: datetime | None = None) -> datetime | None:
    """Oldest creation time to keep, or ``None`` when nothing should be deleted."""
    if user_settings is None:
        return None
    if user_settings.auto_delete_enabled is False:
        return None
    hours = user_settings.retention_hours
    if hours is None or hours <= 0:
        return None
    now = now or datetime.now(timezone.utc)
    return now - timedelta(hours=hours)


async def _sweep(db: AsyncSession, model, user_id: uuid.UUID, cutoff: datetime) -> int:
    result = await db.execute(
        delete(model).where(model.user_id == user_id, model.created_at < cutoff)
    )
    deleted = result.rowcount or 0
    if deleted:
        logger.info("Retention sweep removed %d %s rows", deleted, model.__tablename__)
    return deleted


async def delete_old_summaries(
    db: AsyncSession, user_id: uuid.UUID, user_settings: UserSettings | None
) -> int:
    cutoff = retention_cutoff(user_settings)
    if cutoff is None:
        return 0
    return await _sweep(db, Summary, user_id, cutoff)


async def delete_old_transcriptions(
    db: AsyncSession, user_id: uuid.UUID, user_settings: UserSettings | None
) -> int:
    cutoff = retention_cutoff(user_settings)
    if cutoff is None:
        return 0
    return await _sweep(db, Transcription, user_id, cutoff)
