"""Patient portal access tokens.

Only a SHA-256 digest is stored; the raw token exists in the emailed link.
"""

import hashlib
import secrets
import uuid
from datetime import datetime, timedelta, timezone

from liaise.config import settings
from liaise.models import PatientAccessToken


def hash_access_token(token: str) -> str:
    return hashlib.sha256(token.encode("utf-8")).hexdigest()


def mint_access_token(
    summary_id: uuid.UUID, now: datetime | None = None
) -> tuple[str, PatientAccessToken]:
    """Return the raw token and the row to persist for it."""
    now = now or datetime.now(timezone.utc)
    token = secrets.token_urlsafe(32)
    row = PatientAccessToken(
        id=uuid.uuid4(),
        summary_id=summary_id,
        token_hash=hash_access_token(token),
        expires_at=now + timedelta(hours=settings.patient_access_token_ttl_hours),
    )
    return token, row


def portal_url(summary_id: uuid.UUID, token: str) -> str:
    return f"{settings.site_url.rstrip('/')}/portal/{summary_id}/{token}"


def is_expired(expires_at: datetime, now: datetime | None = None) -> bool:
    now = now or datetime.now(timezone.utc)
    if expires_at.tzinfo is None:
        expires_at = expires_at.replace(tzinfo=timezone.utc)
    return expires_at < now
