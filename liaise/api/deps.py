"""Shared API dependencies and request guards.

Routers declare ``GUARDED``, ``AUTHENTICATED`` or ``PUBLIC`` once instead of
repeating the size, auth and rate-limit checks in every handler. Each rate
limited route gets its own window per caller.
"""

import uuid
from dataclasses import dataclass
from typing import Annotated, TypeVar

from fastapi import Depends, HTTPException, Request, Response, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from jose import JWTError, jwt
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from liaise.config import settings
from liaise.database import get_db
from liaise.logging import log_security_event
from liaise.models import Summary, Transcription
from liaise.services.rate_limit import InMemoryRateLimiter, RateLimitResult

security = HTTPBearer(auto_error=False)

rate_limiter = InMemoryRateLimiter(
    window_seconds=settings.rate_limit_window_seconds,
    max_requests=settings.rate_limit_max_requests,
)

OwnedRow = TypeVar("OwnedRow", Summary, Transcription)


@dataclass(frozen=True)
class CurrentUser:
    """Identity taken from a verified bearer token."""

    id: uuid.UUID
    email: str | None = None


def route_key(request: Request) -> str:
    """Path template of the matched route, so /summaries/{id} shares one bucket."""
    route = request.scope.get("route")
    return getattr(route, "path", None) or request.url.path


def client_ip(request: Request) -> str:
    forwarded = request.headers.get("x-forwarded-for")
    if forwarded:
        return forwarded.split(",")[0].strip()
    real_ip = request.headers.get("x-real-ip")
    if real_ip:
        return real_ip.strip()
    return request.client.host if request.client else "unknown"


def decode_access_token(token: str) -> CurrentUser:
    """Verify a bearer token and return its subject, or raise 401."""
    credentials_exception = HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail="Could not validate credentials",
        headers={"WWW-Authenticate": "Bearer"},
    )
    try:
        payload = jwt.decode(
            token,
            settings.jwt_secret_key,
            algorithms=[settings.jwt_algorithm],
            audience=settings.jwt_audience,
        )
        subject: str | None = payload.get("sub")
        if subject is None:
            raise credentials_exception
        user_id = uuid.UUID(subject)
    except (JWTError, ValueError):
        raise credentials_exception
    return CurrentUser(id=user_id, email=payload.get("email"))


async def enforce_body_size(request: Request) -> None:
    content_length = request.headers.get("content-length")
    if not content_length:
        return
    try:
        size = int(content_length)
    except ValueError:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=f"Malformed Content-Length header: {content_length!r}",
        )
    if size > settings.max_request_body_bytes:
        log_security_event(
            "validation_error",
            ip=client_ip(request),
            details={"reason": "body_too_large", "size": size},
        )
        raise HTTPException(
            status_code=status.HTTP_413_REQUEST_ENTITY_TOO_LARGE,
            detail=f"Body of {size} bytes exceeds {settings.max_request_body_bytes}",
        )


async def get_current_user(
    request: Request,
    credentials: Annotated[HTTPAuthorizationCredentials | None, Depends(security)],
) -> CurrentUser:
    """Require a valid bearer token."""
    if credentials is None or not credentials.credentials:
        log_security_event(
            "auth_failure",
            ip=client_ip(request),
            user_agent=request.headers.get("user-agent"),
            details="missing bearer token",
        )
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Authorization header is required",
            headers={"WWW-Authenticate": "Bearer"},
        )
    try:
        return decode_access_token(credentials.credentials)
    except HTTPException:
        log_security_event(
            "auth_failure",
            ip=client_ip(request),
            user_agent=request.headers.get("user-agent"),
            details="invalid bearer token",
        )
        raise


async def get_optional_user(
    credentials: Annotated[HTTPAuthorizationCredentials | None, Depends(security)],
) -> CurrentUser | None:
    if credentials is None or not credentials.credentials:
        return None
    try:
        return decode_access_token(credentials.credentials)
    except HTTPException:
        return None


async def rate_limit(
    request: Request,
    response: Response,
    user: Annotated[CurrentUser | None, Depends(get_optional_user)],
) -> RateLimitResult:
    """Count this request against the caller's window for this route.

    The caller is the token subject when present, else the client IP.
    """
    ip = client_ip(request)
    caller = f"user:{user.id}" if user else f"ip:{ip}"
    identifier = f"{route_key(request)}:{caller}"
    result = await rate_limiter.check(identifier)
    reset_in = result.retry_after(rate_limiter.clock())
    headers = {
        "X-RateLimit-Remaining": str(result.remaining),
        "X-RateLimit-Reset": str(reset_in),
    }
    if not result.allowed:
        log_security_event(
            "rate_limit",
            user_id=str(user.id) if user else None,
            ip=ip,
            user_agent=request.headers.get("user-agent"),
            details={"path": request.url.path},
        )
        raise HTTPException(
            status_code=status.HTTP_429_TOO_MANY_REQUESTS,
            detail=f"Rate limit exceeded for {identifier}",
            headers={**headers, "Retry-After": str(reset_in)},
        )
    response.headers.update(headers)
    return result


AUTHENTICATED = [Depends(enforce_body_size), Depends(get_current_user)]
GUARDED = [*AUTHENTICATED, Depends(rate_limit)]
PUBLIC = [Depends(enforce_body_size), Depends(rate_limit)]
RATE_LIMITED = [Depends(rate_limit)]


async def _get_owned(
    db: AsyncSession,
    model: type[OwnedRow],
    row_id: uuid.UUID,
    current_user: CurrentUser,
) -> OwnedRow:
    result = await db.execute(select(model).where(model.id == row_id))
    row = result.scalar_one_or_none()
    if row is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=f"{model.__name__} {row_id} not found",
        )
    if row.user_id != current_user.id:
        log_security_event(
            "unauthorized_access",
            user_id=str(current_user.id),
            details={"table": model.__tablename__, "row_id": str(row_id)},
        )
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail=f"{model.__name__} {row_id} does not belong to the caller",
        )
    return row


async def get_owned_summary(
    db: AsyncSession, summary_id: uuid.UUID, current_user: CurrentUser
) -> Summary:
    return await _get_owned(db, Summary, summary_id, current_user)


async def get_owned_transcription(
    db: AsyncSession, transcription_id: uuid.UUID, current_user: CurrentUser
) -> Transcription:
    return await _get_owned(db, Transcription, transcription_id, current_user)


DbSession = Annotated[AsyncSession, Depends(get_db)]
AuthenticatedUser = Annotated[CurrentUser, Depends(get_current_user)]
