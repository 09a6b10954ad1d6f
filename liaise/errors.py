"""Client-safe error shaping.

Internal error detail is logged server-side only. Clients receive one of a
small set of generic messages keyed by HTTP status code, unless the route
raised a :class:`PublicError` whose message is meant for the end user.
"""

from datetime import datetime, timezone
from typing import Any, Mapping

from fastapi import HTTPException, status
from fastapi.responses import JSONResponse

CLIENT_MESSAGES: dict[int, str] = {
    status.HTTP_400_BAD_REQUEST: "Invalid request data",
    status.HTTP_401_UNAUTHORIZED: "Authentication required",
    status.HTTP_403_FORBIDDEN: "Access denied",
    status.HTTP_404_NOT_FOUND: "Resource not found",
    status.HTTP_413_REQUEST_ENTITY_TOO_LARGE: "Request too large",
    status.HTTP_429_TOO_MANY_REQUESTS: "Too many requests. Please try again later",
}
DEFAULT_CLIENT_MESSAGE = "An error occurred while processing your request"


class PublicError(HTTPException):
    """HTTP error whose detail is safe to show to the caller verbatim."""


class UpstreamServiceError(Exception):
    """A third-party provider (AI, email) failed or returned an unusable payload."""

    def __init__(self, provider: str, message: str, status_code: int | None = None):
        super().__init__(f"{provider}: {message}")
        self.provider = provider
        self.status_code = status_code


def client_message(status_code: int) -> str:
    """Map a status code to its generic, non-leaking client message."""
    return CLIENT_MESSAGES.get(status_code, DEFAULT_CLIENT_MESSAGE)


def error_response(
    status_code: int,
    message: str | None = None,
    *,
    request_id: str | None = None,
    headers: Mapping[str, str] | None = None,
) -> JSONResponse:
    content: dict[str, Any] = {
        "error": message or client_message(status_code),
        "timestamp": datetime.now(timezone.utc).isoformat(),
        "request_id": request_id,
    }
    return JSONResponse(status_code=status_code, content=content, headers=dict(headers or {}))
