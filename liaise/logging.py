"""Logging configuration for the application."""

from __future__ import annotations

import contextvars
import json
import logging
from datetime import datetime, timezone
from typing import Any, Literal

from liaise.config import settings

request_id_var: contextvars.ContextVar[str | None] = contextvars.ContextVar(
    "request_id",
    default=None,
)

SecurityEventType = Literal[
    "auth_failure",
    "rate_limit",
    "validation_error",
    "unauthorized_access",
]

security_logger = logging.getLogger("liaise.security")


class RequestIdFilter(logging.Filter):
    """Attach request_id from contextvars to log records."""

    def filter(self, record: logging.LogRecord) -> bool:
        if not hasattr(record, "request_id"):
            record.request_id = request_id_var.get() or "-"
        else:
            record.request_id = record.request_id or request_id_var.get() or "-"
        return True


def configure_logging() -> None:
    """Configure structured logging for the service."""
    factory = logging.getLogRecordFactory()

    def record_factory(*args, **kwargs):
        record = factory(*args, **kwargs)
        if not hasattr(record, "request_id"):
            record.request_id = request_id_var.get() or "-"
        return record

    logging.setLogRecordFactory(record_factory)
    logging.basicConfig(
        level=getattr(logging, settings.log_level.upper(), logging.INFO),
        format="%(asctime)s %(levelname)s %(name)s %(message)s request_id=%(request_id)s",
    )
    root_logger = logging.getLogger()
    root_logger.addFilter(RequestIdFilter())
    for handler in root_logger.handlers:
        handler.addFilter(RequestIdFilter())


def log_security_event(
    event_type: SecurityEventType,
    *,
    user_id: str | None = None,
    ip: str | None = None,
    user_agent: str | None = None,
    details: Any = None,
) -> None:
    """Emit a single-line JSON record for security monitoring."""
    payload = {
        "type": event_type,
        "userId": user_id,
        "ip": ip,
        "userAgent": user_agent,
        "timestamp": datetime.now(timezone.utc).isoformat(),
        "details": details,
    }
    security_logger.warning("SECURITY_EVENT: %s", json.dumps(payload, default=str))
