"""API Routes for Liaise."""

from liaise.api import (
    chat,
    delivery,
    feedback,
    health,
    portal,
    settings,
    summaries,
    transcriptions,
)

__all__ = [
    "chat",
    "delivery",
    "feedback",
    "health",
    "portal",
    "settings",
    "summaries",
    "transcriptions",
]
