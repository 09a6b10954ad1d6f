"""Schemas for patient feedback and global statistics."""

from uuid import UUID

from pydantic import Field, field_validator

from liaise.schemas.common import CamelModel


class FeedbackRatings(CamelModel):
    """Ratings are optional; 0 means the question was skipped."""

    overall: int | None = Field(None, ge=0, le=5)
    clarity: int | None = Field(None, ge=0, le=5)
    usefulness: int | None = Field(None, ge=0, le=5)
    accuracy: int | None = Field(None, ge=0, le=5)
    recommendation: int | None = Field(None, ge=0, le=10)

    @field_validator("*")
    @classmethod
    def zero_is_unanswered(cls, value: int | None) -> int | None:
        return value or None


class SubmitFeedbackRequest(CamelModel):
    session_id: str = Field(..., min_length=1, max_length=64)
    summary_id: UUID | None = None
    ratings: FeedbackRatings = Field(default_factory=FeedbackRatings)
    open_feedback: str | None = Field(None, max_length=5000)


class SubmitFeedbackResponse(CamelModel):
    success: bool = True
    feedback_id: UUID


class GlobalStats(CamelModel):
    total_summaries: int
    patients_impacted: int
    average_rating: float | None
    providers_using_liaise: int
