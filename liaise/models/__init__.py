from liaise.models.base import Base, TimestampMixin
from liaise.models.feedback import Feedback
from liaise.models.profile import Profile
from liaise.models.settings import (
    CUSTOM_TEMPLATE_KEY,
    TemplatePreset,
    UserCustomTemplate,
    UserSettings,
)
from liaise.models.summary import PatientAccessToken, Summary
from liaise.models.transcription import Transcription

__all__ = [
    # Base
    "Base",
    "TimestampMixin",
    # Core Models
    "Summary",
    "PatientAccessToken",
    "Transcription",
    "Feedback",
    "Profile",
    # Settings Models
    "TemplatePreset",
    "UserCustomTemplate",
    "UserSettings",
    # Constants
    "CUSTOM_TEMPLATE_KEY",
]
