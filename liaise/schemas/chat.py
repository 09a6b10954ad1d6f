"""Schemas for the summary chat assistant."""

from pydantic import Field

from liaise.schemas.common import CamelModel, ChatTurn


class ChatRequest(CamelModel):
    summary_content: str = Field(..., min_length=1, max_length=100_000)
    user_message: str = Field(..., min_length=1, max_length=2000)
    chat_history: list[ChatTurn] = Field(default_factory=list, max_length=100)
    is_public: bool = False


class ChatResponse(CamelModel):
    reply: str
