from typing import Literal

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class CamelModel(BaseModel):
    """Accepts and emits camelCase keys while exposing snake_case attributes."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class ChatTurn(CamelModel):
    """One message of a summary chat transcript."""

    role: Literal["user", "assistant"]
    content: str = Field(..., min_length=1, max_length=100_000)


class SuccessResponse(CamelModel):
    success: bool = True
