"""Thin async wrapper around the OpenAI chat and transcription endpoints.

Provider failures are converted into ``UpstreamServiceError`` so routes have
one error path. Calls are never retried here.
"""

import logging
from collections.abc import Sequence
from functools import lru_cache

from openai import AsyncOpenAI, OpenAIError

from liaise.config import settings
from liaise.errors import UpstreamServiceError

logger = logging.getLogger("liaise.openai")

ChatMessage = dict[str, str]


class OpenAIService:
    def __init__(self, client: AsyncOpenAI):
        self.client = client

    async def chat(
        self,
        messages: Sequence[ChatMessage],
        *,
        model: str | None = None,
        temperature: float | None = None,
    ) -> str:
        """Run one chat completion and return the first choice's text."""
        try:
            completion = await self.client.chat.completions.create(
                model=model or settings.openai_chat_model,
                messages=list(messages),
                temperature=(
                    settings.openai_chat_temperature if temperature is None else temperature
                ),
            )
        except OpenAIError as exc:
            logger.error("OpenAI chat completion failed: %s", exc)
            raise UpstreamServiceError("openai", str(exc)) from exc

        if not completion.choices:
            raise UpstreamServiceError("openai", "completion returned no choices")
        content = completion.choices[0].message.content
        if not content or not content.strip():
            raise UpstreamServiceError("openai", "completion returned empty content")
        return content

    async def transcribe(
        self,
        audio: bytes,
        *,
        filename: str = "audio.webm",
        content_type: str = "audio/webm",
    ) -> str:
        """Send raw audio to the speech-to-text endpoint."""
        try:
            result = await self.client.audio.transcriptions.create(
                model=settings.openai_transcription_model,
                file=(filename, audio, content_type),
            )
        except OpenAIError as exc:
            logger.error("OpenAI transcription failed: %s", exc)
            raise UpstreamServiceError("openai", str(exc)) from exc
        return result.text


@lru_cache()
def _build_service(api_key: str) -> OpenAIService:
    return OpenAIService(
        AsyncOpenAI(api_key=api_key, timeout=settings.provider_timeout_seconds, max_retries=0)
    )


def get_openai_service() -> OpenAIService:
    """FastAPI dependency returning the shared OpenAI wrapper."""
    if not settings.openai_api_key:
        raise UpstreamServiceError("openai", "OPENAI_API_KEY is not configured")
    return _build_service(settings.openai_api_key)
