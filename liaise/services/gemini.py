"""Google Gemini client: file upload, activation polling and content generation."""

from __future__ import annotations

import asyncio
import io
import logging
from collections.abc import Awaitable, Callable

import httpx
from google import genai
from google.genai import errors as genai_errors
from google.genai import types

from liaise.config import settings
from liaise.errors import UpstreamServiceError

logger = logging.getLogger("liaise.gemini")

FILE_STATE_ACTIVE = "ACTIVE"
FILE_STATE_FAILED = "FAILED"


def file_state(uploaded: types.File) -> str:
    state = uploaded.state
    if state is None:
        return ""
    return str(getattr(state, "value", state))


class GeminiService:
    """Wraps the async surface of a ``google.genai.Client``."""

    def __init__(
        self,
        client: genai.Client,
        *,
        model: str | None = None,
        poll_interval: float | None = None,
        max_poll_attempts: int | None = None,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
    ):
        self.client = client
        self.model = model or settings.gemini_model
        self.poll_interval = (
            settings.gemini_file_poll_interval_seconds if poll_interval is None else poll_interval
        )
        self.max_poll_attempts = max_poll_attempts or settings.gemini_file_poll_max_attempts
        self._sleep = sleep

    async def _call(self, operation: str, awaitable: Awaitable):
        try:
            return await awaitable
        except genai_errors.APIError as exc:
            logger.error("Gemini %s failed with %s: %s", operation, exc.code, exc.message)
            raise UpstreamServiceError(
                "gemini", f"{operation} failed: HTTP {exc.code}", status_code=exc.code
            ) from exc
        except httpx.HTTPError as exc:
            raise UpstreamServiceError("gemini", f"{operation} request failed: {exc}") from exc

    async def upload_file(self, data: bytes, mime_type: str, display_name: str) -> types.File:
        uploaded = await self._call(
            "upload",
            self.client.aio.files.upload(
                file=io.BytesIO(data),
                config=types.UploadFileConfig(mime_type=mime_type, display_name=display_name),
            ),
        )
        if not uploaded.name or not uploaded.uri:
            raise UpstreamServiceError("gemini", "upload returned no file reference")
        logger.info(
            "Uploaded %s to Gemini as %s (%s)", display_name, uploaded.name, file_state(uploaded)
        )
        return uploaded

    async def get_file(self, name: str) -> types.File:
        return await self._call("file lookup", self.client.aio.files.get(name=name))

    async def wait_until_active(self, uploaded: types.File) -> types.File:
        """Poll the file until it is ACTIVE, giving up after ``max_poll_attempts``."""
        current = uploaded
        for attempt in range(1, self.max_poll_attempts + 1):
            state = file_state(current)
            if state == FILE_STATE_ACTIVE:
                return current
            if state == FILE_STATE_FAILED:
                raise UpstreamServiceError("gemini", f"file {current.name} failed processing")
            logger.debug(
                "Gemini file %s is %s (attempt %d/%d)",
                current.name,
                state or "UNKNOWN",
                attempt,
                self.max_poll_attempts,
            )
            await self._sleep(self.poll_interval)
            current = await self.get_file(current.name)
        if file_state(current) == FILE_STATE_ACTIVE:
            return current
        raise UpstreamServiceError(
            "gemini",
            f"file {current.name} not active after {self.max_poll_attempts} attempts",
        )

    async def generate(self, prompt: str, uploaded: types.File | None = None) -> str:
        contents: list = []
        if uploaded is not None:
            contents.append(types.Part.from_uri(file_uri=uploaded.uri, mime_type=uploaded.mime_type))
        contents.append(prompt)

        response = await self._call(
            "generation",
            self.client.aio.models.generate_content(
                model=self.model,
                contents=contents,
                config=types.GenerateContentConfig(
                    temperature=settings.gemini_temperature,
                    top_k=40,
                    top_p=0.95,
                    max_output_tokens=settings.gemini_max_output_tokens,
                ),
            ),
        )
        text = response.text
        if not text or not text.strip():
            raise UpstreamServiceError("gemini", "empty generation")
        return text


def get_gemini_service() -> GeminiService:
    """FastAPI dependency returning a Gemini client."""
    if not settings.google_ai_api_key:
        raise UpstreamServiceError("gemini", "GOOGLE_AI_API_KEY is not configured")
    client = genai.Client(
        api_key=settings.google_ai_api_key,
        http_options=types.HttpOptions(timeout=int(settings.provider_timeout_seconds * 1000)),
    )
    return GeminiService(client)
