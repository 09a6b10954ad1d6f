"""Question answering restricted to a single summary's content."""

import logging
from typing import Annotated

from fastapi import APIRouter, Depends, HTTPException, status

from liaise.api.deps import PUBLIC, CurrentUser, get_optional_user
from liaise.schemas.chat import ChatRequest, ChatResponse
from liaise.services.openai_client import OpenAIService, get_openai_service
from liaise.services.templates import build_chat_system_prompt

router = APIRouter(tags=["Chat"], dependencies=PUBLIC)
logger = logging.getLogger("liaise.chat")


@router.post("/chat-with-summary", response_model=ChatResponse)
async def chat_with_summary(
    payload: ChatRequest,
    openai: Annotated[OpenAIService, Depends(get_openai_service)],
    current_user: Annotated[CurrentUser | None, Depends(get_optional_user)],
):
    """Answer a question about a summary.

    Patients reach this from the portal with ``isPublic``; every other caller
    must be signed in. Nothing is persisted here.
    """
    if not payload.is_public and current_user is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Authentication required for non-public chat",
            headers={"WWW-Authenticate": "Bearer"},
        )

    messages = [{"role": "system", "content": build_chat_system_prompt(payload.summary_content)}]
    messages.extend({"role": turn.role, "content": turn.content} for turn in payload.chat_history)
    messages.append({"role": "user", "content": payload.user_message})

    reply = await openai.chat(messages)
    return ChatResponse(reply=reply)
