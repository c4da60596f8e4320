"""Todo chat assistant API endpoints."""

import asyncio
from typing import List
from uuid import UUID

from fastapi import APIRouter, Depends, HTTPException, Query, status
from fastapi.responses import JSONResponse

from app.core.auth_middleware import AuthContext, require_auth
from app.core.chat_pipeline import run_todo_chat
from app.core.config import get_settings
from app.core.logging import get_logger
from app.core.schemas_chat import ChatMessage, TodoChatRequest, TodoChatResponse
from app.db.chat_history import list_chat_messages

logger = get_logger(__name__)

router = APIRouter(prefix="/todo-chat", tags=["todo-chat"])


@router.post("", response_model=TodoChatResponse)
async def todo_chat(
    request: TodoChatRequest,
    auth: AuthContext = Depends(require_auth),
) -> JSONResponse:
    """
    Answer a question about the caller's todos.

    Returns {"reply": ...}. Upstream failures come back as a generic reply
    with status 500; a user without indexed todos gets guidance to run the
    embedding sync instead of an answer.
    """
    try:
        same_user = UUID(request.user_id) == auth.user_id
    except ValueError:
        same_user = False

    if not same_user:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="user_id does not match the authenticated user",
        )

    result = await run_todo_chat(auth.user_id, request.query)

    return JSONResponse(
        content=TodoChatResponse(reply=result.reply).model_dump(),
        status_code=result.status_code,
    )


@router.get("/history", response_model=List[ChatMessage])
async def get_chat_history(
    limit: int | None = Query(None, ge=1, le=100, description="Number of turns"),
    auth: AuthContext = Depends(require_auth),
) -> List[ChatMessage]:
    """The caller's recent chat transcript, oldest message first."""
    settings = get_settings()

    try:
        return await asyncio.to_thread(
            list_chat_messages,
            auth.user_id,
            limit=limit or settings.CHAT_HISTORY_DISPLAY_LIMIT,
        )
    except Exception as e:
        logger.error(f"Failed to load chat history: {e}", extra={"user_id": str(auth.user_id)})
        raise HTTPException(status_code=500, detail="Failed to load chat history")
