"""Embedding sync API endpoint."""

import asyncio

from fastapi import APIRouter, Depends, HTTPException

from app.core.auth_middleware import AuthContext, require_auth
from app.core.logging import get_logger
from app.core.schemas_todos import EmbeddingSyncSummary
from app.services.embedding_sync import sync_todo_embeddings

logger = get_logger(__name__)

router = APIRouter(tags=["embeddings"])


@router.get("/sync-embeddings", response_model=EmbeddingSyncSummary)
async def sync_embeddings(auth: AuthContext = Depends(require_auth)) -> EmbeddingSyncSummary:
    """
    Embed every todo of the caller that has no embedding yet.

    Per-todo failures are reported in `results`; re-running when nothing is
    pending returns zero counts and writes nothing.
    """
    try:
        return await asyncio.to_thread(sync_todo_embeddings, auth.user_id)
    except Exception as e:
        logger.error(f"Embedding sync failed: {e}", extra={"user_id": str(auth.user_id)})
        raise HTTPException(status_code=500, detail="Embedding sync failed")
