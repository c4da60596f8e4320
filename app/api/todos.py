"""Todos API - CRUD for the caller's todo items.

Mutations are POSTs (the CORS policy only allows GET/POST/OPTIONS).
Creates and text edits schedule an embedding sync after the response.
DB calls are synchronous and run in a worker thread.
"""

import asyncio
from typing import List
from uuid import UUID

from fastapi import APIRouter, BackgroundTasks, Depends, HTTPException, Query

from app.core.auth_middleware import AuthContext, require_auth
from app.core.logging import get_logger
from app.core.schemas_todos import Todo, TodoCreate, TodoFilter, TodoStats, TodoUpdate
from app.db import todos as todos_db
from app.services.embedding_sync import run_sync_in_background

logger = get_logger(__name__)

router = APIRouter(prefix="/todos", tags=["todos"])


@router.get("", response_model=List[Todo])
async def list_todos(
    filter: TodoFilter = Query(TodoFilter.ALL, description="all, active or completed"),
    search: str | None = Query(None, description="Title substring"),
    auth: AuthContext = Depends(require_auth),
) -> List[Todo]:
    """List the caller's todos, newest first."""
    try:
        return await asyncio.to_thread(
            todos_db.list_todos, auth.user_id, todo_filter=filter, search=search
        )
    except Exception as e:
        logger.error(f"Failed to list todos: {e}")
        raise HTTPException(status_code=500, detail="Failed to list todos")


@router.get("/stats", response_model=TodoStats)
async def get_stats(auth: AuthContext = Depends(require_auth)) -> TodoStats:
    """Total, completed and pending counts."""
    try:
        return await asyncio.to_thread(todos_db.get_todo_stats, auth.user_id)
    except Exception as e:
        logger.error(f"Failed to load todo stats: {e}")
        raise HTTPException(status_code=500, detail="Failed to load todo stats")


@router.post("", response_model=Todo, status_code=201)
async def create_todo(
    data: TodoCreate,
    background_tasks: BackgroundTasks,
    auth: AuthContext = Depends(require_auth),
) -> Todo:
    """Create a todo and queue its embedding."""
    try:
        todo = await asyncio.to_thread(todos_db.create_todo, auth.user_id, data)
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))
    except Exception as e:
        logger.error(f"Failed to create todo: {e}")
        raise HTTPException(status_code=500, detail="Failed to create todo")

    background_tasks.add_task(run_sync_in_background, auth.user_id)
    return todo


@router.get("/{todo_id}", response_model=Todo)
async def get_todo(todo_id: UUID, auth: AuthContext = Depends(require_auth)) -> Todo:
    """Get one todo."""
    todo = await asyncio.to_thread(todos_db.get_todo, auth.user_id, todo_id)
    if not todo:
        raise HTTPException(status_code=404, detail="Todo not found")
    return todo


@router.post("/{todo_id}", response_model=Todo)
async def update_todo(
    todo_id: UUID,
    data: TodoUpdate,
    background_tasks: BackgroundTasks,
    auth: AuthContext = Depends(require_auth),
) -> Todo:
    """Update title, notes or completion. Text edits re-queue the embedding."""
    try:
        todo = await asyncio.to_thread(todos_db.update_todo, auth.user_id, todo_id, data)
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))
    except Exception as e:
        logger.error(f"Failed to update todo {todo_id}: {e}")
        raise HTTPException(status_code=500, detail="Failed to update todo")

    if not todo:
        raise HTTPException(status_code=404, detail="Todo not found")

    if data.touches_text:
        background_tasks.add_task(run_sync_in_background, auth.user_id)
    return todo


@router.post("/{todo_id}/toggle", response_model=Todo)
async def toggle_todo(todo_id: UUID, auth: AuthContext = Depends(require_auth)) -> Todo:
    """Flip the completion state."""
    try:
        todo = await asyncio.to_thread(todos_db.toggle_todo, auth.user_id, todo_id)
    except Exception as e:
        logger.error(f"Failed to toggle todo {todo_id}: {e}")
        raise HTTPException(status_code=500, detail="Failed to toggle todo")

    if not todo:
        raise HTTPException(status_code=404, detail="Todo not found")
    return todo


@router.post("/{todo_id}/delete")
async def delete_todo(todo_id: UUID, auth: AuthContext = Depends(require_auth)) -> dict:
    """Delete a todo."""
    try:
        deleted = await asyncio.to_thread(todos_db.delete_todo, auth.user_id, todo_id)
    except Exception as e:
        logger.error(f"Failed to delete todo {todo_id}: {e}")
        raise HTTPException(status_code=500, detail="Failed to delete todo")

    if not deleted:
        raise HTTPException(status_code=404, detail="Todo not found")
    return {"deleted": True, "id": str(todo_id)}
