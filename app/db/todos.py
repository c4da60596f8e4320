"""Database operations for todos."""

from datetime import datetime, timezone
from typing import Any, Optional
from uuid import UUID

from app.core.logging import get_logger
from app.core.schemas_todos import (
    CandidateTodo,
    Todo,
    TodoCreate,
    TodoFilter,
    TodoStats,
    TodoUpdate,
)
from app.db.supabase_client import get_supabase
from app.db.todo_embeddings import create_embedding_record, match_todos, reset_embedding

logger = get_logger(__name__)

TABLE = "todos"


def _now_iso() -> str:
    return datetime.now(timezone.utc).isoformat()


# ============================================================================
# Reads
# ============================================================================


def list_todos(
    user_id: UUID,
    todo_filter: TodoFilter = TodoFilter.ALL,
    search: Optional[str] = None,
) -> list[Todo]:
    """
    List a user's todos, newest first.

    Args:
        user_id: Owner
        todo_filter: all, active (not completed) or completed
        search: Optional case-insensitive title substring

    Returns:
        List of Todo
    """
    supabase = get_supabase()

    query = supabase.table(TABLE).select("*").eq("user_id", str(user_id))

    if todo_filter == TodoFilter.ACTIVE:
        query = query.eq("is_completed", False)
    elif todo_filter == TodoFilter.COMPLETED:
        query = query.eq("is_completed", True)

    if search and search.strip():
        query = query.ilike("title", f"%{search.strip()}%")

    response = query.order("created_at", desc=True).execute()
    return [Todo(**row) for row in response.data or []]


def get_todo(user_id: UUID, todo_id: UUID) -> Optional[Todo]:
    """Get one todo, or None when it doesn't exist or belongs to someone else."""
    supabase = get_supabase()

    response = (
        supabase.table(TABLE)
        .select("*")
        .eq("id", str(todo_id))
        .eq("user_id", str(user_id))
        .limit(1)
        .execute()
    )

    if not response.data:
        return None
    return Todo(**response.data[0])


def get_todo_stats(user_id: UUID) -> TodoStats:
    """Count a user's todos by completion state."""
    supabase = get_supabase()

    total = (
        supabase.table(TABLE)
        .select("id", count="exact", head=True)
        .eq("user_id", str(user_id))
        .execute()
    ).count or 0

    completed = (
        supabase.table(TABLE)
        .select("id", count="exact", head=True)
        .eq("user_id", str(user_id))
        .eq("is_completed", True)
        .execute()
    ).count or 0

    return TodoStats(total=total, completed=completed, pending=total - completed)


def list_todos_by_ids(user_id: UUID, todo_ids: list[str]) -> dict[str, dict[str, Any]]:
    """Fetch full todo rows for the given ids, keyed by id."""
    if not todo_ids:
        return {}

    supabase = get_supabase()

    response = (
        supabase.table(TABLE)
        .select("*")
        .in_("id", todo_ids)
        .eq("user_id", str(user_id))
        .execute()
    )

    return {str(row["id"]): row for row in response.data or []}


def fetch_similar_todos(
    query_embedding: list[float],
    user_id: UUID,
    match_count: int = 100,
) -> list[CandidateTodo]:
    """
    Similarity-ranked candidates joined with their full todo rows.

    Ranked matches without a full row (deleted in between, or not owned by
    user_id) are dropped. RPC order is preserved.
    """
    matches = match_todos(query_embedding, user_id, match_count)
    if not matches:
        return []

    ids = [str(m["todo_id"]) for m in matches]
    rows = list_todos_by_ids(user_id, ids)

    candidates = []
    for match in matches:
        row = rows.get(str(match["todo_id"]))
        if not row:
            continue
        candidates.append(CandidateTodo(**row, similarity=match.get("similarity") or 0.0))

    return candidates


def fetch_all_candidates(user_id: UUID) -> list[CandidateTodo]:
    """Every todo of the user as a candidate with similarity 1.0, newest first."""
    return [
        CandidateTodo(**todo.model_dump(), similarity=1.0)
        for todo in list_todos(user_id)
    ]


def fetch_candidates_in_date_range(
    user_id: UUID,
    start: datetime,
    end: datetime,
) -> list[CandidateTodo]:
    """Todos created within [start, end] (inclusive), similarity 1.0, newest first."""
    supabase = get_supabase()

    response = (
        supabase.table(TABLE)
        .select("*")
        .eq("user_id", str(user_id))
        .gte("created_at", start.isoformat())
        .lte("created_at", end.isoformat())
        .order("created_at", desc=True)
        .execute()
    )

    return [CandidateTodo(**row, similarity=1.0) for row in response.data or []]


# ============================================================================
# Writes
# ============================================================================


def create_todo(user_id: UUID, data: TodoCreate) -> Todo:
    """
    Insert a todo and its empty embedding record.

    Raises:
        ValueError: If the title is blank or no row is returned
    """
    title = data.title.strip()
    if not title:
        raise ValueError("Title is required")

    supabase = get_supabase()
    now = _now_iso()

    row = {
        "user_id": str(user_id),
        "title": title,
        "notes": (data.notes or "").strip() or None,
        "is_completed": False,
        "created_at": now,
        "updated_at": now,
    }

    response = supabase.table(TABLE).insert(row).execute()
    if not response.data:
        raise ValueError("No data returned from create_todo")

    todo = Todo(**response.data[0])
    create_embedding_record(todo.id, user_id)

    logger.info(f"Created todo {todo.id}", extra={"user_id": str(user_id)})
    return todo


def update_todo(user_id: UUID, todo_id: UUID, data: TodoUpdate) -> Optional[Todo]:
    """
    Apply a partial update and bump updated_at.

    Title or notes edits reset the embedding so the todo is re-indexed.

    Returns:
        Updated Todo, or None if the todo doesn't exist for this user

    Raises:
        ValueError: If the new title is blank
    """
    updates: dict[str, Any] = {}
    if data.title is not None:
        title = data.title.strip()
        if not title:
            raise ValueError("Title is required")
        updates["title"] = title
    if data.notes is not None:
        updates["notes"] = data.notes.strip() or None
    if data.is_completed is not None:
        updates["is_completed"] = data.is_completed

    if not updates:
        return get_todo(user_id, todo_id)

    updates["updated_at"] = _now_iso()

    supabase = get_supabase()
    response = (
        supabase.table(TABLE)
        .update(updates)
        .eq("id", str(todo_id))
        .eq("user_id", str(user_id))
        .execute()
    )

    if not response.data:
        return None

    if data.touches_text:
        reset_embedding(todo_id, user_id)

    return Todo(**response.data[0])


def toggle_todo(user_id: UUID, todo_id: UUID) -> Optional[Todo]:
    """Flip completion state. Returns None when the todo isn't found."""
    todo = get_todo(user_id, todo_id)
    if not todo:
        return None
    return update_todo(user_id, todo_id, TodoUpdate(is_completed=not todo.is_completed))


def delete_todo(user_id: UUID, todo_id: UUID) -> bool:
    """Delete a todo. Its embedding record goes with it (FK cascade)."""
    supabase = get_supabase()

    response = (
        supabase.table(TABLE)
        .delete()
        .eq("id", str(todo_id))
        .eq("user_id", str(user_id))
        .execute()
    )

    deleted = bool(response.data)
    if deleted:
        logger.info(f"Deleted todo {todo_id}", extra={"user_id": str(user_id)})
    return deleted
