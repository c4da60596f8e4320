"""todo_embeddings table operations.

Each todo has one companion row holding its (nullable) embedding vector and
the todo_context payload accumulated from chat turns. The embedding stays
null until the sync job fills it; null rows are invisible to match_todos().
"""

from typing import Any
from uuid import UUID

from app.core.logging import get_logger
from app.core.schemas_todos import TodoEmbeddingRow
from app.db.supabase_client import get_supabase

logger = get_logger(__name__)

TABLE = "todo_embeddings"


def create_embedding_record(todo_id: UUID, user_id: UUID) -> None:
    """Create the companion row for a new todo, with no embedding yet."""
    supabase = get_supabase()

    supabase.table(TABLE).upsert(
        {
            "todo_id": str(todo_id),
            "user_id": str(user_id),
            "embedding": None,
        },
        on_conflict="todo_id",
    ).execute()


def reset_embedding(todo_id: UUID, user_id: UUID) -> None:
    """Null the embedding after a text edit so the next sync recomputes it."""
    supabase = get_supabase()

    (
        supabase.table(TABLE)
        .update({"embedding": None})
        .eq("todo_id", str(todo_id))
        .eq("user_id", str(user_id))
        .execute()
    )


def match_todos(
    query_embedding: list[float],
    user_id: UUID,
    match_count: int = 100,
) -> list[dict[str, Any]]:
    """
    Rank a user's embedded todos by similarity to a query vector.

    Calls the match_todos() SQL function, which only considers rows of
    user_id whose embedding is not null.

    Args:
        query_embedding: Query vector
        user_id: Owner whose todos are searched
        match_count: Max rows returned

    Returns:
        RPC rows ({todo_id, similarity, ...}) ordered by similarity desc

    Raises:
        Exception: If the RPC fails
    """
    supabase = get_supabase()

    response = supabase.rpc(
        "match_todos",
        {
            "query_embedding": query_embedding,
            "user_id_input": str(user_id),
            "match_count": match_count,
        },
    ).execute()

    rows = response.data or []
    return sorted(rows, key=lambda r: r.get("similarity") or 0.0, reverse=True)


def fetch_todo_contexts(todo_ids: list[str], user_id: UUID) -> dict[str, dict[str, Any]]:
    """
    Load the stored todo_context payload for each todo id.

    Returns:
        Map of todo_id -> context dict ({} when the row has none)
    """
    if not todo_ids:
        return {}

    supabase = get_supabase()

    response = (
        supabase.table(TABLE)
        .select("todo_id, todo_context")
        .in_("todo_id", todo_ids)
        .eq("user_id", str(user_id))
        .execute()
    )

    return {
        str(row["todo_id"]): row.get("todo_context") or {}
        for row in response.data or []
    }


def update_todo_context(todo_id: str, user_id: UUID, context: dict[str, Any]) -> None:
    """Replace (not merge) the todo_context payload of one todo."""
    supabase = get_supabase()

    (
        supabase.table(TABLE)
        .update({"todo_context": context})
        .eq("todo_id", str(todo_id))
        .eq("user_id", str(user_id))
        .execute()
    )


def list_pending_embeddings(user_id: UUID) -> list[TodoEmbeddingRow]:
    """List a user's rows whose embedding has not been computed yet."""
    supabase = get_supabase()

    response = (
        supabase.table(TABLE)
        .select("id, todo_id, todos!inner(title, notes)")
        .eq("user_id", str(user_id))
        .is_("embedding", "null")
        .execute()
    )

    return [TodoEmbeddingRow.from_row(row) for row in response.data or []]


def list_users_with_pending_embeddings() -> list[str]:
    """Distinct user ids that still have rows without an embedding."""
    supabase = get_supabase()

    response = (
        supabase.table(TABLE)
        .select("user_id")
        .is_("embedding", "null")
        .execute()
    )

    return sorted({str(row["user_id"]) for row in response.data or []})


def set_embedding(record_id: UUID, embedding: list[float]) -> None:
    """Store a computed embedding on one row."""
    supabase = get_supabase()

    supabase.table(TABLE).update({"embedding": embedding}).eq("id", str(record_id)).execute()
