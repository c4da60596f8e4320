"""ai_chat_history table operations (append-only)."""

from datetime import datetime, timezone
from uuid import UUID

from app.core.logging import get_logger
from app.core.schemas_chat import ChatHistoryEntry, ChatMessage
from app.db.supabase_client import get_supabase

logger = get_logger(__name__)

TABLE = "ai_chat_history"


def fetch_recent_history(user_id: UUID, limit: int = 5) -> list[ChatHistoryEntry]:
    """
    Most recent chat turns of a user, oldest first.

    Args:
        user_id: Owner
        limit: Number of turns to return

    Returns:
        Up to `limit` entries in chronological order
    """
    supabase = get_supabase()

    response = (
        supabase.table(TABLE)
        .select("query, response, created_at")
        .eq("user_id", str(user_id))
        .order("created_at", desc=True)
        .limit(limit)
        .execute()
    )

    entries = [ChatHistoryEntry(**row) for row in response.data or []]
    entries.reverse()
    return entries


def save_chat_turn(user_id: UUID, query: str, response_text: str) -> None:
    """
    Append one question/answer turn.

    Raises:
        Exception: If the insert fails
    """
    supabase = get_supabase()

    try:
        supabase.table(TABLE).insert(
            {
                "user_id": str(user_id),
                "query": query,
                "response": response_text,
                "created_at": datetime.now(timezone.utc).isoformat(),
            }
        ).execute()
    except Exception as e:
        logger.error(f"Failed to save chat turn: {e}", extra={"user_id": str(user_id)})
        raise


def list_chat_messages(user_id: UUID, limit: int = 20) -> list[ChatMessage]:
    """Expand the last `limit` turns into user/assistant messages, chronological."""
    messages: list[ChatMessage] = []
    for entry in fetch_recent_history(user_id, limit=limit):
        messages.append(ChatMessage(role="user", content=entry.query, timestamp=entry.created_at))
        messages.append(
            ChatMessage(role="assistant", content=entry.response, timestamp=entry.created_at)
        )
    return messages
