"""Per-todo chat context tracking.

After each chat turn the top-ranked todos record the query that surfaced
them: their rank, similarity, the neighbours they were matched with and
the stats at that moment. The stored payload is rebuilt from scratch on
every write (unknown keys are dropped) and its query history is capped,
newest first.
"""

from datetime import datetime
from typing import Any
from uuid import UUID

from dateutil import parser as dateutil_parser
from pydantic import ValidationError

from app.core.logging import get_logger
from app.core.schemas_chat import (
    CoMatchedTodo,
    QueryHistoryEntry,
    StatsAtQuery,
    TodoContextPayload,
)
from app.core.schemas_todos import CandidateTodo, TodoStats
from app.db.todo_embeddings import update_todo_context

logger = get_logger(__name__)

_REQUIRED_ENTRY_KEYS = ("my_rank", "co_matched_todos", "my_todo_id")


def load_query_history(existing: dict[str, Any]) -> list[QueryHistoryEntry]:
    """Valid query history entries from a stored payload; legacy shapes are discarded."""
    raw = existing.get("query_history")
    if not isinstance(raw, list):
        return []

    entries = []
    for item in raw:
        if not isinstance(item, dict) or any(k not in item for k in _REQUIRED_ENTRY_KEYS):
            continue
        try:
            entries.append(QueryHistoryEntry.model_validate(item))
        except ValidationError:
            continue
    return entries


def _parse_timestamp(value: Any) -> datetime | None:
    if not value:
        return None
    if isinstance(value, datetime):
        return value
    try:
        return dateutil_parser.isoparse(str(value))
    except (ValueError, OverflowError):
        return None


def co_matched_for(current: CandidateTodo, candidates: list[CandidateTodo]) -> list[CoMatchedTodo]:
    """The other candidates, closest similarity first."""
    others = [
        CoMatchedTodo(
            todo_id=t.id,
            title=t.title,
            similarity_diff=abs(t.similarity - current.similarity),
        )
        for t in candidates
        if t.id != current.id
    ]
    return sorted(others, key=lambda c: c.similarity_diff)


def build_context_update(
    existing: dict[str, Any],
    candidates: list[CandidateTodo],
    index: int,
    query: str,
    stats: TodoStats,
    now: datetime,
    history_limit: int = 10,
) -> TodoContextPayload:
    """
    Build the replacement context payload for candidates[index].

    Args:
        existing: Stored todo_context ({} if none)
        candidates: All candidates of the turn, in rank order
        index: Zero-based rank of the todo being updated
        query: The chat question
        stats: User stats at query time
        now: Turn timestamp
        history_limit: Max query history entries kept

    Returns:
        New TodoContextPayload
    """
    current = candidates[index]
    history = load_query_history(existing)

    entry = QueryHistoryEntry(
        query=query,
        timestamp=now,
        my_rank=index + 1,
        my_similarity=current.similarity,
        my_todo_id=current.id,
        my_title=current.title,
        co_matched_todos=co_matched_for(current, candidates),
        stats_at_query=StatsAtQuery(
            total_todos=stats.total,
            completed_todos=stats.completed,
            pending_todos=stats.pending,
            results_returned=len(candidates),
        ),
    )

    query_history = [entry, *history][: max(history_limit, 1)]
    times_queried = existing.get("times_queried") or 0
    if not isinstance(times_queried, int):
        times_queried = 0

    return TodoContextPayload(
        query_history=query_history,
        times_queried=times_queried + 1,
        first_queried_at=_parse_timestamp(existing.get("first_queried_at")) or now,
        last_queried_at=now,
        avg_rank=round(sum(e.my_rank for e in query_history) / len(query_history), 2),
    )


def update_todo_contexts(
    candidates: list[CandidateTodo],
    query: str,
    context_map: dict[str, dict[str, Any]],
    user_id: UUID,
    stats: TodoStats,
    now: datetime,
    limit: int = 10,
    history_limit: int = 10,
) -> int:
    """
    Write back context payloads for the top `limit` candidates.

    Rows are written independently; a failing row is logged and skipped.

    Returns:
        Number of rows written
    """
    written = 0
    for index in range(min(limit, len(candidates))):
        todo = candidates[index]
        try:
            payload = build_context_update(
                context_map.get(str(todo.id), {}),
                candidates,
                index,
                query,
                stats,
                now,
                history_limit=history_limit,
            )
            update_todo_context(str(todo.id), user_id, payload.model_dump(mode="json"))
            written += 1
        except Exception as e:
            logger.warning(f"Failed to update context for todo {todo.id}: {e}")

    return written
