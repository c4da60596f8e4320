"""Assemble the text context and message list for a todo chat turn.

The completion model only sees todos enumerated here, so the block is
deterministic for a given candidate list, stats and clock.
"""

from datetime import datetime, timezone
from typing import Optional

from app.core.schemas_chat import ChatHistoryEntry
from app.core.schemas_todos import CandidateTodo, TodoStats

SYSTEM_PROMPT = """You are a Todo Assistant using AI semantic search.
RULES:
1. Use STATS for counts
2. Only reference listed todos from the provided sections
3. Never invent titles
4. UPDATED TASKS section contains tasks that were modified after creation (updated_at != created_at)
5. NOT UPDATED TASKS section contains tasks that were never modified (updated_at = created_at or null)
6. When user asks "what are updated tasks" or "show updated tasks", ONLY use tasks from UPDATED TASKS section
7. When user asks about tasks that haven't been updated, use NOT UPDATED TASKS section
8. COMPLETED and PENDING sections show task completion status
9. Use conversation history for context (understand "those", "them", "the first one")
10. Be concise and accurate
11. Always check which section a task is in before answering
12. If UPDATED TASKS section is empty, clearly state "No tasks have been updated"
13. [UPDATED] marker means the task was modified, [NOT UPDATED] means it wasn't
Current time is provided. Compare dates to answer "today", "yesterday", etc.
Showing {shown} of {total} todos."""


def format_timestamp(value: Optional[datetime]) -> str:
    """Render a timestamp in UTC; naive values are taken as UTC."""
    if value is None:
        return "Never"
    if value.tzinfo is None:
        value = value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc).strftime("%Y-%m-%d %H:%M:%S UTC")


def format_todo_line(todo: CandidateTodo, index: int, include_match: bool = True) -> str:
    """One enumerated todo line. `index` is zero-based."""
    notes = f" | Notes: {todo.notes}" if todo.notes else ""
    updated = format_timestamp(todo.updated_at) if todo.updated_at else "Never"
    match = f" [{todo.similarity * 100:.1f}%]" if include_match else ""
    marker = " [UPDATED]" if todo.was_updated else " [NOT UPDATED]"
    return (
        f'{index + 1}. "{todo.title}" | Created: {format_timestamp(todo.created_at)}'
        f" | Updated: {updated}{notes}{match}{marker}"
    )


def _section(
    title: str,
    todos: list[CandidateTodo],
    empty_text: str,
    include_match: bool,
) -> str:
    if todos:
        body = "\n".join(format_todo_line(t, i, include_match) for i, t in enumerate(todos))
    else:
        body = empty_text
    return f"{title} ({len(todos)}):\n{body}"


def build_context_block(
    candidates: list[CandidateTodo],
    stats: TodoStats,
    now: datetime,
    include_match: bool = True,
) -> str:
    """
    Build the context text sent alongside the question.

    Args:
        candidates: Retrieved todos in rank order
        stats: Aggregate counts over all of the user's todos
        now: Current time (rendered as CURRENT)
        include_match: Show the similarity percentage (similarity retrieval only)

    Returns:
        Context block text
    """
    updated = [t for t in candidates if t.was_updated]
    not_updated = [t for t in candidates if not t.was_updated]
    completed = [t for t in candidates if t.is_completed]
    pending = [t for t in candidates if not t.is_completed]

    sections = [
        f"CURRENT: {format_timestamp(now)}\n"
        f"STATS: Total={stats.total} | Completed={stats.completed} | Pending={stats.pending}",
        _section("UPDATED TASKS", updated, "No updated tasks found", include_match),
        _section("NOT UPDATED TASKS", not_updated, "All tasks have been updated", include_match),
        _section("COMPLETED", completed, "None", include_match),
        _section("PENDING", pending, "None", include_match),
    ]
    return "\n\n".join(sections)


def build_chat_messages(
    query: str,
    context_block: str,
    history: list[ChatHistoryEntry],
    shown: int,
    total: int,
) -> list[dict[str, str]]:
    """
    Order matters: system prompt, then prior turns oldest first, then the
    fresh context with the question.
    """
    messages = [{"role": "system", "content": SYSTEM_PROMPT.format(shown=shown, total=total)}]

    for turn in history:
        messages.append({"role": "user", "content": turn.query})
        messages.append({"role": "assistant", "content": turn.response})

    messages.append({"role": "user", "content": f"{context_block}\n\nQ: {query}"})
    return messages
