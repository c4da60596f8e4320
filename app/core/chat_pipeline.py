"""Retrieval-augmented todo chat pipeline.

One turn is a straight chain of calls with no retries:

    history -> classify -> (date range | all todos | embed + match_todos)
    -> stats -> context block -> completion -> history append
    -> per-todo context write-back

Every argument is request-scoped; nothing is kept between turns. Supabase
calls are synchronous, so each one runs in a worker thread to keep the
event loop free for other requests.
"""

import asyncio
import logging
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Optional
from uuid import UUID

from app.chains.answer_todo_question import complete_chat
from app.chains.parse_date_range import DateRangeParseError, parse_date_range
from app.core.config import get_settings
from app.core.context_tracking import update_todo_contexts
from app.core.embeddings import embed_query_async
from app.core.logging import get_logger, log_with_context
from app.core.query_classifier import classify_query, has_metadata_intent
from app.core.schemas_chat import QueryIntent
from app.core.schemas_todos import CandidateTodo
from app.core.todo_context import build_chat_messages, build_context_block
from app.db.chat_history import fetch_recent_history, save_chat_turn
from app.db.todo_embeddings import fetch_todo_contexts
from app.db.todos import (
    fetch_all_candidates,
    fetch_candidates_in_date_range,
    fetch_similar_todos,
    get_todo_stats,
)

logger = get_logger(__name__)

GENERIC_FAILURE_REPLY = "Something went wrong."

NO_INDEXED_TODOS_REPLY = (
    "No indexed todos found!\n\n"
    "Your todos need embeddings to be searchable. Please click 'Generate Embeddings' "
    "or wait a moment and try again."
)


@dataclass
class ChatTurnResult:
    """Outcome of one chat turn."""

    reply: str
    status_code: int = 200
    intent: Optional[QueryIntent] = None
    candidates: int = 0
    completed: bool = False


@dataclass
class Retrieval:
    candidates: list[CandidateTodo]
    intent: QueryIntent
    include_match: bool


async def retrieve_candidates(
    user_id: UUID,
    query: str,
    now: datetime,
) -> Optional[Retrieval]:
    """
    Select the todos a question is answered from.

    Returns:
        Retrieval, or None when similarity search has nothing indexed
        (embedding failed or no todo has an embedding yet). The date-range
        and metadata paths read todos directly and never return None, so
        their questions are answered whether or not embeddings exist.
    """
    settings = get_settings()
    intent = classify_query(query)

    if intent == QueryIntent.DATE_RANGE:
        try:
            date_range = await parse_date_range(query, now)
        except DateRangeParseError:
            date_range = None

        if date_range:
            candidates = await asyncio.to_thread(
                fetch_candidates_in_date_range, user_id, date_range.start, date_range.end
            )
            return Retrieval(candidates, QueryIntent.DATE_RANGE, include_match=False)

        intent = QueryIntent.METADATA if has_metadata_intent(query) else QueryIntent.SEMANTIC

    if intent == QueryIntent.METADATA:
        candidates = await asyncio.to_thread(fetch_all_candidates, user_id)
        return Retrieval(candidates, QueryIntent.METADATA, include_match=False)

    embedding = await embed_query_async(query)
    if not embedding:
        return None

    candidates = await asyncio.to_thread(
        fetch_similar_todos, embedding, user_id, settings.MATCH_COUNT
    )
    if not candidates:
        return None

    return Retrieval(candidates, QueryIntent.SEMANTIC, include_match=True)


async def run_todo_chat(
    user_id: UUID,
    query: str,
    now: Optional[datetime] = None,
) -> ChatTurnResult:
    """
    Answer one todo chat question.

    Upstream failures never escape: they are logged and turned into the
    generic reply with status 500.

    Args:
        user_id: Authenticated owner
        query: The question
        now: Turn time (defaults to current UTC time)

    Returns:
        ChatTurnResult
    """
    settings = get_settings()
    now = now or datetime.now(timezone.utc)

    try:
        history = await asyncio.to_thread(
            fetch_recent_history, user_id, limit=settings.CHAT_HISTORY_TURNS
        )

        retrieval = await retrieve_candidates(user_id, query, now)
        if retrieval is None:
            log_with_context(
                logger, logging.INFO, "No indexed todos for chat turn", user_id=str(user_id)
            )
            return ChatTurnResult(reply=NO_INDEXED_TODOS_REPLY, intent=QueryIntent.SEMANTIC)

        candidates = retrieval.candidates
        context_map = await asyncio.to_thread(
            fetch_todo_contexts, [str(t.id) for t in candidates], user_id
        )
        stats = await asyncio.to_thread(get_todo_stats, user_id)

        context_block = build_context_block(
            candidates, stats, now, include_match=retrieval.include_match
        )
        messages = build_chat_messages(
            query, context_block, history, shown=len(candidates), total=stats.total
        )

        reply = await complete_chat(messages)

        await asyncio.to_thread(save_chat_turn, user_id, query, reply)

        updated = await asyncio.to_thread(
            update_todo_contexts,
            candidates,
            query,
            context_map,
            user_id,
            stats,
            now,
            limit=settings.CONTEXT_UPDATE_LIMIT,
            history_limit=settings.CONTEXT_HISTORY_LIMIT,
        )

        log_with_context(
            logger,
            logging.INFO,
            "Answered chat turn",
            user_id=str(user_id),
            intent=retrieval.intent.value,
            candidates=len(candidates),
            history_turns=len(history),
            contexts_updated=updated,
        )

        return ChatTurnResult(
            reply=reply,
            intent=retrieval.intent,
            candidates=len(candidates),
            completed=True,
        )

    except Exception as e:
        logger.error(f"Todo chat failed: {e}", exc_info=True, extra={"user_id": str(user_id)})
        return ChatTurnResult(reply=GENERIC_FAILURE_REPLY, status_code=500)
