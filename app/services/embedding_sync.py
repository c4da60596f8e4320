"""Embedding sync service.

Fills in embeddings for todo_embeddings rows that don't have one yet
(new todos and todos whose title or notes were edited). Triggered after
writes as a background task, from the sync endpoint, or from the backfill
script. Rows are embedded one at a time so a bad row only fails itself;
there are no retries, the next run picks failed rows up again.
"""

from uuid import UUID

from app.core.embeddings import embed_texts
from app.core.logging import get_logger
from app.core.schemas_todos import EmbeddingSyncResult, EmbeddingSyncSummary
from app.db.todo_embeddings import list_pending_embeddings, set_embedding

logger = get_logger(__name__)


def sync_todo_embeddings(user_id: UUID) -> EmbeddingSyncSummary:
    """
    Compute and store embeddings for a user's pending todos.

    Args:
        user_id: Owner whose pending rows are processed

    Returns:
        EmbeddingSyncSummary (all zeros and no writes when nothing is pending)
    """
    pending = list_pending_embeddings(user_id)
    summary = EmbeddingSyncSummary(total=len(pending))

    for row in pending:
        try:
            text = row.embed_text
            if not text:
                raise ValueError("Todo has no text to embed")

            embeddings = embed_texts([text])
            if not embeddings:
                raise ValueError("No embedding returned")

            set_embedding(row.id, embeddings[0])
            summary.success += 1
            summary.results.append(EmbeddingSyncResult(todo_id=row.todo_id, status="success"))
        except Exception as e:
            logger.warning(f"Embedding sync failed for todo {row.todo_id}: {e}")
            summary.failed += 1
            summary.results.append(
                EmbeddingSyncResult(todo_id=row.todo_id, status="failed", error=str(e))
            )

    summary.processed = summary.success + summary.failed

    if summary.total:
        logger.info(
            f"Synced embeddings: {summary.success}/{summary.total} succeeded",
            extra={"user_id": str(user_id)},
        )
    return summary


def run_sync_in_background(user_id: UUID) -> None:
    """Background-task entry point; never raises into the task runner."""
    try:
        sync_todo_embeddings(user_id)
    except Exception as e:
        logger.error(f"Background embedding sync failed: {e}", extra={"user_id": str(user_id)})
