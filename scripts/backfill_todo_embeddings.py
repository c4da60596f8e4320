#!/usr/bin/env python3
"""
Backfill embeddings for todos that don't have one yet.

Runs the same sync as GET /v1/sync-embeddings, for one user or for every
user with pending rows.

Usage:
    python scripts/backfill_todo_embeddings.py [--user-id USER_ID]

Options:
    --user-id: Optional user UUID to backfill only that user
"""

import argparse
import sys
from pathlib import Path
from uuid import UUID

# Add parent directory to path for imports
sys.path.insert(0, str(Path(__file__).parent.parent))

from app.core.logging import get_logger
from app.db.todo_embeddings import list_users_with_pending_embeddings
from app.services.embedding_sync import sync_todo_embeddings

logger = get_logger(__name__)


def backfill(user_id: UUID | None = None) -> tuple[int, int]:
    """Sync pending embeddings. Returns (succeeded, failed) totals."""
    user_ids = [user_id] if user_id else [UUID(u) for u in list_users_with_pending_embeddings()]
    logger.info(f"Backfilling embeddings for {len(user_ids)} user(s)")

    succeeded = failed = 0
    for uid in user_ids:
        summary = sync_todo_embeddings(uid)
        succeeded += summary.success
        failed += summary.failed
        logger.info(f"User {uid}: {summary.success}/{summary.total} embedded, {summary.failed} failed")

    return succeeded, failed


def main():
    parser = argparse.ArgumentParser(description="Backfill todo embeddings")
    parser.add_argument("--user-id", type=UUID, help="Only backfill this user")
    args = parser.parse_args()

    succeeded, failed = backfill(args.user_id)
    print(f"Done: {succeeded} embedded, {failed} failed")
    sys.exit(1 if failed else 0)


if __name__ == "__main__":
    main()
