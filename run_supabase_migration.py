#!/usr/bin/env python3
"""Check the todo chat schema using the Supabase client."""
import sys
from pathlib import Path

sys.path.insert(0, '.')

from app.db.supabase_client import get_supabase

MIGRATION_FILE = Path(__file__).parent / "migrations" / "0001_todo_chat.sql"

REQUIRED_TABLES = {
    "todos": "id, user_id, title, notes, is_completed, created_at, updated_at",
    "todo_embeddings": "id, todo_id, user_id, todo_context",
    "ai_chat_history": "id, user_id, query, response, created_at",
}


def run_migration():
    supabase = get_supabase()

    try:
        print("🚀 Checking todo chat schema")

        for table, columns in REQUIRED_TABLES.items():
            print(f"🔍 Checking {table}...")
            supabase.table(table).select(columns).limit(1).execute()

        print("🔍 Checking match_todos()...")
        supabase.rpc(
            "match_todos",
            {
                "query_embedding": [0.0] * 1536,
                "user_id_input": "00000000-0000-0000-0000-000000000000",
                "match_count": 1,
            },
        ).execute()

        print("✅ Schema is in place!")

    except Exception as e:
        print(f"❌ Schema check failed: {e}")
        print("💡 Run this SQL in your Supabase SQL editor:")
        print(MIGRATION_FILE.read_text())
        sys.exit(1)


if __name__ == "__main__":
    run_migration()
