"""API router for v1 endpoints."""

from fastapi import APIRouter

from app.api import auth, sync_embeddings, todo_chat, todos

router = APIRouter()

# Auth pass-through routes (Supabase Auth)
router.include_router(auth.router, tags=["auth"])

# Todo CRUD routes
router.include_router(todos.router, tags=["todos"])

# Todo chat assistant routes
router.include_router(todo_chat.router, tags=["todo-chat"])

# Embedding sync routes
router.include_router(sync_embeddings.router, tags=["embeddings"])
