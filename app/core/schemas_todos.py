"""Pydantic schemas for todos and their embedding records."""

from datetime import datetime
from enum import Enum
from typing import Any, Optional
from uuid import UUID

from pydantic import BaseModel, Field, field_validator


# ============================================================================
# Enums
# ============================================================================


class TodoFilter(str, Enum):
    """Completion filter used by the todo list."""
    ALL = "all"
    ACTIVE = "active"
    COMPLETED = "completed"


# ============================================================================
# Todo Models
# ============================================================================


class Todo(BaseModel):
    """A todo item owned by exactly one user."""
    id: UUID
    user_id: UUID
    title: str
    notes: Optional[str] = None
    is_completed: bool = False
    created_at: datetime
    updated_at: Optional[datetime] = None

    @property
    def was_updated(self) -> bool:
        """True when the todo was edited after it was created."""
        return self.updated_at is not None and self.updated_at != self.created_at


class TodoCreate(BaseModel):
    """Request body for creating a todo."""
    title: str = Field(..., max_length=500)
    notes: Optional[str] = None


class TodoUpdate(BaseModel):
    """Request body for updating a todo. Unset fields are left untouched."""
    title: Optional[str] = Field(None, max_length=500)
    notes: Optional[str] = None
    is_completed: Optional[bool] = None

    @property
    def touches_text(self) -> bool:
        """Whether the update changes text that feeds the embedding."""
        return self.title is not None or self.notes is not None


class TodoStats(BaseModel):
    """Aggregate completion counts for one user."""
    total: int = 0
    completed: int = 0
    pending: int = 0


class CandidateTodo(Todo):
    """A todo retrieved for a chat turn, with its similarity to the query."""
    similarity: float = 1.0

    @field_validator("similarity")
    @classmethod
    def clamp_similarity(cls, v: float) -> float:
        return min(max(v, 0.0), 1.0)


# ============================================================================
# Embedding Records
# ============================================================================


class TodoEmbeddingRow(BaseModel):
    """A todo_embeddings row pending an embedding, joined with its todo text."""
    id: UUID
    todo_id: UUID
    title: str
    notes: Optional[str] = None

    @property
    def embed_text(self) -> str:
        return f"{self.title} {self.notes or ''}".strip()

    @classmethod
    def from_row(cls, row: dict[str, Any]) -> "TodoEmbeddingRow":
        todo = row.get("todos") or {}
        return cls(
            id=row["id"],
            todo_id=row["todo_id"],
            title=todo.get("title") or "",
            notes=todo.get("notes"),
        )


class EmbeddingSyncResult(BaseModel):
    """Outcome of embedding one pending todo."""
    todo_id: UUID
    status: str  # "success" or "failed"
    error: Optional[str] = None


class EmbeddingSyncSummary(BaseModel):
    """Summary returned by the embedding sync job."""
    total: int = 0
    success: int = 0
    failed: int = 0
    processed: int = 0
    results: list[EmbeddingSyncResult] = Field(default_factory=list)
