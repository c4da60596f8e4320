"""Pydantic schemas for the todo chat assistant."""

from datetime import datetime
from enum import Enum
from typing import Literal, Optional
from uuid import UUID

from pydantic import BaseModel, Field, field_validator


class QueryIntent(str, Enum):
    """How a chat question selects the todos it is answered from."""
    SEMANTIC = "semantic"      # similarity search over embeddings
    METADATA = "metadata"      # all todos (update/modification questions)
    DATE_RANGE = "date_range"  # todos created within an extracted range


# ============================================================================
# API Models
# ============================================================================


class TodoChatRequest(BaseModel):
    """Request body for the todo chat endpoint."""
    user_id: str = Field(..., min_length=1)
    query: str = Field(..., min_length=1, max_length=4000)

    @field_validator("user_id", "query")
    @classmethod
    def not_blank(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("must not be blank")
        return v


class TodoChatResponse(BaseModel):
    """Reply returned by the todo chat endpoint."""
    reply: str


class ChatHistoryEntry(BaseModel):
    """One persisted question/answer turn."""
    query: str
    response: str
    created_at: datetime


class ChatMessage(BaseModel):
    """A transcript message shown by the client."""
    role: Literal["user", "assistant"]
    content: str
    timestamp: datetime


class DateRange(BaseModel):
    """A UTC creation-date window extracted from a question."""
    start: datetime
    end: datetime


# ============================================================================
# Per-todo Context Payload
# ============================================================================


class CoMatchedTodo(BaseModel):
    """Another todo returned in the same turn, ordered by similarity distance."""
    todo_id: UUID
    title: str
    similarity_diff: float


class StatsAtQuery(BaseModel):
    total_todos: int
    completed_todos: int
    pending_todos: int
    results_returned: int


class QueryHistoryEntry(BaseModel):
    """One chat turn in which a todo was among the top results."""
    query: str
    timestamp: datetime
    my_rank: int
    my_similarity: float
    my_todo_id: UUID
    my_title: str
    co_matched_todos: list[CoMatchedTodo] = Field(default_factory=list)
    stats_at_query: Optional[StatsAtQuery] = None


class TodoContextPayload(BaseModel):
    """Accumulated chat interactions stored in todo_embeddings.todo_context."""
    query_history: list[QueryHistoryEntry] = Field(default_factory=list)
    times_queried: int = 0
    first_queried_at: Optional[datetime] = None
    last_queried_at: Optional[datetime] = None
    avg_rank: float = 0.0
