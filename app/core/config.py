"""Configuration management for Todo Chat Engine."""

from functools import lru_cache

from dotenv import load_dotenv
from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

# Load environment variables from .env file (only if accessible)
try:
    load_dotenv()
except (PermissionError, OSError):
    # Environment variables should be set directly
    pass


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        case_sensitive=True,
        extra="ignore",
    )

    # Supabase configuration (required)
    SUPABASE_URL: str = Field(..., description="Supabase project URL")
    SUPABASE_SERVICE_ROLE_KEY: str = Field(..., description="Supabase service role key")

    # OpenAI configuration (required)
    OPENAI_API_KEY: str = Field(..., description="OpenAI API key")

    # Environment
    TODO_ENGINE_ENV: str = Field(default="dev", description="Environment: dev, staging, prod")

    # Embedding configuration
    EMBEDDING_MODEL: str = Field(
        default="text-embedding-3-small", description="OpenAI embedding model"
    )
    EMBEDDING_DIM: int = Field(default=1536, description="Embedding vector dimension")

    # Chat completion configuration
    CHAT_MODEL: str = Field(default="gpt-3.5-turbo", description="Model answering todo questions")
    CHAT_TEMPERATURE: float = Field(default=0.2, description="Temperature for chat answers")
    CHAT_MAX_TOKENS: int = Field(default=1500, description="Max tokens per chat answer")
    DATE_PARSER_MODEL: str = Field(
        default="gpt-3.5-turbo", description="Model extracting date ranges from questions"
    )

    # Retrieval and context tracking
    CHAT_HISTORY_TURNS: int = Field(
        default=5, description="Prior chat turns sent to the model for continuity"
    )
    CHAT_HISTORY_DISPLAY_LIMIT: int = Field(
        default=20, description="Chat turns returned to the client transcript"
    )
    MATCH_COUNT: int = Field(default=100, description="Max candidates from match_todos")
    CONTEXT_UPDATE_LIMIT: int = Field(
        default=10, description="Top-ranked todos whose context is updated per turn"
    )
    CONTEXT_HISTORY_LIMIT: int = Field(
        default=10, description="Query history entries kept per todo context"
    )

    # HTTP
    CORS_ALLOW_ORIGINS: list[str] = Field(default=["*"], description="Allowed CORS origins")


@lru_cache
def get_settings() -> Settings:
    """
    Get cached settings instance.

    Returns:
        Settings instance

    Raises:
        ValidationError: If required environment variables are missing
    """
    return Settings()
