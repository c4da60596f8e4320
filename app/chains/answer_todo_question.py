"""Chat completion for todo questions."""

from app.core.config import get_settings
from app.core.llm import get_llm
from app.core.logging import get_logger

logger = get_logger(__name__)


class ChatCompletionError(Exception):
    """The completion call failed or returned nothing usable."""


async def complete_chat(messages: list[dict[str, str]]) -> str:
    """
    Send role-tagged messages to the chat model and return its reply.

    Args:
        messages: [system, prior turns..., context + question]

    Returns:
        Reply text (non-empty)

    Raises:
        ChatCompletionError: On transport errors or an empty reply
    """
    settings = get_settings()
    llm = get_llm(
        model=settings.CHAT_MODEL,
        temperature=settings.CHAT_TEMPERATURE,
        max_tokens=settings.CHAT_MAX_TOKENS,
    )

    try:
        response = await llm.ainvoke(messages)
    except Exception as e:
        logger.error(f"Chat completion failed: {e}")
        raise ChatCompletionError(str(e)) from e

    content = response.content if isinstance(response.content, str) else ""
    if not content.strip():
        raise ChatCompletionError("Chat completion returned an empty reply")

    return content.strip()
