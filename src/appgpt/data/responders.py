"""Offline assistant responder.

Used by the terminal front end and the tests; answers without any model.
"""

from ..config import TITLE_ELLIPSIS, TITLE_MAX_LENGTH
from .base import ChatResponder
from .models import ChatMessageEntity, MessageRole


def derive_title(text: str, max_length: int = TITLE_MAX_LENGTH) -> str:
    """Collapse whitespace and shorten ``text`` to at most ``max_length`` characters.

    Args:
        text: Source text, usually the first user message
        max_length: Maximum title length, ellipsis included

    Returns:
        Title text, possibly empty

    Raises:
        ValueError: If max_length leaves no room besides the ellipsis
    """
    if max_length <= len(TITLE_ELLIPSIS):
        raise ValueError(f"max_length must be > {len(TITLE_ELLIPSIS)}")

    collapsed = " ".join(text.split())
    if len(collapsed) <= max_length:
        return collapsed
    return collapsed[: max_length - len(TITLE_ELLIPSIS)].rstrip() + TITLE_ELLIPSIS


class EchoResponder(ChatResponder):
    """Replies with the last user message."""

    def __init__(self, prefix: str = "You said: ", max_title_length: int = TITLE_MAX_LENGTH):
        self._prefix = prefix
        self._max_title_length = max_title_length

    async def reply(self, messages: list[ChatMessageEntity]) -> str:
        for message in reversed(messages):
            if message.role == MessageRole.USER:
                return f"{self._prefix}{message.content}"
        return self._prefix.strip()

    async def generate_title(self, messages: list[ChatMessageEntity]) -> str:
        for message in messages:
            if message.role == MessageRole.USER:
                title = derive_title(message.content, self._max_title_length)
                if title:
                    return title
        raise ValueError("No user message with text to build a title from")
