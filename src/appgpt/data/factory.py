"""Factory for creating repository sets."""

from dataclasses import dataclass

from ..config import BACKEND_MEMORY
from .base import ChatMessageRepository, ChatRepository, ChatResponder
from .preferences import PreferenceRepository


@dataclass
class Repositories:
    """Repositories sharing one backend."""

    chats: ChatRepository
    messages: ChatMessageRepository
    preferences: PreferenceRepository


def create_repositories(
    backend: str = BACKEND_MEMORY,
    responder: ChatResponder | None = None
) -> Repositories:
    """Create the repositories of one backend.

    Args:
        backend: Backend type ("memory")
        responder: Assistant used to answer messages (default: EchoResponder)

    Returns:
        Repositories instance

    Raises:
        ValueError: If backend type is not supported
    """
    if backend == BACKEND_MEMORY:
        from .in_memory import (
            InMemoryChatMessageRepository,
            InMemoryChatRepository,
            InMemoryPreferenceDataSource,
        )
        chats = InMemoryChatRepository()
        return Repositories(
            chats=chats,
            messages=InMemoryChatMessageRepository(chats, responder),
            preferences=PreferenceRepository(InMemoryPreferenceDataSource()),
        )

    raise ValueError(
        f"Unsupported repository backend: {backend}. "
        f"Supported backends: {BACKEND_MEMORY}"
    )
