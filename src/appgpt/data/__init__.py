"""Data layer for appgpt.

Repository interfaces, the models they stream, and in-memory backends.
"""

from .base import ChatMessageRepository, ChatRepository, ChatResponder, PreferenceLocalDataSource
from .factory import Repositories, create_repositories
from .in_memory import (
    InMemoryChatMessageRepository,
    InMemoryChatRepository,
    InMemoryPreferenceDataSource,
)
from .models import ChatEntity, ChatMessageEntity, MessageRole, Result
from .preferences import PreferenceRepository
from .responders import EchoResponder, derive_title

__all__ = [
    "ChatEntity",
    "ChatMessageEntity",
    "ChatMessageRepository",
    "ChatRepository",
    "ChatResponder",
    "EchoResponder",
    "InMemoryChatMessageRepository",
    "InMemoryChatRepository",
    "InMemoryPreferenceDataSource",
    "MessageRole",
    "PreferenceLocalDataSource",
    "PreferenceRepository",
    "Repositories",
    "Result",
    "create_repositories",
    "derive_title",
]
