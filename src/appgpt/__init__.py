"""
appgpt: reactive screen state for a multi-conversation chat client.

Each subpackage hides one design decision:
- flow: how live values are shared and derived
- data: where chats and messages come from
- analytics: where usage events go
- ui: how streams and user intents become screen state
"""

__version__ = "0.1.0"

from .data import (
    ChatEntity,
    ChatMessageEntity,
    ChatMessageRepository,
    ChatRepository,
    Result,
    create_repositories,
)
from .ui import ChatScreenModel, SingleChatScreenModel

__all__ = [
    "ChatEntity",
    "ChatMessageEntity",
    "ChatMessageRepository",
    "ChatRepository",
    "ChatScreenModel",
    "Result",
    "SingleChatScreenModel",
    "create_repositories",
]
