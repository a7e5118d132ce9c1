"""Screen models for appgpt.

Module structure:
- state.py: UI state phases exposed to views
- chat_screen_model.py: multi-conversation screen model
- single_chat_model.py: screen model locked to one conversation
"""

from .chat_screen_model import ChatScreenModel
from .single_chat_model import SingleChatScreenModel
from .state import (
    ChatMessagesUiState,
    ChatScreenUiState,
    ChatsError,
    ChatsLoading,
    ChatsSuccess,
    ChatsUiState,
    MessagesEmpty,
    MessagesError,
    MessagesLoading,
    MessagesSuccess,
)

__all__ = [
    "ChatMessagesUiState",
    "ChatScreenModel",
    "ChatScreenUiState",
    "ChatsError",
    "ChatsLoading",
    "ChatsSuccess",
    "ChatsUiState",
    "MessagesEmpty",
    "MessagesError",
    "MessagesLoading",
    "MessagesSuccess",
    "SingleChatScreenModel",
]
