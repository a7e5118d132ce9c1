"""UI state exposed by the chat screen models.

Each phase is its own frozen dataclass so views can branch with isinstance
and state flows can skip equal updates.
"""

from dataclasses import dataclass, field

from ..data.models import ChatEntity, ChatMessageEntity


class ChatsUiState:
    """Phase of the chat list."""


@dataclass(frozen=True)
class ChatsLoading(ChatsUiState):
    pass


@dataclass(frozen=True)
class ChatsSuccess(ChatsUiState):
    chats: list[ChatEntity] = field(default_factory=list)


@dataclass(frozen=True)
class ChatsError(ChatsUiState):
    message: str


class ChatMessagesUiState:
    """Phase of the active chat's messages."""


@dataclass(frozen=True)
class MessagesEmpty(ChatMessagesUiState):
    """No chat selected."""


@dataclass(frozen=True)
class MessagesLoading(ChatMessagesUiState):
    """A chat is selected but its messages have not arrived yet."""


@dataclass(frozen=True)
class MessagesSuccess(ChatMessagesUiState):
    messages: list[ChatMessageEntity] = field(default_factory=list)


@dataclass(frozen=True)
class MessagesError(ChatMessagesUiState):
    message: str


@dataclass(frozen=True)
class ChatScreenUiState:
    """Draft being composed and whether a send is running."""

    text: str = ""
    is_sending: bool = False
