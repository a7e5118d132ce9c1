"""Abstract repositories consumed by the screen models.

The abstraction hides:
- Storage format and persistence mechanism
- How messages reach an assistant and how replies come back
- Threading of the underlying I/O

Streams are live: they emit the current value on collection and again on
every change, and do not complete on their own.
"""

from abc import ABC, abstractmethod
from collections.abc import AsyncIterator

from .models import ChatEntity, ChatMessageEntity, Result


class ChatRepository(ABC):
    """Conversation metadata."""

    @abstractmethod
    def stream_all_chats(self) -> AsyncIterator[list[ChatEntity]]:
        """Stream every chat, most recently used first."""

    @abstractmethod
    def stream_chat(self, chat_id: str) -> AsyncIterator[ChatEntity | None]:
        """Stream one chat; emits None while the id is unknown."""

    @abstractmethod
    async def create_chat(self) -> str:
        """Create an empty chat and return its id."""

    @abstractmethod
    async def update_chat_title(self, chat_id: str, title: str) -> None:
        """Replace the title of a chat.

        Raises:
            ChatNotFoundError: If the chat does not exist
        """


class ChatMessageRepository(ABC):
    """Messages of a chat and their delivery."""

    @abstractmethod
    def stream_messages(self, chat_id: str) -> AsyncIterator[list[ChatMessageEntity]]:
        """Stream the ordered messages of a chat."""

    @abstractmethod
    async def send_message(self, chat_id: str, content: str) -> Result[None]:
        """Store a user message and deliver it.

        Delivery problems are reported through the result, not raised.
        """

    @abstractmethod
    async def retry_send_message(self, chat_id: str) -> None:
        """Deliver the latest failed message of a chat again."""

    @abstractmethod
    async def generate_title_from_chat(self, chat_id: str) -> Result[str]:
        """Derive a title from the chat's messages."""


class ChatResponder(ABC):
    """Produces assistant replies for a conversation.

    Hides the design decision of which model, if any, answers the user.
    """

    @abstractmethod
    async def reply(self, messages: list[ChatMessageEntity]) -> str:
        """Return the assistant reply to the conversation so far."""

    @abstractmethod
    async def generate_title(self, messages: list[ChatMessageEntity]) -> str:
        """Return a short title summarizing the conversation."""


class PreferenceLocalDataSource(ABC):
    """Local key-value preferences."""

    @abstractmethod
    def welcome_shown(self) -> AsyncIterator[bool]:
        """Stream whether the welcome screen was already shown."""

    @abstractmethod
    async def set_welcome_shown(self) -> None:
        """Remember that the welcome screen was shown."""
