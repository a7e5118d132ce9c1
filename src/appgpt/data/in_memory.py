"""In-memory repositories.

Dict-based storage for session-only use. Data is lost when the application
exits. Every store is a state flow, so streams update as soon as data changes.
"""

from collections.abc import AsyncIterator

from ..errors import ChatNotFoundError
from ..flow import MutableStateFlow, distinct_until_changed, map_stream
from ..utils.logging import get_logger
from .base import ChatMessageRepository, ChatRepository, ChatResponder, PreferenceLocalDataSource
from .models import ChatEntity, ChatMessageEntity, MessageRole, Result, utc_now
from .responders import EchoResponder

logger = get_logger("data.in_memory")


class InMemoryChatRepository(ChatRepository):
    """Chats kept in memory, most recently used first."""

    def __init__(self, chats: list[ChatEntity] | None = None):
        self._chats: MutableStateFlow[tuple[ChatEntity, ...]] = MutableStateFlow(tuple(chats or ()))

    def stream_all_chats(self) -> AsyncIterator[list[ChatEntity]]:
        return map_stream(self._chats, list)

    def stream_chat(self, chat_id: str) -> AsyncIterator[ChatEntity | None]:
        return distinct_until_changed(
            map_stream(self._chats, lambda chats: _find_chat(chats, chat_id))
        )

    async def create_chat(self) -> str:
        chat = ChatEntity()
        self._chats.update(lambda chats: (chat, *chats))
        logger.debug("chat_created", chat_id=chat.id)
        return chat.id

    async def update_chat_title(self, chat_id: str, title: str) -> None:
        chat = self.get_chat(chat_id)
        if chat is None:
            raise ChatNotFoundError(chat_id)

        renamed = chat.model_copy(update={"title": title})
        self._chats.update(
            lambda chats: tuple(renamed if c.id == chat_id else c for c in chats)
        )
        logger.debug("chat_title_updated", chat_id=chat_id, title=title)

    def get_chat(self, chat_id: str) -> ChatEntity | None:
        """Current snapshot of one chat."""
        return _find_chat(self._chats.value, chat_id)

    def touch_chat(self, chat_id: str) -> None:
        """Move a chat to the front of the list. Unknown ids are ignored."""
        chat = self.get_chat(chat_id)
        if chat is None:
            return
        touched = chat.model_copy(update={"updated_at": utc_now()})
        self._chats.update(
            lambda chats: (touched, *(c for c in chats if c.id != chat_id))
        )


class InMemoryChatMessageRepository(ChatMessageRepository):
    """Messages kept in memory, answered by a ``ChatResponder``."""

    def __init__(
        self,
        chat_repository: InMemoryChatRepository | None = None,
        responder: ChatResponder | None = None
    ):
        self._chat_repository = chat_repository
        self._responder = responder or EchoResponder()
        self._messages: MutableStateFlow[dict[str, tuple[ChatMessageEntity, ...]]] = MutableStateFlow({})

    def stream_messages(self, chat_id: str) -> AsyncIterator[list[ChatMessageEntity]]:
        return distinct_until_changed(
            map_stream(self._messages, lambda by_chat: list(by_chat.get(chat_id, ())))
        )

    def get_messages(self, chat_id: str) -> list[ChatMessageEntity]:
        """Current snapshot of a chat's messages."""
        return list(self._messages.value.get(chat_id, ()))

    async def send_message(self, chat_id: str, content: str) -> Result[None]:
        message = ChatMessageEntity(chat_id=chat_id, role=MessageRole.USER, content=content)
        self._append(message)
        return await self._deliver(message)

    async def retry_send_message(self, chat_id: str) -> None:
        failed = next(
            (m for m in reversed(self.get_messages(chat_id)) if m.is_failed),
            None
        )
        if failed is None:
            logger.debug("retry_skipped", chat_id=chat_id, reason="no_failed_message")
            return

        retried = failed.model_copy(update={"is_failed": False})
        self._replace(retried)
        await self._deliver(retried)

    async def generate_title_from_chat(self, chat_id: str) -> Result[str]:
        messages = self.get_messages(chat_id)
        if not messages:
            return Result.failure(ValueError(f"Chat {chat_id} has no messages"))
        try:
            title = await self._responder.generate_title(messages)
        except Exception as e:
            return Result.failure(e)
        return Result.success(title)

    async def _deliver(self, message: ChatMessageEntity) -> Result[None]:
        try:
            answer = await self._responder.reply(self.get_messages(message.chat_id))
        except Exception as e:
            logger.warning(
                "delivery_failed",
                chat_id=message.chat_id,
                message_id=message.id,
                error=repr(e),
            )
            self._replace(message.model_copy(update={"is_failed": True}))
            return Result.failure(e)

        self._append(
            ChatMessageEntity(chat_id=message.chat_id, role=MessageRole.ASSISTANT, content=answer)
        )
        return Result.success()

    def _append(self, message: ChatMessageEntity) -> None:
        self._messages.update(
            lambda by_chat: {
                **by_chat,
                message.chat_id: (*by_chat.get(message.chat_id, ()), message),
            }
        )
        if self._chat_repository is not None:
            self._chat_repository.touch_chat(message.chat_id)

    def _replace(self, message: ChatMessageEntity) -> None:
        self._messages.update(
            lambda by_chat: {
                **by_chat,
                message.chat_id: tuple(
                    message if m.id == message.id else m
                    for m in by_chat.get(message.chat_id, ())
                ),
            }
        )


class InMemoryPreferenceDataSource(PreferenceLocalDataSource):
    """Preferences kept in memory."""

    def __init__(self, welcome_shown: bool = False):
        self._welcome_shown = MutableStateFlow(welcome_shown)

    def welcome_shown(self) -> AsyncIterator[bool]:
        return aiter(self._welcome_shown)

    async def set_welcome_shown(self) -> None:
        self._welcome_shown.value = True


def _find_chat(chats: tuple[ChatEntity, ...], chat_id: str) -> ChatEntity | None:
    return next((c for c in chats if c.id == chat_id), None)
