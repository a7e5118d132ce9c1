"""State holder for the chat screen.

Combines the active chat id, the repositories' live streams and the local
draft into the state a view renders, and turns user intents into repository
calls. Everything the model starts runs in its own TaskScope and stops with
``on_dispose``.
"""

import asyncio
from collections.abc import AsyncIterator, Callable
from dataclasses import replace

from ..analytics import (
    AnalyticsHelper,
    log_conversation_selected,
    log_create_new_conversation,
    log_message_copied,
    log_message_shared,
)
from ..config import SCREEN_SCOPE_NAME
from ..data.base import ChatMessageRepository, ChatRepository
from ..data.models import ChatEntity, Result
from ..flow import (
    MutableStateFlow,
    StateFlow,
    TaskScope,
    catch,
    first,
    flat_map_latest,
    just,
    map_stream,
    start_with,
    state_in,
)
from ..platform import share_text as platform_share_text
from ..utils.logging import get_logger
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

logger = get_logger("ui.chat_screen")


class ChatScreenModel:
    """Screen model for browsing chats and talking in the selected one.

    Example:
        model = ChatScreenModel(chats, messages, analytics)
        model.on_text_change("Hello")
        await model.on_send_message()
        model.on_dispose()
    """

    def __init__(
        self,
        chat_repository: ChatRepository,
        chat_message_repository: ChatMessageRepository,
        analytics_helper: AnalyticsHelper,
        initial_chat_id: str | None = None,
        share_text: Callable[[str], None] = platform_share_text,
        scope: TaskScope | None = None,
    ) -> None:
        self._chat_repository = chat_repository
        self._chat_message_repository = chat_message_repository
        self._analytics = analytics_helper
        self._share_text = share_text
        self._scope = scope or TaskScope(SCREEN_SCOPE_NAME)

        self._chat_id: MutableStateFlow[str | None] = MutableStateFlow(initial_chat_id)
        self._screen_ui_state = MutableStateFlow(ChatScreenUiState())
        self._operation: asyncio.Task | None = None
        self._selection_made = False

        self.screen_ui_state: StateFlow[ChatScreenUiState] = self._screen_ui_state.as_state_flow()
        self.selected_chat_id: StateFlow[str | None] = self._chat_id.as_state_flow()

        self.messages_ui_state: StateFlow[ChatMessagesUiState] = state_in(
            flat_map_latest(self._chat_id, self._messages_for),
            self._scope,
            MessagesEmpty() if initial_chat_id is None else MessagesLoading(),
        )

        self.current_chat: StateFlow[ChatEntity | None] = state_in(
            flat_map_latest(self._chat_id, self._chat_for),
            self._scope,
            None,
        )

        self.chats_ui_state: StateFlow[ChatsUiState] = state_in(
            catch(
                map_stream(self._chat_repository.stream_all_chats(), lambda chats: ChatsSuccess(chats=chats)),
                lambda e: ChatsError(message=str(e)),
            ),
            self._scope,
            ChatsLoading(),
        )

        # Without an explicit chat, reopen the most recently used one
        if initial_chat_id is None:
            self._scope.launch(self._select_latest_chat(), name="select-latest-chat")

    @property
    def scope(self) -> TaskScope:
        return self._scope

    @property
    def is_busy(self) -> bool:
        """True while a send or retry is in flight."""
        return self._operation is not None and not self._operation.done()

    # Derived streams

    def _messages_for(self, chat_id: str | None) -> AsyncIterator[ChatMessagesUiState]:
        if chat_id is None:
            return just(MessagesEmpty())

        messages = flat_map_latest(
            self._chat_repository.stream_chat(chat_id),
            lambda _chat: map_stream(
                self._chat_message_repository.stream_messages(chat_id),
                lambda items: MessagesSuccess(messages=items),
            ),
        )
        return start_with(
            MessagesLoading(),
            catch(messages, lambda e: MessagesError(message=str(e))),
        )

    def _chat_for(self, chat_id: str | None) -> AsyncIterator[ChatEntity | None]:
        if chat_id is None:
            return just(None)
        return start_with(None, catch(self._chat_repository.stream_chat(chat_id), lambda e: None))

    async def _select_latest_chat(self) -> None:
        chats = await first(self._chat_repository.stream_all_chats())
        if not chats:
            return
        if self._selection_made:
            logger.debug("latest_chat_skipped", reason="user_selection")
            return
        self._set_chat_id(chats[0].id)
        logger.debug("latest_chat_selected", chat_id=chats[0].id)

    # State writes

    def _set_chat_id(self, chat_id: str | None) -> None:
        if self._scope.is_active:
            self._chat_id.value = chat_id

    def _set_screen_state(self, **changes: object) -> None:
        if self._scope.is_active:
            self._screen_ui_state.update(lambda state: replace(state, **changes))

    # Intents

    def on_send_message(self) -> asyncio.Task | None:
        """Send the draft, creating a chat first when none is selected.

        Returns:
            Task running the send, or None when another send or retry is
            still in flight or the screen is disposed
        """
        if self.is_busy:
            logger.info("send_ignored", reason="operation_in_flight")
            return None
        self._operation = self._scope.launch(self._send_message(), name="send-message")
        return self._operation

    async def _send_message(self) -> None:
        chat_id = self._chat_id.value
        if chat_id is None:
            chat_id = await self._chat_repository.create_chat()
            self._selection_made = True
            self._set_chat_id(chat_id)

        content = self._screen_ui_state.value.text
        self._set_screen_state(text="", is_sending=True)

        try:
            result = await self._chat_message_repository.send_message(chat_id, content)
        finally:
            self._set_screen_state(is_sending=False)

        await self._after_send(chat_id, result)

    async def _after_send(self, chat_id: str, result: Result[None]) -> None:
        if result.is_success:
            await self._refresh_title(chat_id)

    async def _refresh_title(self, chat_id: str) -> None:
        try:
            title = await self._chat_message_repository.generate_title_from_chat(chat_id)
            if title.is_success:
                await self._chat_repository.update_chat_title(chat_id, title.get_or_raise())
        except Exception as e:
            logger.warning("title_update_failed", chat_id=chat_id, error=repr(e))

    def on_retry_send_message(self) -> asyncio.Task | None:
        """Retry the latest failed message of the selected chat."""
        chat_id = self._chat_id.value
        if chat_id is None:
            return None
        if self.is_busy:
            logger.info("retry_ignored", reason="operation_in_flight")
            return None
        self._operation = self._scope.launch(self._retry_send_message(chat_id), name="retry-send-message")
        return self._operation

    async def _retry_send_message(self, chat_id: str) -> None:
        self._set_screen_state(is_sending=True)
        try:
            await self._chat_message_repository.retry_send_message(chat_id)
        finally:
            self._set_screen_state(is_sending=False)

    def on_text_change(self, text: str) -> None:
        self._set_screen_state(text=text)

    def on_new_chat(self) -> None:
        self._selection_made = True
        self._set_chat_id(None)
        log_create_new_conversation(self._analytics)

    def on_chat_selected(self, chat_id: str) -> None:
        self._selection_made = True
        self._set_chat_id(chat_id)
        log_conversation_selected(self._analytics)

    def on_message_copied(self) -> None:
        log_message_copied(self._analytics)

    def on_message_shared(self, text: str) -> None:
        self._share_text(text)
        log_message_shared(self._analytics)

    def on_dispose(self) -> None:
        """Stop every subscription and operation of this screen."""
        self._scope.cancel()
