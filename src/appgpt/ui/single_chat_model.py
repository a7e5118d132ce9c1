"""Screen model bound to one conversation."""

import asyncio
from collections.abc import Callable

from ..analytics import AnalyticsHelper, NoOpAnalyticsHelper
from ..data.base import ChatMessageRepository, ChatRepository
from ..data.models import ChatMessageEntity, Result
from ..errors import ChatLockedError
from ..flow import TaskScope
from ..platform import share_text as platform_share_text
from ..utils.logging import get_logger
from .chat_screen_model import ChatScreenModel
from .state import MessagesSuccess

logger = get_logger("ui.single_chat")


class SingleChatScreenModel(ChatScreenModel):
    """Chat screen with a fixed conversation.

    ``send_message`` clears the draft at once and fires the message without
    title enrichment or a sending flag; the outcome is only visible through
    the message stream.
    """

    def __init__(
        self,
        chat_repository: ChatRepository,
        chat_message_repository: ChatMessageRepository,
        chat_id: str,
        analytics_helper: AnalyticsHelper | None = None,
        share_text: Callable[[str], None] = platform_share_text,
        scope: TaskScope | None = None,
    ) -> None:
        super().__init__(
            chat_repository,
            chat_message_repository,
            analytics_helper or NoOpAnalyticsHelper(),
            initial_chat_id=chat_id,
            share_text=share_text,
            scope=scope,
        )
        self._fixed_chat_id = chat_id

    @property
    def chat_id(self) -> str:
        return self._fixed_chat_id

    @property
    def text(self) -> str:
        return self.screen_ui_state.value.text

    @text.setter
    def text(self, value: str) -> None:
        self.on_text_change(value)

    @property
    def messages(self) -> list[ChatMessageEntity]:
        """Messages of the chat, empty until the first emission."""
        state = self.messages_ui_state.value
        if isinstance(state, MessagesSuccess):
            return state.messages
        return []

    def send_message(self, text: str) -> asyncio.Task | None:
        """Clear the draft and send ``text`` in the background.

        Every call is sent, even while an earlier one is still running. The
        result is ignored and the sending flag is never raised.

        Returns:
            Task running the send, or None when the screen is disposed
        """
        self._set_screen_state(text="")
        logger.debug("single_chat_send", chat_id=self._fixed_chat_id)
        return self._scope.launch(
            self._chat_message_repository.send_message(self._fixed_chat_id, text),
            name="single-chat-send",
        )

    async def _after_send(self, chat_id: str, result: Result[None]) -> None:
        return None

    def on_new_chat(self) -> None:
        raise ChatLockedError(self._fixed_chat_id)

    def on_chat_selected(self, chat_id: str) -> None:
        raise ChatLockedError(self._fixed_chat_id)
