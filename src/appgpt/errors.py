"""Exception hierarchy for appgpt."""


class AppGptError(Exception):
    """Base class for appgpt errors."""


class ChatNotFoundError(AppGptError):
    """A chat id is not known to the repository."""

    def __init__(self, chat_id: str):
        super().__init__(f"Chat not found: {chat_id}")
        self.chat_id = chat_id


class ChatLockedError(AppGptError):
    """The screen is bound to a single chat and cannot switch."""

    def __init__(self, chat_id: str):
        super().__init__(f"Screen is locked to chat {chat_id}")
        self.chat_id = chat_id


class EmptyStreamError(AppGptError, LookupError):
    """A stream completed before emitting any value."""
