"""Data models for chats and messages.

These models describe what repositories store and stream, independent of the
backend behind them.
"""

from dataclasses import dataclass
from datetime import datetime, timezone
from enum import Enum
from typing import Generic, TypeVar
from uuid import uuid4

from pydantic import BaseModel, ConfigDict, Field

T = TypeVar("T")


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


class MessageRole(str, Enum):
    """Author of a chat message."""

    USER = "user"
    ASSISTANT = "assistant"
    SYSTEM = "system"


class ChatEntity(BaseModel):
    """Persisted metadata of one conversation."""

    model_config = ConfigDict(frozen=True)

    id: str = Field(default_factory=lambda: str(uuid4()))
    title: str | None = Field(default=None, description="Generated or user-given title")
    created_at: datetime = Field(default_factory=utc_now)
    updated_at: datetime = Field(default_factory=utc_now)


class ChatMessageEntity(BaseModel):
    """One message belonging to a chat."""

    model_config = ConfigDict(frozen=True)

    id: str = Field(default_factory=lambda: str(uuid4()))
    chat_id: str
    role: MessageRole
    content: str
    is_failed: bool = Field(default=False, description="Delivery failed and may be retried")
    created_at: datetime = Field(default_factory=utc_now)


@dataclass(frozen=True)
class Result(Generic[T]):
    """Outcome of an operation that reports failure instead of raising.

    Usage:
        result = await repository.send_message(chat_id, "hi")
        if result.is_success:
            ...
    """

    value: T | None = None
    error: Exception | None = None

    @classmethod
    def success(cls, value: T | None = None) -> "Result[T]":
        return cls(value=value)

    @classmethod
    def failure(cls, error: Exception) -> "Result[T]":
        return cls(error=error)

    @property
    def is_success(self) -> bool:
        return self.error is None

    @property
    def is_failure(self) -> bool:
        return self.error is not None

    def get_or_none(self) -> T | None:
        return self.value if self.is_success else None

    def get_or_raise(self) -> T:
        """Return the value, raising the stored error on failure."""
        if self.error is not None:
            raise self.error
        return self.value  # type: ignore[return-value]

    def exception_or_none(self) -> Exception | None:
        return self.error
