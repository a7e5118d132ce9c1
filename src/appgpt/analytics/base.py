"""Analytics interface and the events the chat screens report.

The abstraction hides where events go. Reporting is fire-and-forget: the
``log_*`` helpers never let a helper failure reach the caller.
"""

from abc import ABC, abstractmethod
from enum import Enum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field

from ..utils.logging import get_logger

logger = get_logger("analytics")


class AnalyticsEventType(str, Enum):
    """Events emitted by the chat screens."""

    CONVERSATION_SELECTED = "conversation_selected"
    CREATE_NEW_CONVERSATION = "create_new_conversation"
    MESSAGE_COPIED = "message_copied"
    MESSAGE_SHARED = "message_shared"


class AnalyticsEvent(BaseModel):
    """One analytics event."""

    model_config = ConfigDict(frozen=True)

    type: AnalyticsEventType
    params: dict[str, Any] = Field(default_factory=dict)


class AnalyticsHelper(ABC):
    """Destination for analytics events."""

    @abstractmethod
    def log_event(self, event: AnalyticsEvent) -> None:
        """Record an event."""


def _safe_log(analytics: AnalyticsHelper, event: AnalyticsEvent) -> None:
    try:
        analytics.log_event(event)
    except Exception as e:
        logger.warning("analytics_failed", event_type=event.type.value, error=repr(e))


def log_conversation_selected(analytics: AnalyticsHelper) -> None:
    _safe_log(analytics, AnalyticsEvent(type=AnalyticsEventType.CONVERSATION_SELECTED))


def log_create_new_conversation(analytics: AnalyticsHelper) -> None:
    _safe_log(analytics, AnalyticsEvent(type=AnalyticsEventType.CREATE_NEW_CONVERSATION))


def log_message_copied(analytics: AnalyticsHelper) -> None:
    _safe_log(analytics, AnalyticsEvent(type=AnalyticsEventType.MESSAGE_COPIED))


def log_message_shared(analytics: AnalyticsHelper) -> None:
    _safe_log(analytics, AnalyticsEvent(type=AnalyticsEventType.MESSAGE_SHARED))
