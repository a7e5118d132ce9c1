"""Analytics reporting for appgpt."""

from .base import (
    AnalyticsEvent,
    AnalyticsEventType,
    AnalyticsHelper,
    log_conversation_selected,
    log_create_new_conversation,
    log_message_copied,
    log_message_shared,
)
from .helpers import NoOpAnalyticsHelper, StructlogAnalyticsHelper, create_analytics_helper

__all__ = [
    "AnalyticsEvent",
    "AnalyticsEventType",
    "AnalyticsHelper",
    "NoOpAnalyticsHelper",
    "StructlogAnalyticsHelper",
    "create_analytics_helper",
    "log_conversation_selected",
    "log_create_new_conversation",
    "log_message_copied",
    "log_message_shared",
]
