"""Concrete analytics helpers."""

from typing import Any

from ..config import ANALYTICS_LOG, ANALYTICS_NONE
from ..utils.logging import get_logger
from .base import AnalyticsEvent, AnalyticsHelper


class StructlogAnalyticsHelper(AnalyticsHelper):
    """Writes events to the structured log."""

    def __init__(self, logger_name: str = "analytics.events"):
        self._logger = get_logger(logger_name)

    def log_event(self, event: AnalyticsEvent) -> None:
        self._logger.info("analytics_event", event_type=event.type.value, **event.params)


class NoOpAnalyticsHelper(AnalyticsHelper):
    """Drops every event."""

    def log_event(self, event: AnalyticsEvent) -> None:
        pass


def create_analytics_helper(sink: str = ANALYTICS_LOG, **kwargs: Any) -> AnalyticsHelper:
    """Create an analytics helper.

    Args:
        sink: Helper type ("log" or "none")
        **kwargs: Helper-specific configuration

    Returns:
        AnalyticsHelper instance

    Raises:
        ValueError: If sink type is not supported
    """
    if sink == ANALYTICS_LOG:
        return StructlogAnalyticsHelper(**kwargs)

    elif sink == ANALYTICS_NONE:
        return NoOpAnalyticsHelper()

    raise ValueError(
        f"Unsupported analytics sink: {sink}. "
        f"Supported sinks: {ANALYTICS_LOG}, {ANALYTICS_NONE}"
    )
