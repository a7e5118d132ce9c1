"""Reactive primitives for screen state.

- state_flow.py: hot value holders (StateFlow, MutableStateFlow)
- operators.py: stream operators and state_in
- scope.py: task ownership and cancellation
"""

from .operators import (
    catch,
    distinct_until_changed,
    first,
    flat_map_latest,
    just,
    map_stream,
    start_with,
    state_in,
)
from .scope import TaskScope
from .state_flow import MutableStateFlow, StateFlow

__all__ = [
    "MutableStateFlow",
    "StateFlow",
    "TaskScope",
    "catch",
    "distinct_until_changed",
    "first",
    "flat_map_latest",
    "just",
    "map_stream",
    "start_with",
    "state_in",
]
