"""Hot value holders.

A state flow always has a value. Every collector first receives the current
value, then each later distinct value. Collectors that fall behind only see
the most recent value (conflation), so a slow view never blocks a writer.
"""

import asyncio
from abc import ABC, abstractmethod
from collections.abc import AsyncIterator, Callable
from typing import Generic, TypeVar

T = TypeVar("T")


class _Collector(Generic[T]):
    """Single-slot mailbox for one subscriber."""

    def __init__(self, initial: T) -> None:
        self._latest = initial
        self._ready = asyncio.Event()
        self._ready.set()

    def offer(self, value: T) -> None:
        self._latest = value
        self._ready.set()

    async def receive(self) -> T:
        await self._ready.wait()
        self._ready.clear()
        return self._latest


class StateFlow(ABC, Generic[T]):
    """Read-only, multicast, replay-latest stream of values."""

    @property
    @abstractmethod
    def value(self) -> T:
        """Current value."""

    @property
    @abstractmethod
    def subscription_count(self) -> int:
        """Number of active collectors."""

    @abstractmethod
    def __aiter__(self) -> AsyncIterator[T]:
        """Collect the current value, then every later distinct value."""

    def __repr__(self) -> str:
        return f"{type(self).__name__}(value={self.value!r})"


class MutableStateFlow(StateFlow[T]):
    """State flow whose owner may replace the value."""

    def __init__(self, initial: T) -> None:
        self._value = initial
        self._collectors: set[_Collector[T]] = set()

    @property
    def value(self) -> T:
        return self._value

    @value.setter
    def value(self, value: T) -> None:
        self._emit(value)

    @property
    def subscription_count(self) -> int:
        return len(self._collectors)

    def __aiter__(self) -> AsyncIterator[T]:
        return self._collect()

    def update(self, function: Callable[[T], T]) -> None:
        """Replace the value with ``function(current)``."""
        self._emit(function(self._value))

    def as_state_flow(self) -> StateFlow[T]:
        """Expose this flow without its setters."""
        return _ReadonlyStateFlow(self)

    async def _collect(self) -> AsyncIterator[T]:
        collector = _Collector(self._value)
        self._collectors.add(collector)
        try:
            while True:
                yield await collector.receive()
        finally:
            self._collectors.discard(collector)

    def _emit(self, value: T) -> None:
        if value == self._value:
            return
        self._value = value
        for collector in list(self._collectors):
            collector.offer(value)


class _ReadonlyStateFlow(StateFlow[T]):
    """View that forwards reads to a mutable flow."""

    def __init__(self, source: MutableStateFlow[T]) -> None:
        self._source = source

    @property
    def value(self) -> T:
        return self._source.value

    @property
    def subscription_count(self) -> int:
        return self._source.subscription_count

    def __aiter__(self) -> AsyncIterator[T]:
        return aiter(self._source)

    def __repr__(self) -> str:
        return f"StateFlow(value={self._source.value!r})"
