"""Stream operators used to derive screen state.

Streams are plain async iterables. The operators here are async generators,
so they start work only when collected and release it when the collector
stops.
"""

import asyncio
from collections.abc import AsyncIterable, AsyncIterator, Callable
from typing import Any, TypeVar

from ..errors import EmptyStreamError
from ..utils.logging import get_logger
from .scope import TaskScope
from .state_flow import MutableStateFlow, StateFlow

logger = get_logger("flow.operators")

T = TypeVar("T")
R = TypeVar("R")

_OUTER = 0
_COMPLETE = object()
_UNSET = object()


class _Failure:
    __slots__ = ("error",)

    def __init__(self, error: BaseException) -> None:
        self.error = error


async def just(value: T) -> AsyncIterator[T]:
    """Emit ``value`` once."""
    yield value


async def map_stream(source: AsyncIterable[T], transform: Callable[[T], R]) -> AsyncIterator[R]:
    """Apply ``transform`` to every emission."""
    async for item in source:
        yield transform(item)


async def distinct_until_changed(source: AsyncIterable[T]) -> AsyncIterator[T]:
    """Drop emissions equal to the previous one."""
    previous: Any = _UNSET
    async for item in source:
        if previous is not _UNSET and item == previous:
            continue
        previous = item
        yield item


async def start_with(value: T, source: AsyncIterable[T]) -> AsyncIterator[T]:
    """Emit ``value`` before anything from ``source``."""
    yield value
    async for item in source:
        yield item


async def catch(
    source: AsyncIterable[T],
    handler: Callable[[Exception], R]
) -> AsyncIterator[T | R]:
    """Replace a failure of ``source`` with a final ``handler(error)`` emission."""
    try:
        async for item in source:
            yield item
    except Exception as e:
        logger.warning("stream_failed", error=repr(e))
        yield handler(e)


async def flat_map_latest(
    source: AsyncIterable[T],
    transform: Callable[[T], AsyncIterable[R]]
) -> AsyncIterator[R]:
    """Switch to the stream built from the newest upstream value.

    Each upstream value gets a generation number. When a new value arrives the
    previous inner subscription is cancelled, and anything it already queued is
    dropped because its generation no longer matches, so a superseded stream
    can never emit after its successor has been selected.

    Completes once the upstream and the last inner stream complete. A failure
    in either is raised to the collector. When collection stops, both helper
    tasks are cancelled and awaited, so a scope that owns the collector is
    done with them once its own task is.
    """
    queue: asyncio.Queue[tuple[int, Any]] = asyncio.Queue()
    generation = 0
    inner: asyncio.Task | None = None

    async def collect_inner(tag: int, stream: AsyncIterable[R]) -> None:
        try:
            async for item in stream:
                queue.put_nowait((tag, item))
        except Exception as e:
            queue.put_nowait((tag, _Failure(e)))

    async def collect_outer() -> None:
        nonlocal generation, inner
        try:
            async for key in source:
                if inner is not None:
                    inner.cancel()
                generation += 1
                inner = asyncio.create_task(collect_inner(generation, transform(key)))
            if inner is not None:
                await inner
        except Exception as e:
            queue.put_nowait((_OUTER, _Failure(e)))
        else:
            queue.put_nowait((_OUTER, _COMPLETE))

    outer = asyncio.create_task(collect_outer())
    try:
        while True:
            tag, item = await queue.get()
            if tag == _OUTER:
                if isinstance(item, _Failure):
                    raise item.error
                return
            if tag != generation:
                continue
            if isinstance(item, _Failure):
                raise item.error
            yield item
    finally:
        # Collectors are finished before the caller sees this generator end
        tasks = [task for task in (outer, inner) if task is not None]
        for task in tasks:
            task.cancel()
        await asyncio.gather(*tasks, return_exceptions=True)


async def first(source: AsyncIterable[T]) -> T:
    """Return the first emission of ``source`` and stop collecting it.

    Raises:
        EmptyStreamError: If ``source`` completes without emitting
    """
    iterator = aiter(source)
    try:
        return await anext(iterator)
    except StopAsyncIteration:
        raise EmptyStreamError("Stream completed without emitting a value") from None
    finally:
        aclose = getattr(iterator, "aclose", None)
        if aclose is not None:
            await aclose()


def state_in(source: AsyncIterable[T], scope: TaskScope, initial: T) -> StateFlow[T]:
    """Collect ``source`` eagerly in ``scope`` into a hot state flow.

    Args:
        source: Stream to collect
        scope: Scope that owns the collection for its lifetime
        initial: Value exposed until ``source`` first emits

    Returns:
        Read-only state flow shared by every observer
    """
    state = MutableStateFlow(initial)

    async def collect() -> None:
        async for value in source:
            state.value = value

    scope.launch(collect(), name=f"{scope.name}.state_in")
    return state.as_state_flow()
