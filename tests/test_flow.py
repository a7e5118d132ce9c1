"""Unit tests for state flows, stream operators and task scopes."""
import asyncio

import pytest

from appgpt.errors import EmptyStreamError
from appgpt.flow import (
    MutableStateFlow,
    StateFlow,
    TaskScope,
    catch,
    distinct_until_changed,
    first,
    flat_map_latest,
    just,
    map_stream,
    start_with,
    state_in,
)


async def from_items(*items):
    for item in items:
        yield item


async def collect(source) -> list:
    return [item async for item in source]


class TestStateFlow:
    """Tests for MutableStateFlow."""

    @pytest.mark.asyncio
    async def test_new_collector_receives_current_value(self):
        """Test that collectors start from the latest value."""
        flow = MutableStateFlow(1)
        flow.value = 2

        assert await first(flow) == 2

    @pytest.mark.asyncio
    async def test_equal_values_are_not_emitted(self, settle):
        """Test that setting an equal value does not wake collectors."""
        flow = MutableStateFlow("a")
        seen: list[str] = []

        async def observe():
            async for value in flow:
                seen.append(value)

        task = asyncio.create_task(observe())
        await settle()
        flow.value = "a"
        await settle()
        flow.value = "b"
        await settle()

        assert seen == ["a", "b"]
        task.cancel()
        await asyncio.gather(task, return_exceptions=True)

    @pytest.mark.asyncio
    async def test_slow_collector_sees_only_latest(self):
        """Test that values written between collector steps are conflated."""
        flow = MutableStateFlow(0)
        iterator = aiter(flow)

        assert await anext(iterator) == 0
        flow.value = 1
        flow.value = 2
        flow.value = 3

        assert await anext(iterator) == 3
        await iterator.aclose()

    @pytest.mark.asyncio
    async def test_update_applies_function(self):
        """Test that update derives the new value from the current one."""
        flow = MutableStateFlow(10)

        flow.update(lambda value: value + 5)

        assert flow.value == 15

    @pytest.mark.asyncio
    async def test_subscription_count_tracks_collectors(self):
        """Test that closing a collector releases its subscription."""
        flow = MutableStateFlow(0)
        iterator = aiter(flow)
        await anext(iterator)

        assert flow.subscription_count == 1
        await iterator.aclose()
        assert flow.subscription_count == 0

    def test_read_only_view_has_no_setter(self):
        """Test that the exposed view cannot be written."""
        flow = MutableStateFlow(1)
        view = flow.as_state_flow()

        with pytest.raises(AttributeError):
            view.value = 2
        assert not hasattr(view, "update")

        flow.value = 3
        assert view.value == 3

    @pytest.mark.asyncio
    async def test_read_only_view_shares_collectors(self):
        """Test that the view is a StateFlow backed by the mutable flow's collectors."""
        flow = MutableStateFlow("a")
        view = flow.as_state_flow()
        iterator = aiter(view)

        assert isinstance(view, StateFlow)
        assert await anext(iterator) == "a"
        assert view.subscription_count == flow.subscription_count == 1

        flow.value = "b"
        assert await anext(iterator) == "b"
        await iterator.aclose()
        assert view.subscription_count == 0

    def test_state_flow_is_abstract(self):
        """Test that StateFlow only describes the read side."""
        with pytest.raises(TypeError):
            StateFlow()


class TestOperators:
    """Tests for the stream operators."""

    @pytest.mark.asyncio
    async def test_just_emits_once(self):
        """Test that just emits a single value and completes."""
        assert await collect(just("x")) == ["x"]

    @pytest.mark.asyncio
    async def test_map_stream(self):
        """Test that map_stream transforms every item."""
        assert await collect(map_stream(from_items(1, 2, 3), lambda x: x * 10)) == [10, 20, 30]

    @pytest.mark.asyncio
    async def test_distinct_until_changed(self):
        """Test that only consecutive duplicates are dropped."""
        result = await collect(distinct_until_changed(from_items(1, 1, 2, 2, 1)))

        assert result == [1, 2, 1]

    @pytest.mark.asyncio
    async def test_start_with(self):
        """Test that the seed value comes first."""
        assert await collect(start_with("loading", from_items("done"))) == ["loading", "done"]

    @pytest.mark.asyncio
    async def test_catch_replaces_failure(self):
        """Test that a failure becomes a final handler emission."""
        async def failing():
            yield 1
            raise RuntimeError("boom")

        result = await collect(catch(failing(), lambda e: f"error: {e}"))

        assert result == [1, "error: boom"]

    @pytest.mark.asyncio
    async def test_first_returns_first_item(self):
        """Test that first stops after one item."""
        closed = []

        async def endless():
            try:
                n = 0
                while True:
                    yield n
                    n += 1
            finally:
                closed.append(True)

        assert await first(endless()) == 0
        assert closed == [True]

    @pytest.mark.asyncio
    async def test_first_of_empty_stream_raises(self):
        """Test that an empty stream raises EmptyStreamError."""
        with pytest.raises(EmptyStreamError):
            await first(from_items())

    @pytest.mark.asyncio
    async def test_first_unsubscribes_from_state_flow(self):
        """Test that first releases its state flow subscription."""
        flow = MutableStateFlow("value")

        assert await first(flow) == "value"
        assert flow.subscription_count == 0


class TestFlatMapLatest:
    """Tests for flat_map_latest."""

    @pytest.mark.asyncio
    async def test_follows_each_key_to_completion(self):
        """Test that finite inner streams are concatenated in key order."""
        result = await collect(
            flat_map_latest(from_items("a"), lambda key: from_items(f"{key}1", f"{key}2"))
        )

        assert result == ["a1", "a2"]

    @pytest.mark.asyncio
    async def test_new_key_cancels_previous_inner_stream(self, wait_until, settle):
        """Test that a superseded inner stream never emits again."""
        keys = MutableStateFlow("a")
        sources = {"a": MutableStateFlow("a0"), "b": MutableStateFlow("b0")}
        seen: list[str] = []

        async def observe():
            async for item in flat_map_latest(keys, lambda key: sources[key]):
                seen.append(item)

        task = asyncio.create_task(observe())
        await wait_until(lambda: seen == ["a0"])

        keys.value = "b"
        await wait_until(lambda: seen[-1] == "b0")
        await settle()
        assert sources["a"].subscription_count == 0

        sources["a"].value = "a1"
        sources["b"].value = "b1"
        await wait_until(lambda: seen[-1] == "b1")

        assert "a1" not in seen
        task.cancel()
        await asyncio.gather(task, return_exceptions=True)

    @pytest.mark.asyncio
    async def test_slow_previous_inner_stream_is_dropped(self, wait_until, settle):
        """Test that a stream resolving after its successor is ignored."""
        keys = MutableStateFlow("a")
        gates = {"a": asyncio.Event(), "b": asyncio.Event()}
        seen: list[str] = []

        async def delayed(key):
            await gates[key].wait()
            yield key

        async def observe():
            async for item in flat_map_latest(keys, delayed):
                seen.append(item)

        task = asyncio.create_task(observe())
        await settle()
        keys.value = "b"
        await settle()

        gates["b"].set()
        await wait_until(lambda: seen == ["b"])
        gates["a"].set()
        await settle()

        assert seen == ["b"]
        task.cancel()
        await asyncio.gather(task, return_exceptions=True)

    @pytest.mark.asyncio
    async def test_inner_failure_is_raised(self):
        """Test that an inner stream error reaches the collector."""
        async def failing(_key):
            raise ValueError("inner")
            yield

        with pytest.raises(ValueError, match="inner"):
            await collect(flat_map_latest(from_items("a"), failing))


    @pytest.mark.asyncio
    async def test_stopping_collection_releases_inner_subscriptions(self, wait_until):
        """Test that helper tasks are finished by the time the owning scope joins."""
        scope = TaskScope("test")
        keys = MutableStateFlow("a")
        sources = {"a": MutableStateFlow("a0")}
        state = state_in(flat_map_latest(keys, lambda key: sources[key]), scope, "")
        await wait_until(lambda: state.value == "a0")
        assert sources["a"].subscription_count == 1

        scope.cancel()
        await scope.join()

        assert keys.subscription_count == 0
        assert sources["a"].subscription_count == 0


class TestStateIn:
    """Tests for state_in."""

    @pytest.mark.asyncio
    async def test_exposes_initial_then_latest(self, wait_until):
        """Test that the state starts at the initial value and follows the source."""
        scope = TaskScope("test")
        source = MutableStateFlow(1)
        state = state_in(map_stream(source, lambda x: x * 2), scope, 0)

        assert state.value == 0
        await wait_until(lambda: state.value == 2)
        source.value = 5
        await wait_until(lambda: state.value == 10)

        scope.cancel()
        await scope.join()

    @pytest.mark.asyncio
    async def test_observers_share_one_upstream_subscription(self, settle):
        """Test that many observers do not multiply upstream subscriptions."""
        scope = TaskScope("test")
        source = MutableStateFlow("x")
        state = state_in(source, scope, "")

        observers = [asyncio.create_task(first(state)) for _ in range(5)]
        await asyncio.gather(*observers)
        await settle()

        assert source.subscription_count == 1

        scope.cancel()
        await scope.join()
        await settle()
        assert source.subscription_count == 0


class TestTaskScope:
    """Tests for TaskScope."""

    @pytest.mark.asyncio
    async def test_cancel_stops_tasks_and_is_idempotent(self):
        """Test that cancel stops owned tasks and can be repeated."""
        scope = TaskScope("test")
        task = scope.launch(asyncio.sleep(60))

        scope.cancel()
        scope.cancel()
        await scope.join()

        assert task.cancelled()
        assert not scope.is_active
        assert scope.task_count == 0

    @pytest.mark.asyncio
    async def test_launch_after_cancel_does_not_run(self):
        """Test that coroutines launched after cancel never start."""
        scope = TaskScope("test")
        scope.cancel()
        ran = []

        async def work():
            ran.append(True)

        assert scope.launch(work()) is None
        await asyncio.sleep(0)
        assert ran == []

    @pytest.mark.asyncio
    async def test_failed_task_does_not_cancel_siblings(self, settle):
        """Test that one failing task leaves the rest of the scope running."""
        scope = TaskScope("test")

        async def fail():
            raise RuntimeError("boom")

        failing = scope.launch(fail(), name="failing")
        sibling = scope.launch(asyncio.sleep(60), name="sibling")
        await settle()

        assert failing.done()
        assert isinstance(failing.exception(), RuntimeError)
        assert not sibling.done()
        assert scope.is_active

        scope.cancel()
        await scope.join()

    @pytest.mark.asyncio
    async def test_join_waits_for_completion(self):
        """Test that join returns after owned tasks finish."""
        scope = TaskScope("test")
        done = []

        async def work():
            await asyncio.sleep(0)
            done.append(True)

        scope.launch(work())
        await scope.join()

        assert done == [True]
