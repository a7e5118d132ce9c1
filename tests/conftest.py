"""Pytest configuration and shared fixtures."""
import asyncio
from collections.abc import AsyncIterator, Callable

import pytest

from appgpt.analytics import AnalyticsEvent, AnalyticsHelper
from appgpt.data import (
    ChatEntity,
    ChatMessageEntity,
    ChatMessageRepository,
    ChatRepository,
    MessageRole,
    Result,
)
from appgpt.flow import MutableStateFlow
from appgpt.ui import ChatScreenModel


def make_message(chat_id: str, content: str, role: MessageRole = MessageRole.USER) -> ChatMessageEntity:
    return ChatMessageEntity(chat_id=chat_id, role=role, content=content)


class FakeChatRepository(ChatRepository):
    """Chat repository with scriptable streams and call recording."""

    def __init__(self, chats: list[ChatEntity] | None = None):
        self.chats = MutableStateFlow(list(chats or []))
        self.create_calls = 0
        self.title_updates: list[tuple[str, str]] = []
        self.title_update_error: Exception | None = None
        self.all_chats_error: Exception | None = None

    def stream_all_chats(self) -> AsyncIterator[list[ChatEntity]]:
        async def stream():
            if self.all_chats_error is not None:
                raise self.all_chats_error
            async for chats in self.chats:
                yield chats
        return stream()

    def stream_chat(self, chat_id: str) -> AsyncIterator[ChatEntity | None]:
        async def stream():
            async for chats in self.chats:
                yield next((c for c in chats if c.id == chat_id), None)
        return stream()

    async def create_chat(self) -> str:
        self.create_calls += 1
        chat = ChatEntity(id=f"created-{self.create_calls}")
        self.chats.value = [chat, *self.chats.value]
        return chat.id

    async def update_chat_title(self, chat_id: str, title: str) -> None:
        if self.title_update_error is not None:
            raise self.title_update_error
        self.title_updates.append((chat_id, title))


class FakeChatMessageRepository(ChatMessageRepository):
    """Message repository with gated streams and controllable outcomes."""

    def __init__(self):
        self._flows: dict[str, MutableStateFlow[list[ChatMessageEntity]]] = {}
        self.stream_gates: dict[str, asyncio.Event] = {}
        self.stream_errors: dict[str, Exception] = {}
        self.send_calls: list[tuple[str, str]] = []
        self.retry_calls: list[str] = []
        self.title_calls: list[str] = []
        self.send_result: Result[None] = Result.success()
        self.send_error: Exception | None = None
        self.send_gate: asyncio.Event | None = None
        self.on_send: Callable[[str, str], None] | None = None
        self.title_result: Result[str] = Result.success("Generated title")

    def flow_for(self, chat_id: str) -> MutableStateFlow[list[ChatMessageEntity]]:
        if chat_id not in self._flows:
            self._flows[chat_id] = MutableStateFlow([])
        return self._flows[chat_id]

    def set_messages(self, chat_id: str, *contents: str) -> list[ChatMessageEntity]:
        messages = [make_message(chat_id, content) for content in contents]
        self.flow_for(chat_id).value = messages
        return messages

    def stream_messages(self, chat_id: str) -> AsyncIterator[list[ChatMessageEntity]]:
        async def stream():
            gate = self.stream_gates.get(chat_id)
            if gate is not None:
                await gate.wait()
            if chat_id in self.stream_errors:
                raise self.stream_errors[chat_id]
            async for messages in self.flow_for(chat_id):
                yield messages
        return stream()

    async def send_message(self, chat_id: str, content: str) -> Result[None]:
        self.send_calls.append((chat_id, content))
        if self.on_send is not None:
            self.on_send(chat_id, content)
        if self.send_gate is not None:
            await self.send_gate.wait()
        if self.send_error is not None:
            raise self.send_error
        return self.send_result

    async def retry_send_message(self, chat_id: str) -> None:
        self.retry_calls.append(chat_id)
        if self.send_gate is not None:
            await self.send_gate.wait()

    async def generate_title_from_chat(self, chat_id: str) -> Result[str]:
        self.title_calls.append(chat_id)
        return self.title_result


class RecordingAnalyticsHelper(AnalyticsHelper):
    """Keeps every event in memory."""

    def __init__(self):
        self.events: list[AnalyticsEvent] = []

    def log_event(self, event: AnalyticsEvent) -> None:
        self.events.append(event)

    @property
    def types(self) -> list[str]:
        return [event.type.value for event in self.events]


class FailingAnalyticsHelper(AnalyticsHelper):
    """Raises on every event."""

    def log_event(self, event: AnalyticsEvent) -> None:
        raise RuntimeError("analytics backend down")


async def _wait_until(predicate: Callable[[], bool], timeout: float = 1.0) -> None:
    loop = asyncio.get_running_loop()
    deadline = loop.time() + timeout
    while not predicate():
        if loop.time() > deadline:
            raise AssertionError("Condition not met before timeout")
        await asyncio.sleep(0.001)


async def _settle(ticks: int = 20) -> None:
    for _ in range(ticks):
        await asyncio.sleep(0)


@pytest.fixture
def wait_until():
    """Return a coroutine function polling a predicate until it holds."""
    return _wait_until


@pytest.fixture
def settle():
    """Return a coroutine function letting pending tasks run."""
    return _settle


@pytest.fixture
def chat_a():
    return ChatEntity(id="a", title="Chat A")


@pytest.fixture
def chat_b():
    return ChatEntity(id="b", title="Chat B")


@pytest.fixture
def chat_repository():
    return FakeChatRepository()


@pytest.fixture
def message_repository():
    return FakeChatMessageRepository()


@pytest.fixture
def analytics():
    return RecordingAnalyticsHelper()


@pytest.fixture
def failing_analytics():
    return FailingAnalyticsHelper()


@pytest.fixture
def shared_texts():
    return []


@pytest.fixture
async def make_model(chat_repository, message_repository, analytics, shared_texts):
    """Build chat screen models that are disposed after the test."""
    models: list[ChatScreenModel] = []

    def _make(**kwargs) -> ChatScreenModel:
        kwargs.setdefault("share_text", shared_texts.append)
        model = ChatScreenModel(chat_repository, message_repository, analytics, **kwargs)
        models.append(model)
        return model

    yield _make

    for model in models:
        model.on_dispose()
        await model.scope.join()
