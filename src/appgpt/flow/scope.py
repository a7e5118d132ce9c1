"""Task ownership for a screen.

Every subscription and operation a screen starts is launched through its
``TaskScope``. Cancelling the scope cancels all of them; nothing launched
afterwards ever runs.
"""

import asyncio
from collections.abc import Coroutine
from typing import Any

from ..utils.logging import get_logger

logger = get_logger("flow.scope")


class TaskScope:
    """Owns the asyncio tasks of one screen instance."""

    def __init__(self, name: str = "scope") -> None:
        self._name = name
        self._tasks: set[asyncio.Task] = set()
        self._active = True

    @property
    def name(self) -> str:
        return self._name

    @property
    def is_active(self) -> bool:
        """False once ``cancel`` has been called."""
        return self._active

    @property
    def task_count(self) -> int:
        return len(self._tasks)

    def launch(
        self,
        coro: Coroutine[Any, Any, Any],
        name: str | None = None
    ) -> asyncio.Task | None:
        """Start ``coro`` as a task owned by this scope.

        Args:
            coro: Coroutine to run
            name: Optional task name used in logs

        Returns:
            The created task, or None when the scope is already cancelled
        """
        if not self._active:
            coro.close()
            logger.debug("launch_after_cancel", scope=self._name, task=name)
            return None

        task = asyncio.get_running_loop().create_task(coro, name=name)
        self._tasks.add(task)
        task.add_done_callback(self._on_task_done)
        return task

    def _on_task_done(self, task: asyncio.Task) -> None:
        self._tasks.discard(task)
        if task.cancelled():
            return
        error = task.exception()
        if error is not None:
            logger.error(
                "task_failed",
                scope=self._name,
                task=task.get_name(),
                error=repr(error),
            )

    def cancel(self) -> None:
        """Cancel every owned task. Safe to call more than once."""
        if not self._active:
            return
        self._active = False
        pending = list(self._tasks)
        for task in pending:
            task.cancel()
        logger.debug("scope_cancelled", scope=self._name, cancelled=len(pending))

    async def join(self) -> None:
        """Wait until every owned task has finished.

        Subscriptions never finish on their own, so this is normally awaited
        after ``cancel``.
        """
        while self._tasks:
            await asyncio.gather(*list(self._tasks), return_exceptions=True)
