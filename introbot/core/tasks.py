from __future__ import annotations

import asyncio
import logging
from typing import Optional


log = logging.getLogger(__name__)


def _running_task() -> Optional[asyncio.Task]:
    try:
        return asyncio.current_task()
    except RuntimeError:
        return None


class TaskSlot:
    """Holds at most one outstanding task.

    Assigning a new task cancels the previous one if it has not finished yet.
    A task replacing or clearing itself is released, not cancelled.
    """

    def __init__(self, name: str = "slot") -> None:
        self.name = name
        self._task: Optional[asyncio.Task] = None

    @property
    def task(self) -> Optional[asyncio.Task]:
        return self._task

    @property
    def busy(self) -> bool:
        return self._task is not None and not self._task.done()

    def set(self, task: Optional[asyncio.Task]) -> None:
        previous, self._task = self._task, task
        if previous is None or previous is task or previous.done():
            return
        if previous is _running_task():
            return
        log.debug("%s: cancelling replaced task %s", self.name, previous.get_name())
        previous.cancel()

    def cancel(self) -> None:
        self.set(None)

    def is_current(self, task: Optional[asyncio.Task] = None) -> bool:
        if task is None:
            task = _running_task()
        return task is not None and task is self._task
