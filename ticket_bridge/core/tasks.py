"""
Registry of long-lived propagation tasks, one per external ticket.
"""

from typing import Awaitable, Dict, List
import asyncio
import logging


logger = logging.getLogger(__name__)


class PropagationRegistry:
    """
    Tracks the asyncio task that propagates each external ticket.

    Tasks are keyed by external ticket id. A key can hold at most one live
    task; finished tasks remove themselves. ``drain`` cancels and awaits every
    task and is what the bridge's shutdown path calls; it leaves the registry
    closed until ``reopen``.
    """

    def __init__(self):
        self.running_tasks: Dict[str, asyncio.Task] = {}
        self.is_closed = False

    def spawn(self, key: str, coro: Awaitable[None]) -> asyncio.Task:
        """Start ``coro`` as the task for ``key``."""
        if self.is_closed:
            coro.close()
            raise RuntimeError("Propagation registry is closed")

        existing = self.running_tasks.get(key)
        if existing is not None and not existing.done():
            coro.close()
            raise RuntimeError(f"Propagation task already running for {key}")

        task = asyncio.create_task(coro, name=f"propagate-{key}")
        self.running_tasks[key] = task
        task.add_done_callback(lambda t: self._discard(key, t))
        logger.debug(f"Spawned propagation task: {key}")
        return task

    def is_running(self, key: str) -> bool:
        task = self.running_tasks.get(key)
        return task is not None and not task.done()

    def keys(self) -> List[str]:
        return [key for key, task in self.running_tasks.items() if not task.done()]

    def __len__(self) -> int:
        return len(self.keys())

    async def cancel(self, key: str) -> None:
        """Cancel a single ticket's task and wait for it to finish."""
        task = self.running_tasks.get(key)
        if task is None or task.done():
            return
        task.cancel()
        try:
            await task
        except asyncio.CancelledError:
            logger.info(f"Cancelled propagation task: {key}")

    async def drain(self) -> None:
        """Cancel all running tasks, wait for them to exit and close the registry."""
        self.is_closed = True
        tasks = dict(self.running_tasks)
        for task in tasks.values():
            if not task.done():
                task.cancel()

        results = await asyncio.gather(*tasks.values(), return_exceptions=True)
        for key, result in zip(tasks, results):
            if isinstance(result, asyncio.CancelledError):
                logger.info(f"Cancelled propagation task: {key}")
            elif isinstance(result, Exception):
                logger.error(f"Propagation task {key} ended with error: {result}")

        self.running_tasks.clear()

    def reopen(self) -> None:
        """Allow new tasks again after a drain."""
        self.is_closed = False

    def _discard(self, key: str, task: asyncio.Task) -> None:
        if self.running_tasks.get(key) is task:
            del self.running_tasks[key]
