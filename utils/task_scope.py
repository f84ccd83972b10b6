"""
Background task scope: an asyncio event loop running on its own thread.

Controllers own one scope each. Work launched from the GUI thread runs on
the scope's loop; blocking calls are pushed to the loop's default executor so
the loop itself stays responsive. Closing the scope cancels everything that
is still pending.
"""

from __future__ import annotations

import asyncio
import concurrent.futures
import functools
import logging
import threading
from collections.abc import Callable, Coroutine
from typing import Any, TypeVar

T = TypeVar("T")

logger = logging.getLogger(__name__)


class TaskScope:
    """Owns an event loop thread and the tasks launched on it."""

    def __init__(self, name: str = "task-scope") -> None:
        self.name = name
        self._loop = asyncio.new_event_loop()
        self._pending: set[concurrent.futures.Future[Any]] = set()
        self._pending_lock = threading.Lock()
        self._closed = False
        self._thread = threading.Thread(target=self._run_loop, name=name, daemon=True)
        self._thread.start()

    def _run_loop(self) -> None:
        asyncio.set_event_loop(self._loop)
        try:
            self._loop.run_forever()
        finally:
            self._loop.run_until_complete(self._loop.shutdown_default_executor())
            self._loop.close()

    @property
    def loop(self) -> asyncio.AbstractEventLoop:
        return self._loop

    @property
    def is_closed(self) -> bool:
        return self._closed

    def launch(self, coro: Coroutine[Any, Any, T]) -> concurrent.futures.Future[T]:
        """Schedule ``coro`` on the scope's loop and return a thread-safe future."""
        if self._closed:
            coro.close()
            raise RuntimeError(f"Task scope '{self.name}' is closed")
        future = asyncio.run_coroutine_threadsafe(coro, self._loop)
        with self._pending_lock:
            self._pending.add(future)
        future.add_done_callback(self._forget)
        return future

    def _forget(self, future: concurrent.futures.Future[Any]) -> None:
        with self._pending_lock:
            self._pending.discard(future)

    async def run_blocking(self, func: Callable[..., T], *args: Any, **kwargs: Any) -> T:
        """Run a blocking callable in the loop's executor and await its result."""
        call = functools.partial(func, *args, **kwargs)
        return await self._loop.run_in_executor(None, call)

    @property
    def pending_count(self) -> int:
        with self._pending_lock:
            return len(self._pending)

    def cancel_all(self) -> int:
        """Cancel every task that has not finished yet; returns how many were cancelled."""
        with self._pending_lock:
            pending = list(self._pending)
        cancelled = 0
        for future in pending:
            if future.cancel():
                cancelled += 1
        if cancelled:
            logger.debug("Cancelled %d task(s) in scope %s", cancelled, self.name)
        return cancelled

    def close(self, timeout: float = 5.0) -> None:
        """Cancel pending work, stop the loop and join its thread."""
        if self._closed:
            return
        self._closed = True
        self.cancel_all()
        if threading.current_thread() is self._thread:
            # Called from our own loop (e.g. a subscriber); cannot wait on ourselves
            self._loop.call_soon(self._loop.stop)
            return
        drained = asyncio.run_coroutine_threadsafe(self._cancel_remaining(), self._loop)
        try:
            drained.result(timeout)
        except concurrent.futures.TimeoutError:
            logger.warning("Tasks in scope %s ignored cancellation", self.name)
        self._loop.call_soon_threadsafe(self._loop.stop)
        self._thread.join(timeout)
        if self._thread.is_alive():
            logger.warning("Task scope %s did not stop within %.1fs", self.name, timeout)

    async def _cancel_remaining(self) -> None:
        current = asyncio.current_task()
        tasks = [task for task in asyncio.all_tasks() if task is not current]
        for task in tasks:
            task.cancel()
        await asyncio.gather(*tasks, return_exceptions=True)
