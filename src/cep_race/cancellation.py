"""Cooperative cancellation signal handed to every provider attempt."""
from __future__ import annotations

import asyncio
from collections.abc import Callable
from threading import Event, Lock

__all__ = ["CancelToken"]


class CancelToken:
    """Advisory cancellation flag.

    ``cancel()`` may be called from the event loop or from a worker thread.
    Providers poll :attr:`cancelled`, await :meth:`wait`, or register a
    callback (for example to close an open HTTP response).
    """

    def __init__(self) -> None:
        self._event = Event()
        self._lock = Lock()
        self._callbacks: list[Callable[[], None]] = []
        self._waiters: list[asyncio.Future[None]] = []

    @property
    def cancelled(self) -> bool:
        return self._event.is_set()

    def cancel(self) -> None:
        with self._lock:
            if self._event.is_set():
                return
            self._event.set()
            callbacks = tuple(self._callbacks)
            waiters = tuple(self._waiters)
            self._callbacks.clear()
            self._waiters.clear()
        for waiter in waiters:
            loop = waiter.get_loop()
            if loop.is_closed():
                continue
            loop.call_soon_threadsafe(_resolve_waiter, waiter)
        for callback in callbacks:
            callback()

    def add_callback(self, callback: Callable[[], None]) -> None:
        """Run ``callback`` on cancellation (immediately if already cancelled)."""

        with self._lock:
            if not self._event.is_set():
                self._callbacks.append(callback)
                return
        callback()

    async def wait(self) -> None:
        """Suspend until the token is cancelled."""

        loop = asyncio.get_running_loop()
        with self._lock:
            if self._event.is_set():
                return
            waiter: asyncio.Future[None] = loop.create_future()
            self._waiters.append(waiter)
        try:
            await waiter
        finally:
            with self._lock:
                if waiter in self._waiters:
                    self._waiters.remove(waiter)

    async def sleep(self, delay: float) -> bool:
        """Sleep for ``delay`` seconds unless cancelled first.

        Returns ``True`` when the full delay elapsed, ``False`` when the token
        was cancelled in the meantime.
        """

        if self.cancelled:
            return False
        if delay <= 0:
            await asyncio.sleep(0)
            return not self.cancelled
        try:
            await asyncio.wait_for(self.wait(), timeout=delay)
        except asyncio.TimeoutError:
            return True
        return False


def _resolve_waiter(waiter: asyncio.Future[None]) -> None:
    if not waiter.done():
        waiter.set_result(None)
