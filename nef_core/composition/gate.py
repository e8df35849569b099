"""At-most-once initialization gate shared by blocking and awaiting callers."""

from __future__ import annotations

import asyncio
import threading
from typing import Awaitable, Callable, Generic, Iterable, TypeVar

from nef_core.errors import CompositionStateError, ContainerDisposedError

T = TypeVar("T")
G = TypeVar("G")


class RealizationGate(Generic[T]):
    """Hold a value that is computed exactly once, or not at all.

    The value is either ``None`` (not computed yet) or a frozen tuple. The
    commit step always runs under a thread lock with a double check, so a
    blocking caller and an awaiting caller racing each other still compute
    once. Awaiting callers additionally queue on an ``asyncio.Lock`` so the
    asynchronous gathering step is not started twice either. A failed
    computation leaves the gate empty and retryable.

    ``close`` retires the gate: it waits for an in-flight computation, hands
    back its value and rejects every later computation.
    """

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._async_lock: asyncio.Lock | None = None
        self._async_loop: asyncio.AbstractEventLoop | None = None
        self._value: tuple[T, ...] | None = None
        self._closed = False
        self._computing_thread: int | None = None
        self._gathering_task: asyncio.Task | None = None

    @property
    def done(self) -> bool:
        return self._value is not None

    @property
    def value(self) -> tuple[T, ...] | None:
        return self._value

    def run(self, compute: Callable[[], Iterable[T]]) -> tuple[T, ...]:
        """Return the value, computing it on the first call."""

        value = self._value
        if value is not None:
            return value
        self._check_reentry()

        with self._lock:
            if self._closed:
                raise ContainerDisposedError("container has been disposed")
            if self._value is None:
                self._computing_thread = threading.get_ident()
                try:
                    self._value = tuple(compute())
                finally:
                    self._computing_thread = None
            return self._value

    async def run_async(
        self,
        gather: Callable[[], Awaitable[G]],
        commit: Callable[[G], Iterable[T]],
    ) -> tuple[T, ...]:
        """Awaitable variant: ``gather`` may suspend, ``commit`` may not."""

        value = self._value
        if value is not None:
            return value
        current = asyncio.current_task()
        if current is not None and current is self._gathering_task:
            raise CompositionStateError("re-entrant realization detected")

        async with self._ensure_async_lock():
            if self._value is not None:
                return self._value
            if self._closed:
                raise ContainerDisposedError("container has been disposed")
            self._gathering_task = current
            try:
                gathered = await gather()
            finally:
                self._gathering_task = None
            return self.run(lambda: commit(gathered))

    def close(self) -> tuple[T, ...] | None:
        """Retire the gate and return the realized value, or ``()`` if none.

        Returns ``None`` when the gate was already closed.
        """

        self._check_reentry()
        with self._lock:
            if self._closed:
                return None
            self._closed = True
            value, self._value = self._value or (), None
            return value

    def _check_reentry(self) -> None:
        if self._computing_thread == threading.get_ident():
            raise CompositionStateError("re-entrant realization detected")

    def _ensure_async_lock(self) -> asyncio.Lock:
        # one lock per event loop; asyncio locks bind to the loop they first wait on
        loop = asyncio.get_running_loop()
        if self._async_lock is None or self._async_loop is not loop:
            self._async_lock = asyncio.Lock()
            self._async_loop = loop
        return self._async_lock
