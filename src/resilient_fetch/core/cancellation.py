"""
Cancellation handles and the per-client registry of in-flight requests.
"""
import asyncio
import logging
from typing import Any, Awaitable, Dict, List, Optional, TypeVar

from ..errors import CancellationFailure

logger = logging.getLogger("resilient_fetch.cancellation")

T = TypeVar("T")


class CancellationHandle:
    """Abort signal for one logical request.

    Work started through :meth:`run` races the abort signal; aborting cancels
    the underlying task so the network call actually stops.
    """

    def __init__(self, key: str):
        self.key = key
        self._event = asyncio.Event()
        self._trigger: Optional[str] = None
        self._message: Optional[str] = None

    @property
    def aborted(self) -> bool:
        return self._event.is_set()

    @property
    def trigger(self) -> Optional[str]:
        return self._trigger

    def abort(self, trigger: str = "aborted", message: Optional[str] = None) -> None:
        """Signal cancellation. Only the first call has an effect."""
        if self._event.is_set():
            return
        self._trigger = trigger
        self._message = message
        self._event.set()
        logger.debug(f"CancellationHandle.abort: key={self.key}, trigger={trigger}")

    def failure(self) -> CancellationFailure:
        return CancellationFailure(self._trigger or "aborted", self._message)

    def raise_if_aborted(self) -> None:
        if self._event.is_set():
            raise self.failure()

    async def run(self, awaitable: Awaitable[T]) -> T:
        """Await ``awaitable`` unless the handle is aborted first.

        Raises CancellationFailure when the abort wins, including the case
        where both settle together, so an aborted request never yields a
        result.
        """
        if self._event.is_set():
            if asyncio.iscoroutine(awaitable):
                awaitable.close()
            raise self.failure()

        task = asyncio.ensure_future(awaitable)
        waiter = asyncio.ensure_future(self._event.wait())
        try:
            await asyncio.wait({task, waiter}, return_when=asyncio.FIRST_COMPLETED)
        finally:
            waiter.cancel()
            if not task.done():
                task.cancel()

        if self._event.is_set():
            if task.done() and not task.cancelled():
                # mark the exception retrieved
                task.exception()
            raise self.failure()

        return task.result()

    async def sleep(self, seconds: float) -> None:
        """Sleep for ``seconds``; abort ends the sleep with CancellationFailure."""
        if seconds <= 0:
            self.raise_if_aborted()
            return
        try:
            await asyncio.wait_for(self._event.wait(), timeout=seconds)
        except asyncio.TimeoutError:
            return
        raise self.failure()


class PendingRequestRegistry:
    """Map of request key to the handle of its in-flight request.

    Holds at most one handle per key. Owned by a single client and only
    touched from its event loop.
    """

    def __init__(self) -> None:
        self._handles: Dict[str, CancellationHandle] = {}

    def acquire(self, key: str) -> CancellationHandle:
        """Abort any request under ``key`` and register a fresh handle."""
        previous = self._handles.pop(key, None)
        if previous is not None:
            logger.debug(f"PendingRequestRegistry.acquire: superseding key={key}")
            previous.abort("superseded")

        handle = CancellationHandle(key)
        self._handles[key] = handle
        return handle

    def release(self, key: str, handle: CancellationHandle) -> None:
        """Drop ``handle`` if it is still the one registered under ``key``."""
        if self._handles.get(key) is handle:
            del self._handles[key]

    def abort(self, key: str, trigger: str = "aborted") -> bool:
        handle = self._handles.pop(key, None)
        if handle is None:
            return False
        handle.abort(trigger)
        return True

    def abort_all(self, trigger: str = "abort_all") -> int:
        """Abort and forget every registered handle. Returns how many."""
        handles = list(self._handles.values())
        self._handles.clear()
        for handle in handles:
            handle.abort(trigger)
        if handles:
            logger.debug(f"PendingRequestRegistry.abort_all: aborted {len(handles)} request(s)")
        return len(handles)

    def keys(self) -> List[str]:
        return list(self._handles)

    def get(self, key: str) -> Optional[CancellationHandle]:
        return self._handles.get(key)

    def __contains__(self, key: Any) -> bool:
        return key in self._handles

    def __len__(self) -> int:
        return len(self._handles)
