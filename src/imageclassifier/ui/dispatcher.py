"""Key event dispatch.

Architecture:
    GPIO edge thread / HTTP handlers -> KeyEventDispatcher.post() -> single worker ("ui-dispatch") -> handler

Every key event runs on the same worker thread, one at a time, so the
handler's state needs no locking. Events posted while a handler runs wait
in the executor queue.
"""

from __future__ import annotations

import asyncio
import logging
import threading
from concurrent.futures import Future, ThreadPoolExecutor
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from collections.abc import Callable

logger = logging.getLogger(__name__)

KEYCODE_ENTER: int = 66


class KeyEventDispatcher:
    """Serializes key-up events onto one dispatch thread."""

    def __init__(
        self,
        handler: Callable[[int], bool],
        on_fault: Callable[[], object] | None = None,
    ) -> None:
        self._handler = handler
        self._on_fault = on_fault
        self._executor = ThreadPoolExecutor(
            max_workers=1,
            thread_name_prefix="ui-dispatch",
        )
        self._pending: int = 0
        self._counter_lock = threading.Lock()

    def post(self, keycode: int) -> Future[bool]:
        """Queue a key-up event and return a future for the handler's result.

        A handler exception is logged here, ``on_fault`` runs on the dispatch
        thread, and the exception is re-raised from the future.
        """
        with self._counter_lock:
            self._pending += 1
        future = self._executor.submit(self._dispatch, keycode)
        future.add_done_callback(self._on_done)
        return future

    async def dispatch(self, keycode: int) -> bool:
        """Post a key-up event and await its result from async code."""
        return await asyncio.wrap_future(self.post(keycode))

    @property
    def pending(self) -> int:
        """Number of events queued or running."""
        with self._counter_lock:
            return self._pending

    def shutdown(self) -> None:
        """Finish queued events and stop the dispatch thread."""
        self._executor.shutdown(wait=True)

    def _dispatch(self, keycode: int) -> bool:
        try:
            return self._handler(keycode)
        except Exception:
            logger.exception("Unhandled fault while dispatching keycode %d", keycode)
            self._recover()
            raise

    def _recover(self) -> None:
        if self._on_fault is None:
            return
        try:
            self._on_fault()
        except Exception:
            logger.exception("Recovery after fault failed")

    def _on_done(self, _future: Future[bool]) -> None:
        with self._counter_lock:
            self._pending -= 1
