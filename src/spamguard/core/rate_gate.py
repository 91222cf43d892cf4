"""Fixed-window admission gate for external classifier calls."""

from __future__ import annotations

import asyncio
import logging
import threading
from typing import Optional

LOGGER = logging.getLogger(__name__)


class RateGate:
    """Bound the number of admitted calls per fixed time window.

    The counter is reset by a recurring timer, not by call volume. A denied
    call is dropped, the caller falls back to whatever verdict it already has.
    """

    def __init__(self, max_calls: int = 30, window_ms: int = 60_000) -> None:
        if max_calls <= 0:
            raise ValueError("max_calls must be positive")
        if window_ms <= 0:
            raise ValueError("window_ms must be positive")
        self._max_calls = max_calls
        self._window_seconds = window_ms / 1000
        self._calls = 0
        self._lock = threading.Lock()
        self._task: Optional[asyncio.Task] = None

    @property
    def calls_this_window(self) -> int:
        return self._calls

    def try_admit(self) -> bool:
        """Admit and count one call, or refuse once the ceiling is reached."""

        with self._lock:
            if self._calls >= self._max_calls:
                return False
            self._calls += 1
            return True

    def reset(self) -> None:
        with self._lock:
            self._calls = 0

    async def _reset_loop(self) -> None:
        while True:
            await asyncio.sleep(self._window_seconds)
            self.reset()

    def start(self) -> None:
        """Start the window-reset timer on the running event loop."""

        if self._task is not None:
            return
        self._task = asyncio.get_running_loop().create_task(self._reset_loop())
        LOGGER.debug("Rate gate started (%s calls / %ss)", self._max_calls, self._window_seconds)

    async def stop(self) -> None:
        if self._task is None:
            return
        self._task.cancel()
        try:
            await self._task
        except asyncio.CancelledError:
            pass
        self._task = None
