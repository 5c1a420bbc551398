"""Background task purging expired entries at a fixed interval."""

from __future__ import annotations

import asyncio
import contextlib
import logging
from datetime import timedelta
from typing import TYPE_CHECKING

from .errors import KeyvError


if TYPE_CHECKING:
    from .backends import Backend


logger = logging.getLogger(__name__)


class ExpirySweeper:
    """Periodically call :meth:`Backend.purge_expired` on a running event loop."""

    def __init__(self, backend: Backend, interval: timedelta | float) -> None:
        super().__init__()
        seconds = interval.total_seconds() if isinstance(interval, timedelta) else float(interval)
        if seconds <= 0:
            msg = "sweep interval must be positive"
            raise ValueError(msg)
        self._backend = backend
        self._interval = seconds
        self._task: asyncio.Task[None] | None = None

    @property
    def running(self) -> bool:
        return self._task is not None and not self._task.done()

    def start(self) -> None:
        if self.running:
            return
        self._task = asyncio.get_running_loop().create_task(self._run(), name="keyv-expiry-sweeper")

    async def stop(self) -> None:
        task, self._task = self._task, None
        if task is None:
            return
        _ = task.cancel()
        with contextlib.suppress(asyncio.CancelledError):
            await task

    async def sweep_once(self) -> int:
        """Run one purge, logging instead of raising backend failures."""
        try:
            removed = await self._backend.purge_expired()
        except KeyvError:
            logger.warning("expiry sweep failed", exc_info=True)
            return 0
        if removed:
            logger.debug("expiry sweep removed %d entries", removed)
        return removed

    async def _run(self) -> None:
        while True:
            await asyncio.sleep(self._interval)
            _ = await self.sweep_once()
