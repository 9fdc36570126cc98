"""Health check scheduler — one periodic asyncio task per probe.

Each probe gets its own loop (sleep interval → execute), so a slow probe
never delays another probe's schedule. Re-scheduling a name cancels the
old loop first; stop_all() cancels everything.
"""

from __future__ import annotations

import asyncio
import logging
import threading

from .executor import ProbeExecutor
from .models import ProbeDefinition

logger = logging.getLogger(__name__)


class ProbeScheduler:
    """Owns the recurring timer task for every auto-checked probe.

    Lifecycle:
        scheduler = ProbeScheduler(executor)
        scheduler.schedule(definition, interval_ms)   # inside a running loop
        ...
        await scheduler.shutdown()
    """

    def __init__(self, executor: ProbeExecutor) -> None:
        self.executor = executor
        self._tasks: dict[str, asyncio.Task[None]] = {}
        # Probes scheduled while no event loop was running
        self._pending: dict[str, tuple[ProbeDefinition, float]] = {}
        self._lock = threading.Lock()

    @property
    def active_count(self) -> int:
        with self._lock:
            return sum(1 for t in self._tasks.values() if not t.done())

    @property
    def pending_names(self) -> list[str]:
        with self._lock:
            return list(self._pending)

    def is_scheduled(self, name: str) -> bool:
        with self._lock:
            task = self._tasks.get(name)
            return task is not None and not task.done()

    def schedule(self, definition: ProbeDefinition, interval_ms: float) -> bool:
        """(Re)start the timer for ``definition``.

        Returns False when there is no running event loop; the probe is then
        parked until start_pending() is called from inside a loop.
        """
        name = definition.name
        try:
            loop = asyncio.get_running_loop()
        except RuntimeError:
            with self._lock:
                old = self._tasks.pop(name, None)
                self._pending[name] = (definition, interval_ms)
            if old:
                old.cancel()
            logger.info("No running event loop — auto-check for '%s' deferred", name)
            return False

        task = loop.create_task(
            self._check_loop(definition, interval_ms / 1000),
            name=f"health-{name}",
        )
        with self._lock:
            old = self._tasks.get(name)
            self._tasks[name] = task
            self._pending.pop(name, None)
        if old:
            old.cancel()
        logger.debug("Scheduled '%s' every %.0fms", name, interval_ms)
        return True

    def start_pending(self) -> int:
        """Schedule every deferred probe. Must be called inside a running loop."""
        with self._lock:
            pending = list(self._pending.values())
        started = 0
        for definition, interval_ms in pending:
            if self.schedule(definition, interval_ms):
                started += 1
        return started

    def cancel(self, name: str) -> bool:
        with self._lock:
            task = self._tasks.pop(name, None)
            parked = self._pending.pop(name, None)
        if task:
            task.cancel()
        return task is not None or parked is not None

    def stop_all(self) -> int:
        """Cancel every timer. Safe to call repeatedly."""
        with self._lock:
            tasks = list(self._tasks.values())
            self._tasks.clear()
            self._pending.clear()
        for task in tasks:
            # A closed loop has already torn its tasks down
            if not task.get_loop().is_closed():
                task.cancel()
        if tasks:
            logger.info("Health scheduler stopped (%d timers cancelled)", len(tasks))
        return len(tasks)

    async def shutdown(self) -> None:
        """Cancel every timer and wait for the loops to unwind."""
        with self._lock:
            tasks = list(self._tasks.values())
        self.stop_all()
        if tasks:
            await asyncio.gather(*tasks, return_exceptions=True)

    async def _check_loop(self, definition: ProbeDefinition, interval: float) -> None:
        """Persistent loop that runs a single probe at its interval."""
        while True:
            await asyncio.sleep(interval)
            try:
                await self.executor.execute(definition)
            except Exception:
                logger.exception("Health check error: %s", definition.name)
