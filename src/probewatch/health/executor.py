"""Probe executor — runs one probe under a timeout and records the result.

The probe's operation runs as its own task and is raced against the
timeout. A timed-out task is abandoned rather than cancelled; whatever it
eventually produces is consumed and thrown away.
"""

from __future__ import annotations

import asyncio
import inspect
import logging
import time
from collections.abc import Callable
from dataclasses import replace
from typing import Any

from .errors import HealthCheckError, ProbeExecutionError, ProbeTimeoutError
from .models import HealthCheckResult, ProbeDefinition, Status
from .store import ResultStore

logger = logging.getLogger(__name__)


class ProbeExecutor:
    """Executes probe definitions and commits their results to the store."""

    def __init__(
        self,
        store: ResultStore,
        default_timeout_ms: float,
        on_result: Callable[[HealthCheckResult], Any] | None = None,
    ) -> None:
        self.store = store
        self.default_timeout_ms = default_timeout_ms
        self.on_result = on_result

    def timeout_for(self, definition: ProbeDefinition) -> float:
        if definition.timeout_ms is not None:
            return definition.timeout_ms
        return self.default_timeout_ms

    async def execute(self, definition: ProbeDefinition) -> HealthCheckResult:
        """Run ``definition`` once. Never raises for probe-level failures."""
        name = definition.name
        timeout_ms = self.timeout_for(definition)
        invocation = self.store.open_invocation(name)

        t0 = time.perf_counter()
        task = asyncio.ensure_future(_invoke(definition))
        try:
            done, _ = await asyncio.wait({task}, timeout=timeout_ms / 1000)
        except BaseException:
            self.store.release(invocation)
            raise
        finally:
            if not task.done():
                # Timed out, or our caller was cancelled mid-wait
                task.add_done_callback(_discard_late_outcome(name))
        elapsed = (time.perf_counter() - t0) * 1000

        if task in done:
            exc = asyncio.CancelledError() if task.cancelled() else task.exception()
            if exc is None:
                result = replace(task.result(), duration_ms=elapsed)
            else:
                result = _failure(name, ProbeExecutionError(name, exc), elapsed)
                logger.warning("Health check %s failed: %s", name, result.message)
        else:
            result = _failure(name, ProbeTimeoutError(name, timeout_ms), elapsed)
            logger.warning("Health check %s timed out after %.0fms", name, timeout_ms)

        if self.store.commit(invocation, result):
            logger.debug("Check %s: %s (%.0fms)", name, result.status.value, result.duration_ms)
            if self.on_result:
                try:
                    self.on_result(result)
                except Exception:
                    logger.exception("Result callback error")
        return result


async def _invoke(definition: ProbeDefinition) -> HealthCheckResult:
    pending = definition.operation()
    if not inspect.isawaitable(pending):
        raise TypeError(
            f"operation returned {type(pending).__name__}, expected an awaitable"
        )
    result = await pending
    if not isinstance(result, HealthCheckResult):
        raise TypeError(
            f"operation returned {type(result).__name__}, expected HealthCheckResult"
        )
    return result


def _failure(name: str, error: HealthCheckError, elapsed_ms: float) -> HealthCheckResult:
    metadata: dict[str, Any] = {"error_type": type(error).__name__}
    if isinstance(error, ProbeExecutionError):
        metadata["cause"] = type(error.cause).__name__
    elif isinstance(error, ProbeTimeoutError):
        metadata["timeout_ms"] = error.timeout_ms
    return HealthCheckResult(
        name=name,
        status=Status.UNHEALTHY,
        duration_ms=elapsed_ms,
        message=str(error),
        metadata=metadata,
    )


def _discard_late_outcome(name: str) -> Callable[[asyncio.Future[Any]], None]:
    def _callback(task: asyncio.Future[Any]) -> None:
        if task.cancelled():
            return
        exc = task.exception()  # marks the exception as retrieved
        logger.debug(
            "Discarding late outcome of abandoned check %s (%s)",
            name, "error" if exc else "result",
        )

    return _callback
