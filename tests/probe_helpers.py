"""Probe operations shared by the test modules."""

from __future__ import annotations

import asyncio

from probewatch.health.models import HealthCheckResult, ProbeOperation, Status


def returning(name: str, status: Status = Status.HEALTHY, delay: float = 0.0, **kwargs) -> ProbeOperation:
    """Operation that sleeps ``delay`` seconds then reports ``status``."""

    async def check() -> HealthCheckResult:
        if delay:
            await asyncio.sleep(delay)
        return HealthCheckResult(name=name, status=status, **kwargs)

    return check


def raising(message: str, delay: float = 0.0) -> ProbeOperation:
    async def check() -> HealthCheckResult:
        if delay:
            await asyncio.sleep(delay)
        raise ConnectionError(message)

    return check


def hanging() -> ProbeOperation:
    """Operation that never settles."""

    async def check() -> HealthCheckResult:
        await asyncio.Event().wait()
        raise AssertionError("unreachable")

    return check
