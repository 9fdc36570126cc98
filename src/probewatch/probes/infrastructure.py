"""Infrastructure probe bundle — database, memory, disk space.

Memory and disk figures come from a MetricsSource; the default reads them
through psutil. Metric reads are blocking calls and run in the default
thread pool so they never stall the event loop.
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Awaitable, Callable
from dataclasses import dataclass
from typing import Any, Protocol

import psutil

from ..health.models import HealthCheckResult, ProbeDefinition, ProbeOperation, Status

logger = logging.getLogger(__name__)

# Memory: percent of total in use
MEMORY_DEGRADED_PERCENT = 75.0
MEMORY_UNHEALTHY_PERCENT = 90.0

# Disk: percent of total still free
DISK_DEGRADED_FREE_PERCENT = 20.0
DISK_UNHEALTHY_FREE_PERCENT = 10.0

_MB = 1024 * 1024
_GB = 1024 * _MB


@dataclass(frozen=True)
class MemoryUsage:
    used_bytes: int
    total_bytes: int

    @property
    def percent(self) -> float:
        if self.total_bytes <= 0:
            return 0.0
        return self.used_bytes / self.total_bytes * 100


@dataclass(frozen=True)
class DiskUsage:
    total_bytes: int
    free_bytes: int

    @property
    def free_percent(self) -> float:
        if self.total_bytes <= 0:
            return 0.0
        return self.free_bytes / self.total_bytes * 100


class MetricsSource(Protocol):
    def memory_usage(self) -> MemoryUsage: ...

    def disk_usage(self, path: str) -> DiskUsage: ...


class PsutilMetricsSource:
    """Host-wide memory and disk figures via psutil."""

    def memory_usage(self) -> MemoryUsage:
        vm = psutil.virtual_memory()
        return MemoryUsage(used_bytes=vm.total - vm.available, total_bytes=vm.total)

    def disk_usage(self, path: str) -> DiskUsage:
        du = psutil.disk_usage(path)
        return DiskUsage(total_bytes=du.total, free_bytes=du.free)


# ── Probe operations ─────────────────────────────────────────────────────────


def database_probe(ping: Callable[[], Awaitable[Any]], name: str = "database") -> ProbeOperation:
    """Wrap an async ``ping`` (e.g. ``SELECT 1``) as a probe operation."""

    async def check() -> HealthCheckResult:
        try:
            await ping()
        except Exception as e:
            return HealthCheckResult(
                name=name,
                status=Status.UNHEALTHY,
                message=f"Database connection failed: {type(e).__name__}: {e}",
            )
        return HealthCheckResult(
            name=name, status=Status.HEALTHY, message="Database connection successful",
        )

    return check


def memory_probe(metrics: MetricsSource, name: str = "memory") -> ProbeOperation:
    async def check() -> HealthCheckResult:
        loop = asyncio.get_running_loop()
        usage = await loop.run_in_executor(None, metrics.memory_usage)
        percent = usage.percent

        if percent > MEMORY_UNHEALTHY_PERCENT:
            status = Status.UNHEALTHY
        elif percent > MEMORY_DEGRADED_PERCENT:
            status = Status.DEGRADED
        else:
            status = Status.HEALTHY

        used_mb = round(usage.used_bytes / _MB)
        total_mb = round(usage.total_bytes / _MB)
        return HealthCheckResult(
            name=name,
            status=status,
            message=f"Memory usage: {used_mb}MB / {total_mb}MB ({percent:.1f}%)",
            metadata={"used_mb": used_mb, "total_mb": total_mb, "usage_percent": round(percent, 1)},
        )

    return check


def disk_probe(metrics: MetricsSource, path: str = "/", name: str = "disk_space") -> ProbeOperation:
    async def check() -> HealthCheckResult:
        loop = asyncio.get_running_loop()
        usage = await loop.run_in_executor(None, metrics.disk_usage, path)
        free_percent = usage.free_percent

        if free_percent < DISK_UNHEALTHY_FREE_PERCENT:
            status = Status.UNHEALTHY
        elif free_percent < DISK_DEGRADED_FREE_PERCENT:
            status = Status.DEGRADED
        else:
            status = Status.HEALTHY

        return HealthCheckResult(
            name=name,
            status=status,
            message=f"Free disk space on {path}: {free_percent:.1f}%",
            metadata={
                "path": path,
                "free_percent": round(free_percent, 1),
                "free_gb": round(usage.free_bytes / _GB, 2),
                "total_gb": round(usage.total_bytes / _GB, 2),
            },
        )

    return check


# ── Bundle ───────────────────────────────────────────────────────────────────


def infrastructure_probes(
    metrics: MetricsSource | None = None,
    database_ping: Callable[[], Awaitable[Any]] | None = None,
    disk_path: str = "/",
) -> list[ProbeDefinition]:
    """Build the infrastructure bundle.

    ``database`` is only included when a ``database_ping`` is supplied —
    there is nothing meaningful to check without one.
    """
    metrics = metrics or PsutilMetricsSource()
    probes: list[ProbeDefinition] = []

    if database_ping is not None:
        probes.append(ProbeDefinition(
            name="database",
            operation=database_probe(database_ping),
            interval_ms=30_000,
            critical=True,
            tags=frozenset({"infrastructure", "database"}),
        ))
    else:
        logger.info("No database ping configured — skipping 'database' check")

    probes.append(ProbeDefinition(
        name="memory",
        operation=memory_probe(metrics),
        interval_ms=60_000,
        critical=False,
        tags=frozenset({"infrastructure", "memory"}),
    ))
    probes.append(ProbeDefinition(
        name="disk_space",
        operation=disk_probe(metrics, disk_path),
        interval_ms=300_000,
        critical=True,
        tags=frozenset({"infrastructure", "disk"}),
    ))
    return probes
