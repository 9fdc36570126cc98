"""HealthManager — the public façade over registry, executor, scheduler and store.

    manager = HealthManager(HealthOptions(enable_auto_check=False))
    manager.register_check(ProbeDefinition(name="db", operation=ping_db, critical=True))
    await manager.run_all_checks()
    manager.get_overall_health().status
    ...
    manager.cleanup()
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Awaitable, Callable, Mapping
from typing import Any

from ..probes.compliance import Condition, compliance_probes
from ..probes.infrastructure import MetricsSource, infrastructure_probes
from .aggregator import aggregate
from .errors import UnknownProbeError
from .executor import ProbeExecutor
from .models import HealthCheckResult, HealthOptions, OverallHealth, ProbeDefinition
from .registry import ProbeRegistry
from .scheduler import ProbeScheduler
from .store import ResultStore

logger = logging.getLogger(__name__)


class HealthManager:
    """Registers probes, runs them, and reports overall health."""

    def __init__(
        self,
        options: HealthOptions | None = None,
        *,
        on_result: Callable[[HealthCheckResult], Any] | None = None,
        metrics: MetricsSource | None = None,
    ) -> None:
        self.options = options or HealthOptions()
        self.metrics = metrics
        self.registry = ProbeRegistry()
        self.store = ResultStore()
        self.executor = ProbeExecutor(self.store, self.options.timeout_ms, on_result=on_result)
        self.scheduler = ProbeScheduler(self.executor)

    # -- registration ----------------------------------------------------------

    def register_check(self, definition: ProbeDefinition) -> None:
        """Add or replace a probe; starts its timer when auto-check is on."""
        previous = self.registry.register(definition)
        if previous:
            self.scheduler.cancel(definition.name)
        if self.options.enable_auto_check:
            self.scheduler.schedule(definition, self.interval_for(definition))

    def unregister_check(self, name: str) -> bool:
        """Remove a probe, its timer and its last result. False if unknown."""
        removed = self.registry.unregister(name)
        if removed is None:
            return False
        self.scheduler.cancel(name)
        self.store.discard(name)
        return True

    def interval_for(self, definition: ProbeDefinition) -> float:
        if definition.interval_ms is not None:
            return definition.interval_ms
        return self.options.check_interval_ms

    # -- execution -------------------------------------------------------------

    async def run_check(self, name: str) -> HealthCheckResult:
        """Run one probe now, regardless of its schedule."""
        definition = self.registry.get(name)
        if definition is None:
            raise UnknownProbeError(name)
        return await self.executor.execute(definition)

    async def run_all_checks(self) -> dict[str, HealthCheckResult]:
        """Run every registered probe concurrently."""
        definitions = self.registry.snapshot()
        results = await asyncio.gather(*(self.executor.execute(d) for d in definitions))
        return {d.name: r for d, r in zip(definitions, results)}

    # -- queries ---------------------------------------------------------------

    def get_overall_health(self) -> OverallHealth:
        return aggregate(self.store.snapshot(), self.registry.is_critical)

    def get_result(self, name: str) -> HealthCheckResult | None:
        return self.store.get(name)

    def checks_by_tag(self, tag: str) -> list[ProbeDefinition]:
        return self.registry.by_tag(tag)

    def get_stats(self) -> dict[str, Any]:
        return {
            "total_checks": len(self.registry),
            "active_timers": self.scheduler.active_count,
            "last_results": len(self.store),
            "compliance_enabled": self.options.enable_compliance,
            "auto_check_enabled": self.options.enable_auto_check,
        }

    # -- timers ----------------------------------------------------------------

    def start_auto_checks(self) -> int:
        """Start timers deferred because no event loop was running at registration."""
        return self.scheduler.start_pending()

    def stop_all_auto_checks(self) -> None:
        self.scheduler.stop_all()

    def cleanup(self) -> None:
        self.stop_all_auto_checks()

    async def shutdown(self) -> None:
        await self.scheduler.shutdown()

    # -- built-in bundles ------------------------------------------------------

    def register_infrastructure_checks(
        self,
        database_ping: Callable[[], Awaitable[Any]] | None = None,
        disk_path: str = "/",
    ) -> list[str]:
        probes = infrastructure_probes(self.metrics, database_ping, disk_path)
        for probe in probes:
            self.register_check(probe)
        return [p.name for p in probes]

    def register_compliance_checks(
        self,
        conditions: Mapping[str, Mapping[str, Condition]] | None = None,
    ) -> list[str]:
        if not self.options.enable_compliance:
            logger.info("Compliance checks disabled — skipping registration")
            return []
        probes = compliance_probes(conditions)
        for probe in probes:
            self.register_check(probe)
        return [p.name for p in probes]
