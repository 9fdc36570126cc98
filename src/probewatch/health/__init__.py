"""Health subsystem — registry, executor, scheduler, result store, aggregation."""

from .aggregator import aggregate
from .defaults import (
    create_health_manager,
    get_health_manager,
    get_overall_health,
    register_health_check,
    reset_health_manager,
    run_health_check,
)
from .errors import HealthCheckError, ProbeExecutionError, ProbeTimeoutError, UnknownProbeError
from .executor import ProbeExecutor
from .manager import HealthManager
from .models import (
    HealthCheckResult,
    HealthOptions,
    HealthSummary,
    OverallHealth,
    ProbeDefinition,
    Status,
)
from .registry import ProbeRegistry
from .scheduler import ProbeScheduler
from .store import ResultStore
