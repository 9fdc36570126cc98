"""probewatch — async health check orchestration."""

from .health import (
    HealthCheckResult,
    HealthManager,
    HealthOptions,
    OverallHealth,
    ProbeDefinition,
    Status,
    UnknownProbeError,
    create_health_manager,
    get_health_manager,
    get_overall_health,
    register_health_check,
    run_health_check,
)

__version__ = "0.1.0"
