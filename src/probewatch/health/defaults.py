"""Process-wide default HealthManager and thin convenience wrappers.

Prefer constructing a HealthManager explicitly; these helpers exist for
small scripts that want one shared instance.
"""

from __future__ import annotations

import threading

from .manager import HealthManager
from .models import HealthCheckResult, HealthOptions, OverallHealth, ProbeDefinition

_default_manager: HealthManager | None = None
_lock = threading.Lock()


def get_health_manager() -> HealthManager:
    """Return the default manager, creating it from settings on first use."""
    global _default_manager
    with _lock:
        if _default_manager is None:
            from ..config import settings

            _default_manager = HealthManager(HealthOptions.from_settings(settings))
        return _default_manager


def create_health_manager(options: HealthOptions | None = None) -> HealthManager:
    return HealthManager(options)


def reset_health_manager() -> None:
    """Stop and forget the default manager."""
    global _default_manager
    with _lock:
        manager, _default_manager = _default_manager, None
    if manager is not None:
        manager.cleanup()


def register_health_check(definition: ProbeDefinition) -> None:
    get_health_manager().register_check(definition)


async def run_health_check(name: str) -> HealthCheckResult:
    return await get_health_manager().run_check(name)


def get_overall_health() -> OverallHealth:
    return get_health_manager().get_overall_health()
