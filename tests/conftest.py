"""Shared test fixtures."""

from __future__ import annotations

from collections.abc import Generator

import pytest

from probewatch.health.manager import HealthManager
from probewatch.health.models import HealthOptions


@pytest.fixture
def options() -> HealthOptions:
    """Manager options with timers off and a short timeout."""
    return HealthOptions(enable_auto_check=False, timeout_ms=1000, check_interval_ms=50)


@pytest.fixture
def manager(options: HealthOptions) -> Generator[HealthManager, None, None]:
    m = HealthManager(options)
    yield m
    m.cleanup()


@pytest.fixture
def auto_manager() -> Generator[HealthManager, None, None]:
    """Manager with auto-check on and a fast default interval."""
    m = HealthManager(HealthOptions(enable_auto_check=True, timeout_ms=500, check_interval_ms=20))
    yield m
    m.cleanup()
