"""Data models for the health engine — probes, results, aggregate view."""

from __future__ import annotations

from collections.abc import Awaitable, Callable
from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Any

from pydantic import BaseModel, Field

# ── Status ───────────────────────────────────────────────────────────────────


class Status(str, Enum):
    HEALTHY = "healthy"
    DEGRADED = "degraded"
    UNHEALTHY = "unhealthy"

    @property
    def severity(self) -> int:
        return _SEVERITY[self]


_SEVERITY = {Status.HEALTHY: 0, Status.DEGRADED: 1, Status.UNHEALTHY: 2}


# ── Results ──────────────────────────────────────────────────────────────────


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


@dataclass(frozen=True)
class HealthCheckResult:
    """Outcome of a single probe execution.

    Results are immutable; the executor derives a copy with the measured
    ``duration_ms`` instead of trusting whatever the probe reported.
    """

    name: str
    status: Status
    timestamp: datetime = field(default_factory=_utcnow)
    duration_ms: float = 0.0
    message: str | None = None
    metadata: dict[str, Any] | None = None
    classification: str | None = None

    def to_dict(self) -> dict[str, Any]:
        return {
            "name": self.name,
            "status": self.status.value,
            "timestamp": self.timestamp.isoformat(),
            "duration_ms": round(self.duration_ms, 1),
            "message": self.message,
            "metadata": self.metadata,
            "classification": self.classification,
        }


ProbeOperation = Callable[[], Awaitable[HealthCheckResult]]


# ── Probe definitions ────────────────────────────────────────────────────────


@dataclass(frozen=True)
class ProbeDefinition:
    """A named, independently schedulable health check."""

    name: str
    operation: ProbeOperation
    timeout_ms: float | None = None  # None = manager default
    interval_ms: float | None = None  # None = manager default
    critical: bool = False
    tags: frozenset[str] = frozenset()

    def __post_init__(self) -> None:
        if not self.name:
            raise ValueError("Probe 'name' is required")
        for field_name in ("timeout_ms", "interval_ms"):
            value = getattr(self, field_name)
            if value is not None and value <= 0:
                raise ValueError(f"Probe '{self.name}': {field_name} must be > 0, got {value}")
        # Accept any iterable of tags from callers
        object.__setattr__(self, "tags", frozenset(self.tags))


# ── Aggregate view ───────────────────────────────────────────────────────────


@dataclass(frozen=True)
class HealthSummary:
    total: int = 0
    healthy: int = 0
    degraded: int = 0
    unhealthy: int = 0

    def to_dict(self) -> dict[str, int]:
        return {
            "total": self.total,
            "healthy": self.healthy,
            "degraded": self.degraded,
            "unhealthy": self.unhealthy,
        }


@dataclass(frozen=True)
class OverallHealth:
    """System-wide health derived from the current result snapshot."""

    status: Status
    summary: HealthSummary
    checks: dict[str, HealthCheckResult]

    def to_dict(self) -> dict[str, Any]:
        return {
            "status": self.status.value,
            "summary": self.summary.to_dict(),
            "checks": {name: r.to_dict() for name, r in self.checks.items()},
        }


# ── Options ──────────────────────────────────────────────────────────────────


class HealthOptions(BaseModel):
    """Construction-time options for a HealthManager."""

    enable_compliance: bool = True
    enable_auto_check: bool = True
    check_interval_ms: float = Field(default=30_000, gt=0)
    timeout_ms: float = Field(default=10_000, gt=0)

    @classmethod
    def from_settings(cls, settings: Any) -> HealthOptions:
        return cls(
            enable_compliance=settings.enable_compliance,
            enable_auto_check=settings.enable_auto_check,
            check_interval_ms=settings.check_interval_ms,
            timeout_ms=settings.check_timeout_ms,
        )
