"""Overall health aggregation.

A critical probe reporting unhealthy fails the whole system. Any other
failure (a degraded result, or an unhealthy non-critical probe) only
degrades it, so one optional dependency cannot take down the signal.
"""

from __future__ import annotations

from collections import Counter
from collections.abc import Callable, Mapping

from .models import HealthCheckResult, HealthSummary, OverallHealth, Status


def aggregate(
    results: Mapping[str, HealthCheckResult],
    is_critical: Callable[[str], bool],
) -> OverallHealth:
    """Compute the overall status from a snapshot keyed by probe name."""
    counts = Counter(r.status for r in results.values())
    summary = HealthSummary(
        total=len(results),
        healthy=counts[Status.HEALTHY],
        degraded=counts[Status.DEGRADED],
        unhealthy=counts[Status.UNHEALTHY],
    )

    critical_failure = any(
        r.status == Status.UNHEALTHY and is_critical(name)
        for name, r in results.items()
    )
    if critical_failure:
        status = Status.UNHEALTHY
    elif summary.degraded or summary.unhealthy:
        status = Status.DEGRADED
    else:
        status = Status.HEALTHY

    return OverallHealth(status=status, summary=summary, checks=dict(results))
