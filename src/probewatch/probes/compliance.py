"""Compliance probe bundle — NSM, GDPR and DigDir checklists.

Each probe walks a fixed checklist of items. Callers supply a condition
per item (sync or async callable returning bool); an item without a
condition is reported as unverified and counts as failed.
"""

from __future__ import annotations

import inspect
import logging
from collections.abc import Awaitable, Callable, Mapping
from dataclasses import dataclass

from ..health.models import HealthCheckResult, ProbeDefinition, ProbeOperation, Status

logger = logging.getLogger(__name__)

Condition = Callable[[], "bool | Awaitable[bool]"]


@dataclass(frozen=True)
class Checklist:
    name: str
    label: str
    items: tuple[str, ...]
    # Failed-item count at which the probe turns unhealthy; None = never
    unhealthy_at: int | None = None
    classification: str | None = None


NSM_CHECKLIST = Checklist(
    name="nsm_compliance",
    label="NSM compliance",
    items=(
        "encryption_enabled",
        "audit_logging_active",
        "access_controls_configured",
        "security_patches_current",
    ),
    unhealthy_at=1,
    classification="BEGRENSET",
)

GDPR_CHECKLIST = Checklist(
    name="gdpr_compliance",
    label="GDPR compliance",
    items=(
        "data_retention_policies",
        "consent_management",
        "data_processing_records",
        "privacy_by_design",
    ),
)

DIGDIR_CHECKLIST = Checklist(
    name="digdir_interoperability",
    label="DigDir interoperability",
    items=("interoperability_standards",),
)


def rate_checklist(checklist: Checklist, failed_count: int) -> Status:
    if failed_count == 0:
        return Status.HEALTHY
    if checklist.unhealthy_at is not None and failed_count >= checklist.unhealthy_at:
        return Status.UNHEALTHY
    return Status.DEGRADED


def checklist_probe(checklist: Checklist, conditions: Mapping[str, Condition]) -> ProbeOperation:
    async def check() -> HealthCheckResult:
        failed: list[str] = []
        unverified: list[str] = []
        errors: dict[str, str] = {}

        for item in checklist.items:
            condition = conditions.get(item)
            if condition is None:
                unverified.append(item)
                continue
            try:
                outcome = condition()
                if inspect.isawaitable(outcome):
                    outcome = await outcome
            except Exception as e:
                errors[item] = f"{type(e).__name__}: {e}"
                failed.append(item)
                continue
            if not outcome:
                failed.append(item)

        problems = failed + unverified
        status = rate_checklist(checklist, len(problems))
        if problems:
            message = f"{checklist.label} failures: {', '.join(problems)}"
        else:
            message = f"All {checklist.label} checks passed"

        metadata: dict[str, object] = {"failed_checks": failed, "unverified_checks": unverified}
        if errors:
            metadata["errors"] = errors
        return HealthCheckResult(
            name=checklist.name,
            status=status,
            message=message,
            metadata=metadata,
            classification=checklist.classification,
        )

    return check


def compliance_probes(
    conditions: Mapping[str, Mapping[str, Condition]] | None = None,
) -> list[ProbeDefinition]:
    """Build the compliance bundle. ``conditions`` is keyed by probe name."""
    conditions = conditions or {}
    bundle = (
        (NSM_CHECKLIST, 60_000, True, {"compliance", "nsm"}),
        (GDPR_CHECKLIST, 300_000, True, {"compliance", "gdpr"}),
        (DIGDIR_CHECKLIST, 600_000, False, {"compliance", "digdir"}),
    )
    probes = []
    for checklist, interval_ms, critical, tags in bundle:
        probe_conditions = conditions.get(checklist.name, {})
        missing = [i for i in checklist.items if i not in probe_conditions]
        if missing:
            logger.info("%s: no condition for %s — reported as unverified", checklist.name, ", ".join(missing))
        probes.append(ProbeDefinition(
            name=checklist.name,
            operation=checklist_probe(checklist, probe_conditions),
            interval_ms=interval_ms,
            critical=critical,
            tags=frozenset(tags),
        ))
    return probes
