"""Probes file loader — builds ProbeDefinitions from probes.yaml.

Format:

    probes:
      - name: api
        type: http            # http | tls | dns | tcp
        url: https://api.example.com/health
        expected_status: 200
        timeout_ms: 5000
        interval_ms: 60000
        critical: true
        tags: [api]
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from pathlib import Path
from typing import Any

import yaml

from ..health.models import ProbeDefinition, ProbeOperation
from .network import dns_probe, http_probe, tcp_probe, tls_probe

logger = logging.getLogger(__name__)


def _require(raw: dict[str, Any], key: str) -> Any:
    value = raw.get(key)
    if not value:
        raise ValueError(f"'{key}' is required for {raw.get('type', 'http')} probes")
    return value


# Dispatcher
PROBE_BUILDERS: dict[str, Callable[[str, dict[str, Any]], ProbeOperation]] = {
    "http": lambda name, c: http_probe(
        name, _require(c, "url"), c.get("method", "GET"),
        c.get("expected_status", 200), c.get("timeout_ms", 10_000),
    ),
    "tls": lambda name, c: tls_probe(
        name, _require(c, "hostname"), c.get("port", 443), c.get("warn_days_before", 14),
    ),
    "dns": lambda name, c: dns_probe(name, _require(c, "hostname")),
    "tcp": lambda name, c: tcp_probe(name, _require(c, "hostname"), c.get("port", 443)),
}


def parse_probe(raw: dict[str, Any]) -> ProbeDefinition:
    """Parse one probes-file entry. Raises ValueError if malformed."""
    name = str(raw.get("name", "")).strip()
    if not name:
        raise ValueError("Probe 'name' is required")

    probe_type = raw.get("type", "http")
    builder = PROBE_BUILDERS.get(probe_type)
    if builder is None:
        raise ValueError(f"Unknown probe type: {probe_type}")

    return ProbeDefinition(
        name=name,
        operation=builder(name, raw),
        timeout_ms=raw.get("timeout_ms"),
        interval_ms=raw.get("interval_ms"),
        critical=bool(raw.get("critical", False)),
        tags=frozenset(raw.get("tags") or []),
    )


def load_probes(path: Path) -> list[ProbeDefinition]:
    """Parse a probes file. Missing files and malformed entries are skipped."""
    if not path.exists():
        logger.warning("Probes file not found: %s", path)
        return []

    try:
        raw = yaml.safe_load(path.read_text(encoding="utf-8")) or {}
    except yaml.YAMLError as e:
        logger.error("Failed to parse %s: %s", path, e)
        return []

    if not isinstance(raw, dict):
        logger.error("Failed to parse %s: expected a mapping, got %s", path, type(raw).__name__)
        return []

    probes = []
    for entry in raw.get("probes", []) or []:
        try:
            probes.append(parse_probe(entry))
        except (ValueError, TypeError, AttributeError) as e:
            logger.warning("Skipping malformed probe entry: %s", e)

    logger.info("Loaded %d probes from %s", len(probes), path)
    return probes
