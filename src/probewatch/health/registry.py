"""Probe registry — the addressable map of probe name → definition."""

from __future__ import annotations

import logging
import threading

from .models import ProbeDefinition

logger = logging.getLogger(__name__)


class ProbeRegistry:
    """Holds registered probe definitions. Safe to mutate from any thread."""

    def __init__(self) -> None:
        self._probes: dict[str, ProbeDefinition] = {}
        self._lock = threading.Lock()

    def register(self, definition: ProbeDefinition) -> ProbeDefinition | None:
        """Store ``definition``, returning the one it replaced (if any)."""
        with self._lock:
            previous = self._probes.get(definition.name)
            self._probes[definition.name] = definition
        if previous:
            logger.info("Replaced health check '%s'", definition.name)
        else:
            logger.info("Registered health check '%s'", definition.name)
        return previous

    def unregister(self, name: str) -> ProbeDefinition | None:
        with self._lock:
            removed = self._probes.pop(name, None)
        if removed:
            logger.info("Unregistered health check '%s'", name)
        return removed

    def get(self, name: str) -> ProbeDefinition | None:
        with self._lock:
            return self._probes.get(name)

    def names(self) -> list[str]:
        with self._lock:
            return list(self._probes)

    def snapshot(self) -> list[ProbeDefinition]:
        with self._lock:
            return list(self._probes.values())

    def by_tag(self, tag: str) -> list[ProbeDefinition]:
        return [p for p in self.snapshot() if tag in p.tags]

    def is_critical(self, name: str) -> bool:
        definition = self.get(name)
        return bool(definition and definition.critical)

    def __len__(self) -> int:
        with self._lock:
            return len(self._probes)

    def __contains__(self, name: object) -> bool:
        with self._lock:
            return name in self._probes
