"""In-memory result store — latest HealthCheckResult per probe name.

Writes go through invocation tokens: each execution opens one, and the
store accepts at most one commit per token. Dropping a name bumps its
generation so runs still in flight can no longer write to it.
"""

from __future__ import annotations

import itertools
import logging
import threading
from dataclasses import dataclass, field

from .models import HealthCheckResult

logger = logging.getLogger(__name__)


@dataclass
class Invocation:
    """Write token for a single probe execution."""

    name: str
    generation: int
    seq: int
    committed: bool = field(default=False, compare=False)
    closed: bool = field(default=False, compare=False)


class ResultStore:
    """Thread-safe map of probe name → most recent result."""

    def __init__(self) -> None:
        self._results: dict[str, HealthCheckResult] = {}
        # Only tracked while a name has open invocations
        self._generations: dict[str, int] = {}
        self._outstanding: dict[str, int] = {}
        self._seq = itertools.count(1)
        self._lock = threading.Lock()

    def open_invocation(self, name: str) -> Invocation:
        with self._lock:
            self._outstanding[name] = self._outstanding.get(name, 0) + 1
            return Invocation(
                name=name,
                generation=self._generations.get(name, 0),
                seq=next(self._seq),
            )

    def commit(self, invocation: Invocation, result: HealthCheckResult) -> bool:
        """Store ``result`` for the invocation's probe. Returns False if stale."""
        with self._lock:
            if invocation.committed or invocation.closed:
                logger.debug("Ignoring commit on closed token for %s (#%d)", invocation.name, invocation.seq)
                return False
            invocation.committed = True
            current = self._generations.get(invocation.name, 0)
            self._close(invocation)
            if current != invocation.generation:
                logger.debug(
                    "Dropping result for %s (#%d): probe removed while running",
                    invocation.name, invocation.seq,
                )
                return False
            self._results[invocation.name] = result
            return True

    def release(self, invocation: Invocation) -> None:
        """Close an invocation that will never commit. No-op after commit."""
        with self._lock:
            self._close(invocation)

    def _close(self, invocation: Invocation) -> None:
        if invocation.closed:
            return
        invocation.closed = True
        name = invocation.name
        remaining = self._outstanding.get(name, 0) - 1
        if remaining > 0:
            self._outstanding[name] = remaining
        else:
            self._outstanding.pop(name, None)
            self._generations.pop(name, None)

    def get(self, name: str) -> HealthCheckResult | None:
        with self._lock:
            return self._results.get(name)

    def discard(self, name: str) -> bool:
        """Forget the result for ``name`` and invalidate in-flight writes."""
        with self._lock:
            if name in self._outstanding:
                self._generations[name] = self._generations.get(name, 0) + 1
            return self._results.pop(name, None) is not None

    def tracked_generations(self) -> int:
        """Number of names currently carrying generation state."""
        with self._lock:
            return len(self._generations)

    def snapshot(self) -> dict[str, HealthCheckResult]:
        with self._lock:
            return dict(self._results)

    def __len__(self) -> int:
        with self._lock:
            return len(self._results)

    def __contains__(self, name: object) -> bool:
        with self._lock:
            return name in self._results
