"""Health engine exceptions."""

from __future__ import annotations


class HealthCheckError(Exception):
    """Base class for health engine errors."""


class ProbeExecutionError(HealthCheckError):
    """A probe's operation raised instead of returning a result."""

    def __init__(self, name: str, cause: BaseException) -> None:
        self.name = name
        self.cause = cause
        super().__init__(str(cause) or type(cause).__name__)


class ProbeTimeoutError(HealthCheckError):
    """A probe did not settle before its timeout fired."""

    def __init__(self, name: str, timeout_ms: float) -> None:
        self.name = name
        self.timeout_ms = timeout_ms
        super().__init__(f"Health check timed out after {timeout_ms:g}ms")


class UnknownProbeError(HealthCheckError, KeyError):
    """Raised when a caller names a probe that is not registered."""

    def __init__(self, name: str) -> None:
        self.name = name
        super().__init__(name)

    def __str__(self) -> str:
        return f"Health check '{self.name}' not found"
