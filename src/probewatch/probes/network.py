"""Network probe operations — HTTP(S), TLS cert expiry, DNS resolve, TCP connect.

Each factory returns a no-argument coroutine function suitable for a
ProbeDefinition. Expected transport failures come back as unhealthy
results; anything else propagates to the executor.
"""

from __future__ import annotations

import asyncio
import socket
import ssl
import time
from datetime import datetime, timezone

import httpx

from ..health.models import HealthCheckResult, ProbeOperation, Status

# Degrade HTTP checks slower than this
HTTP_LATENCY_BUDGET_MS = 3000


def _elapsed_ms(t0: float) -> float:
    return round((time.perf_counter() - t0) * 1000, 1)


async def _close(writer: asyncio.StreamWriter) -> None:
    writer.close()
    try:
        await writer.wait_closed()
    except OSError:
        pass  # peer already gone


def http_probe(
    name: str,
    url: str,
    method: str = "GET",
    expected_status: int = 200,
    timeout_ms: float = 10_000,
    transport: httpx.AsyncBaseTransport | None = None,
) -> ProbeOperation:
    """HTTP(S) health check — status code + latency budget."""

    async def check() -> HealthCheckResult:
        t0 = time.perf_counter()
        try:
            async with httpx.AsyncClient(
                timeout=timeout_ms / 1000, follow_redirects=True, transport=transport,
            ) as client:
                resp = await client.request(method, url)
        except httpx.TimeoutException:
            return HealthCheckResult(
                name=name, status=Status.UNHEALTHY,
                message=f"Connection timed out ({timeout_ms:g}ms)",
            )
        except httpx.HTTPError as e:
            return HealthCheckResult(
                name=name, status=Status.UNHEALTHY,
                message=f"Connection error: {type(e).__name__}: {e}",
            )
        latency = _elapsed_ms(t0)

        if resp.status_code == expected_status:
            status = Status.HEALTHY
            if latency > HTTP_LATENCY_BUDGET_MS:
                status = Status.DEGRADED
            msg = f"{resp.status_code} OK"
        else:
            status = Status.UNHEALTHY
            msg = f"Expected {expected_status}, got {resp.status_code}"

        metadata: dict[str, object] = {"url": url, "status_code": resp.status_code, "latency_ms": latency}
        # Surface a few well-known fields from JSON health bodies
        try:
            body = resp.json()
        except ValueError:
            body = None
        if isinstance(body, dict):
            metadata["body"] = {k: body[k] for k in ("status", "version", "commit", "deps") if k in body}

        return HealthCheckResult(name=name, status=status, message=msg, metadata=metadata)

    return check


def tls_probe(
    name: str,
    hostname: str,
    port: int = 443,
    warn_days_before: int = 14,
    ssl_context: ssl.SSLContext | None = None,
) -> ProbeOperation:
    """Check TLS certificate expiry."""

    async def check() -> HealthCheckResult:
        ctx = ssl_context or ssl.create_default_context()
        try:
            _, writer = await asyncio.open_connection(
                hostname, port, ssl=ctx, server_hostname=hostname,
            )
        except (OSError, ssl.SSLError) as e:
            return HealthCheckResult(
                name=name, status=Status.UNHEALTHY,
                message=f"TLS error: {type(e).__name__}: {e}",
            )
        try:
            cert = writer.get_extra_info("peercert")
        finally:
            await _close(writer)

        if not cert:
            return HealthCheckResult(
                name=name, status=Status.UNHEALTHY, message="No certificate returned",
            )

        expiry = datetime.strptime(cert["notAfter"], "%b %d %H:%M:%S %Y %Z").replace(tzinfo=timezone.utc)
        days_left = (expiry - datetime.now(timezone.utc)).days

        if days_left < 0:
            status = Status.UNHEALTHY
            msg = f"Certificate EXPIRED {-days_left} days ago"
        elif days_left < warn_days_before:
            status = Status.DEGRADED
            msg = f"Certificate expires in {days_left} days (warn < {warn_days_before})"
        else:
            status = Status.HEALTHY
            msg = f"Certificate valid, expires in {days_left} days"

        return HealthCheckResult(
            name=name, status=status, message=msg,
            metadata={"days_left": days_left, "expiry": expiry.isoformat()},
        )

    return check


def dns_probe(name: str, hostname: str) -> ProbeOperation:
    """DNS resolution check."""

    async def check() -> HealthCheckResult:
        loop = asyncio.get_running_loop()
        try:
            addrs = await loop.getaddrinfo(hostname, None)
        except socket.gaierror as e:
            return HealthCheckResult(
                name=name, status=Status.UNHEALTHY,
                message=f"DNS resolution failed: {e}",
            )
        ips = sorted({a[4][0] for a in addrs})
        return HealthCheckResult(
            name=name, status=Status.HEALTHY,
            message=f"Resolved to {', '.join(ips[:3])}",
            metadata={"ips": ips},
        )

    return check


def tcp_probe(name: str, hostname: str, port: int = 443) -> ProbeOperation:
    """Raw TCP port connectivity check."""

    async def check() -> HealthCheckResult:
        try:
            _, writer = await asyncio.open_connection(hostname, port)
        except OSError as e:
            return HealthCheckResult(
                name=name, status=Status.UNHEALTHY,
                message=f"TCP connect failed: {type(e).__name__}: {e}",
            )
        await _close(writer)
        return HealthCheckResult(name=name, status=Status.HEALTHY, message=f"Port {port} open")

    return check
