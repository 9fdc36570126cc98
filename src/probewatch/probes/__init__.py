"""Built-in probes — infrastructure and compliance bundles, network checks, probes file."""

from .compliance import Checklist, checklist_probe, compliance_probes
from .infrastructure import (
    DiskUsage,
    MemoryUsage,
    MetricsSource,
    PsutilMetricsSource,
    infrastructure_probes,
)
from .loader import load_probes, parse_probe
from .network import dns_probe, http_probe, tcp_probe, tls_probe
