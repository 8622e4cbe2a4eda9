"""
Redis latency probe.

Connects to a Redis-compatible server, sends one PING and reports the
round-trip latency.
"""

from latency_probe.exceptions import (
    ProbeConnectionError,
    ProbeError,
    ProbeTimeoutError,
    ProtocolError,
)
from latency_probe.models import Endpoint, ProbeResult, ProbeState
from latency_probe.probing import LatencyProber, probe

__version__ = "0.1.0"

__all__ = [
    "Endpoint",
    "LatencyProber",
    "ProbeConnectionError",
    "ProbeError",
    "ProbeResult",
    "ProbeState",
    "ProbeTimeoutError",
    "ProtocolError",
    "probe",
]
