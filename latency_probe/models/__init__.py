"""
Pydantic models for the Redis latency probe.
"""

from latency_probe.models.probe import (
    DEFAULT_PORT,
    Endpoint,
    ProbeResult,
    ProbeState,
)

__all__ = [
    "DEFAULT_PORT",
    "Endpoint",
    "ProbeResult",
    "ProbeState",
]
