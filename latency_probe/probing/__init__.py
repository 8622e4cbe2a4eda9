"""
Latency probing for Redis-compatible servers.
"""

from .prober import DEFAULT_TIMEOUT_SECONDS, LatencyProber, probe

__all__ = ["DEFAULT_TIMEOUT_SECONDS", "LatencyProber", "probe"]
