"""
Configuration module for the Redis latency probe.
"""

from .settings import ProbeSettings, get_settings

__all__ = ["ProbeSettings", "get_settings"]
