"""
Error taxonomy for a single probe invocation.

Every probe failure maps to exactly one of these classes. Each carries a
short ``reason`` string that ends up in ``ProbeResult.error`` and in the
message printed to the user. None of them is retried.
"""

from typing import Optional


class ProbeError(Exception):
    """Base class for probe failures."""

    reason: str = "probe failed"

    def __init__(self, message: Optional[str] = None):
        self.detail = message
        super().__init__(message or self.reason)


class ProbeConnectionError(ProbeError):
    """The endpoint could not be reached or dropped the connection."""

    reason = "connection failed"


class ProbeTimeoutError(ProbeError):
    """No response arrived within the configured timeout."""

    reason = "timeout"


class ProtocolError(ProbeError):
    """The server answered with something other than a liveness acknowledgement."""

    reason = "protocol error"
