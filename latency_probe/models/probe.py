"""
Pydantic models describing a probe target and its outcome.
"""

from datetime import timedelta
from enum import Enum
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator


DEFAULT_PORT = 6379


class ProbeState(str, Enum):
    """Lifecycle of a single probe invocation."""

    DISCONNECTED = "disconnected"
    CONNECTING = "connecting"
    AWAITING_RESPONSE = "awaiting_response"
    COMPLETED = "completed"


class Endpoint(BaseModel):
    """A network address to probe."""

    model_config = ConfigDict(frozen=True)

    host: str = Field(..., min_length=1, description="Hostname or IP address")
    port: int = Field(DEFAULT_PORT, ge=1, le=65535, description="TCP port")

    @field_validator("host")
    @classmethod
    def validate_host(cls, v: str) -> str:
        host = v.strip()
        if not host:
            raise ValueError("host must not be blank")
        if any(c.isspace() for c in host):
            raise ValueError(f"host must not contain whitespace, got {v!r}")
        return host

    @classmethod
    def parse(cls, address: str) -> "Endpoint":
        """
        Parse ``host:port``, ``[ipv6]:port`` or a bare host.

        A bare host (including an unbracketed IPv6 literal) gets the
        default Redis port.

        Raises:
            ValueError: If the address is empty or the port is not a number.
        """
        address = address.strip()
        if not address:
            raise ValueError("endpoint must not be empty")

        if address.startswith("["):
            host, sep, rest = address[1:].partition("]")
            if not sep:
                raise ValueError(f"unterminated IPv6 literal in endpoint {address!r}")
            if not rest:
                return cls(host=host)
            if not rest.startswith(":"):
                raise ValueError(f"unexpected text after IPv6 literal in {address!r}")
            port_text = rest[1:]
        elif address.count(":") == 1:
            host, _, port_text = address.partition(":")
        else:
            return cls(host=address)

        if not port_text.isdigit():
            raise ValueError(f"invalid port {port_text!r} in endpoint {address!r}")
        return cls(host=host, port=int(port_text))

    def __str__(self) -> str:
        if ":" in self.host:
            return f"[{self.host}]:{self.port}"
        return f"{self.host}:{self.port}"


class ProbeResult(BaseModel):
    """
    Outcome of one probe.

    ``elapsed`` measures request-send to response-receipt on success, and
    time from probe start until the failure was observed otherwise.
    """

    model_config = ConfigDict(frozen=True)

    success: bool
    elapsed: timedelta
    error: Optional[str] = None
    endpoint: Optional[str] = None

    @field_validator("elapsed")
    @classmethod
    def validate_elapsed(cls, v: timedelta) -> timedelta:
        if v < timedelta(0):
            raise ValueError(f"elapsed must not be negative, got {v}")
        return v

    @model_validator(mode="after")
    def check_error_matches_success(self) -> "ProbeResult":
        if self.success and self.error is not None:
            raise ValueError("a successful result cannot carry an error")
        if not self.success and not self.error:
            raise ValueError("a failed result must carry an error")
        return self

    @property
    def elapsed_ms(self) -> float:
        """Elapsed time in milliseconds."""
        return self.elapsed.total_seconds() * 1000

    @classmethod
    def ok(cls, elapsed: timedelta, endpoint: Optional[str] = None) -> "ProbeResult":
        """
        Build a successful result.

        Args:
            elapsed: Request-send to response-receipt time
            endpoint: The probed address, for reporting
        """
        return cls(success=True, elapsed=elapsed, endpoint=endpoint)

    @classmethod
    def failed(
        cls, error: str, elapsed: timedelta, endpoint: Optional[str] = None
    ) -> "ProbeResult":
        """
        Build a failed result.

        Args:
            error: Failure category ("connection failed", "timeout", "protocol error")
            elapsed: Time from probe start until the failure was observed
            endpoint: The probed address, for reporting
        """
        return cls(success=False, elapsed=elapsed, error=error, endpoint=endpoint)
