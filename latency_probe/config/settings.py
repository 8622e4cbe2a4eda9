"""
Configuration management for the Redis latency probe.

Settings are loaded with Pydantic Settings from environment variables
prefixed with ``LATENCY_PROBE_`` or from a ``.env`` file. Nothing is
required; the defaults probe ``localhost:6379``.
"""

import math
from functools import lru_cache

from pydantic import field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from latency_probe.models.probe import Endpoint


class ProbeSettings(BaseSettings):
    """
    Probe settings loaded from environment variables.

    Priority: constructor arguments > environment variables > .env file > defaults
    """

    model_config = SettingsConfigDict(
        env_prefix="LATENCY_PROBE_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # ======================
    # Target
    # ======================
    endpoint: str = "localhost:6379"
    """Target address as host:port."""
    timeout_seconds: float = 5.0
    """Upper bound on connecting and on waiting for the response."""

    # ======================
    # Logging
    # ======================
    log_level: str = "WARNING"
    """Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL)."""
    json_logs: bool = False
    """Render log events as JSON."""

    # ======================
    # Validators
    # ======================
    @field_validator("endpoint")
    @classmethod
    def validate_endpoint(cls, v: str) -> str:
        """Validate and normalize the endpoint to host:port form."""
        return str(Endpoint.parse(v))

    @field_validator("timeout_seconds")
    @classmethod
    def validate_timeout_seconds(cls, v: float) -> float:
        """Validate timeout is a positive, finite number of seconds."""
        if not math.isfinite(v) or v <= 0:
            raise ValueError(f"timeout_seconds must be positive and finite, got {v}")
        return v

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        """Validate that log level is a valid Python logging level."""
        valid_levels = {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}
        upper_v = v.upper()
        if upper_v not in valid_levels:
            raise ValueError(
                f"Invalid log level '{v}'. Must be one of: {', '.join(sorted(valid_levels))}"
            )
        return upper_v

    @property
    def target(self) -> Endpoint:
        """The configured endpoint as a parsed Endpoint."""
        return Endpoint.parse(self.endpoint)


@lru_cache()
def get_settings() -> ProbeSettings:
    """
    Get the probe settings from the environment (cached).

    Returns:
        ProbeSettings: The configured settings.
    """
    return ProbeSettings()
