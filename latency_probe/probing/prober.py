"""
Single-shot latency prober for Redis-compatible servers.

A probe opens exactly one connection, sends one PING, waits for PONG
with a bounded wait and closes the connection again on every exit path.
The Redis wire protocol is handled by redis-py; retries and the
connection handshake commands redis-py would normally send are turned
off so the PING is the only request on the wire.
"""

import math
import time
from datetime import timedelta
from typing import Any, Optional, Union

import structlog
from redis.backoff import NoBackoff
from redis.connection import Connection
from redis.exceptions import (
    AuthenticationError,
    BusyLoadingError,
    ConnectionError as RedisConnectionError,
    InvalidResponse,
    ResponseError,
    TimeoutError as RedisTimeoutError,
)
from redis.retry import Retry

from latency_probe.config.settings import ProbeSettings
from latency_probe.exceptions import (
    ProbeConnectionError,
    ProbeError,
    ProbeTimeoutError,
    ProtocolError,
)
from latency_probe.models.probe import Endpoint, ProbeResult, ProbeState
from latency_probe.utils.logging import get_logger

logger = get_logger(__name__)

DEFAULT_TIMEOUT_SECONDS = 5.0

# Error replies that redis-py raises as ConnectionError subclasses
_REPLY_ERRORS = (ResponseError, AuthenticationError, BusyLoadingError)


class LatencyProber:
    """
    Measures PING round-trip latency against one endpoint.

    The prober only holds its configuration; every call to ``probe()``
    uses a fresh connection, so repeated probes are independent.
    """

    def __init__(
        self,
        endpoint: Union[Endpoint, str],
        timeout: Optional[float] = DEFAULT_TIMEOUT_SECONDS,
    ):
        """
        Initialize the prober.

        Args:
            endpoint: Target as an Endpoint or a "host:port" string
            timeout: Seconds to wait for connecting and for the response.
                None waits without bound.

        Raises:
            ValueError: If the endpoint cannot be parsed or the timeout
                is not positive.
        """
        if isinstance(endpoint, str):
            endpoint = Endpoint.parse(endpoint)
        if timeout is not None and not (math.isfinite(timeout) and timeout > 0):
            raise ValueError(f"timeout must be positive and finite, got {timeout}")
        self.endpoint = endpoint
        self.timeout = timeout

    @classmethod
    def from_settings(cls, settings: ProbeSettings) -> "LatencyProber":
        """Build a prober from loaded settings."""
        return cls(settings.target, timeout=settings.timeout_seconds)

    def _open_connection(self) -> Connection:
        return Connection(
            host=self.endpoint.host,
            port=self.endpoint.port,
            socket_timeout=self.timeout,
            socket_connect_timeout=self.timeout,
            retry=Retry(NoBackoff(), 0),
            # No CLIENT SETINFO, AUTH or SELECT: db 0, no credentials, RESP2
            lib_name=None,
            lib_version=None,
            health_check_interval=0,
        )

    def probe(self) -> ProbeResult:
        """
        Run one probe.

        Returns:
            ProbeResult with success and the request-to-response latency,
            or a failed result naming the error category.
        """
        target = str(self.endpoint)
        log = logger.bind(endpoint=target)
        state = ProbeState.DISCONNECTED
        started = time.perf_counter()

        connection = self._open_connection()
        try:
            state = self._transition(log, state, ProbeState.CONNECTING)
            self._connect(connection)

            state = self._transition(log, state, ProbeState.AWAITING_RESPONSE)
            sent = time.perf_counter()
            self._ping(connection)
            elapsed = timedelta(seconds=time.perf_counter() - sent)

        except ProbeError as e:
            failed_after = timedelta(seconds=time.perf_counter() - started)
            self._transition(log, state, ProbeState.COMPLETED, success=False)
            log.info(
                "probe_failed",
                error=e.reason,
                detail=e.detail,
                elapsed_ms=round(failed_after.total_seconds() * 1000, 3),
            )
            return ProbeResult.failed(e.reason, failed_after, endpoint=target)

        finally:
            connection.disconnect()

        self._transition(log, state, ProbeState.COMPLETED, success=True)
        result = ProbeResult.ok(elapsed, endpoint=target)
        log.info("probe_succeeded", elapsed_ms=round(result.elapsed_ms, 3))
        return result

    @staticmethod
    def _transition(
        log: structlog.stdlib.BoundLogger,
        current: ProbeState,
        new: ProbeState,
        **context: Any,
    ) -> ProbeState:
        """Log a state change and return the new state."""
        log.debug("probe_state_changed", from_state=current.value, to_state=new.value, **context)
        return new

    def _connect(self, connection: Connection) -> None:
        try:
            connection.connect()
        except (RedisConnectionError, RedisTimeoutError, OSError) as e:
            # A connect-phase timeout means the host is unreachable
            raise ProbeConnectionError(str(e)) from e

    def _ping(self, connection: Connection) -> None:
        try:
            connection.send_command("PING")
            response = connection.read_response()
        except RedisTimeoutError as e:
            raise ProbeTimeoutError(str(e)) from e
        except _REPLY_ERRORS as e:
            raise ProtocolError(f"error reply: {e}") from e
        except InvalidResponse as e:
            raise ProtocolError(str(e)) from e
        except (RedisConnectionError, OSError) as e:
            raise ProbeConnectionError(str(e)) from e

        if isinstance(response, bytes):
            response = response.decode("utf-8", errors="replace")
        if response != "PONG":
            raise ProtocolError(f"unexpected reply to PING: {response!r}")


def probe(
    endpoint: Union[Endpoint, str] = "localhost:6379",
    timeout: Optional[float] = DEFAULT_TIMEOUT_SECONDS,
) -> ProbeResult:
    """Probe ``endpoint`` once and return the result."""
    return LatencyProber(endpoint, timeout=timeout).probe()
