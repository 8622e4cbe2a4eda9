"""
Command-line entry point for the Redis latency probe.

Prints exactly one line on stdout and exits 0 on success, 1 when the
probe fails and 2 when the configuration is invalid.
"""

from typing import Optional

import typer
from pydantic import ValidationError

from latency_probe.config.settings import ProbeSettings
from latency_probe.probing.prober import LatencyProber
from latency_probe.utils.logging import (
    bind_contextvars,
    clear_contextvars,
    generate_probe_id,
    get_logger,
    setup_logging,
)

EXIT_OK = 0
EXIT_PROBE_FAILED = 1
EXIT_BAD_CONFIG = 2

logger = get_logger(__name__)

app = typer.Typer(add_completion=False)


def _load_settings(**overrides) -> ProbeSettings:
    """Load settings, letting explicitly given CLI options win."""
    return ProbeSettings(**{k: v for k, v in overrides.items() if v is not None})


def _describe_validation_error(exc: ValidationError) -> str:
    parts = []
    for error in exc.errors():
        field = ".".join(str(loc) for loc in error["loc"]) or "settings"
        parts.append(f"{field}: {error['msg']}")
    return "; ".join(parts)


@app.command()
def ping(
    endpoint: Optional[str] = typer.Option(
        None,
        "--endpoint",
        "-e",
        help="Target address as host:port [default: localhost:6379].",
    ),
    timeout: Optional[float] = typer.Option(
        None,
        "--timeout",
        "-t",
        help="Seconds to wait for the connection and for the reply [default: 5].",
    ),
    log_level: Optional[str] = typer.Option(
        None,
        "--log-level",
        help="Log level for diagnostics written to stderr [default: WARNING].",
    ),
    json_logs: Optional[bool] = typer.Option(
        None,
        "--json-logs/--console-logs",
        help="Render diagnostics as JSON.",
    ),
) -> None:
    """Send one PING to a Redis-compatible server and print the round-trip latency."""
    try:
        settings = _load_settings(
            endpoint=endpoint,
            timeout_seconds=timeout,
            log_level=log_level,
            json_logs=json_logs,
        )
    except ValidationError as e:
        typer.echo(f"Invalid configuration: {_describe_validation_error(e)}", err=True)
        raise typer.Exit(code=EXIT_BAD_CONFIG)

    setup_logging(log_level=settings.log_level, json_output=settings.json_logs)
    bind_contextvars(probe_id=generate_probe_id())
    try:
        logger.debug(
            "probe_configured",
            endpoint=settings.endpoint,
            timeout_seconds=settings.timeout_seconds,
        )
        result = LatencyProber.from_settings(settings).probe()
    finally:
        clear_contextvars()

    if result.success:
        typer.echo(f"The ping to {result.endpoint} took: {result.elapsed_ms:.3f} ms")
        raise typer.Exit(code=EXIT_OK)

    typer.echo(f"Ping to {result.endpoint} failed: {result.error}")
    raise typer.Exit(code=EXIT_PROBE_FAILED)


def main() -> None:
    """Console script entry point."""
    app()
