"""
Shared fixtures: throwaway TCP servers on 127.0.0.1 that behave like
healthy, silent or misbehaving Redis endpoints.
"""

import logging
import os
import socket
import threading
import time
from typing import Optional

import pytest
import structlog

from latency_probe.config.settings import get_settings
from latency_probe.utils.logging import clear_contextvars


PING_COMMAND = b"*1\r\n$4\r\nPING\r\n"


class FakeRedisServer:
    """
    Minimal TCP server that answers each PING with a canned reply.

    ``reply=None`` never answers. ``hang_up=True`` closes every connection
    as soon as it is accepted.
    """

    def __init__(self, reply: Optional[bytes] = b"+PONG\r\n", hang_up: bool = False):
        self.reply = reply
        self.hang_up = hang_up
        self.accepted = 0
        self.closed_by_client = 0
        self.received: list[bytes] = []
        self._lock = threading.Lock()
        self._stop = threading.Event()

        self._sock = socket.socket(socket.AF_INET, socket.SOCK_STREAM)
        self._sock.setsockopt(socket.SOL_SOCKET, socket.SO_REUSEADDR, 1)
        self._sock.bind(("127.0.0.1", 0))
        self._sock.listen(8)
        self._sock.settimeout(0.05)
        self.port = self._sock.getsockname()[1]
        self._thread = threading.Thread(target=self._serve, daemon=True)

    @property
    def endpoint(self) -> str:
        return f"127.0.0.1:{self.port}"

    def start(self) -> "FakeRedisServer":
        self._thread.start()
        return self

    def stop(self) -> None:
        self._stop.set()
        self._thread.join(timeout=2)
        self._sock.close()

    def wait_for_client_close(self, count: int = 1, timeout: float = 2.0) -> bool:
        deadline = time.monotonic() + timeout
        while time.monotonic() < deadline:
            with self._lock:
                if self.closed_by_client >= count:
                    return True
            time.sleep(0.01)
        return False

    def _serve(self) -> None:
        while not self._stop.is_set():
            try:
                conn, _ = self._sock.accept()
            except socket.timeout:
                continue
            except OSError:
                break
            with self._lock:
                self.accepted += 1
            threading.Thread(target=self._handle, args=(conn,), daemon=True).start()

    def _handle(self, conn: socket.socket) -> None:
        with conn:
            if self.hang_up:
                return
            conn.settimeout(0.05)
            buffer = b""
            while not self._stop.is_set():
                try:
                    chunk = conn.recv(4096)
                except socket.timeout:
                    continue
                except OSError:
                    return
                if not chunk:
                    with self._lock:
                        self.received.append(buffer)
                        self.closed_by_client += 1
                    return
                buffer += chunk
                if self.reply is not None and buffer.endswith(PING_COMMAND):
                    conn.sendall(self.reply)


def _running(reply: Optional[bytes] = b"+PONG\r\n", hang_up: bool = False):
    server = FakeRedisServer(reply=reply, hang_up=hang_up).start()
    yield server
    server.stop()


@pytest.fixture
def pong_server():
    """A compliant liveness responder."""
    yield from _running()


@pytest.fixture
def silent_server():
    """Accepts connections and reads requests but never answers."""
    yield from _running(reply=None)


@pytest.fixture
def garbage_server():
    """Answers with bytes that are not the Redis protocol."""
    yield from _running(reply=b"HTTP/1.1 400 Bad Request\r\n\r\n")


@pytest.fixture
def wrong_reply_server():
    """Answers PING with a well-formed reply that is not PONG."""
    yield from _running(reply=b"+OK\r\n")


@pytest.fixture
def error_reply_server():
    """Answers PING with a Redis error reply."""
    yield from _running(reply=b"-ERR unknown command 'PING'\r\n")


@pytest.fixture
def noauth_server():
    """Answers PING the way a password-protected server does."""
    yield from _running(reply=b"-NOAUTH Authentication required.\r\n")


@pytest.fixture
def hang_up_server():
    """Closes every connection right after accepting it."""
    yield from _running(hang_up=True)


@pytest.fixture
def closed_port() -> int:
    """A local port with nothing listening on it."""
    sock = socket.socket(socket.AF_INET, socket.SOCK_STREAM)
    sock.bind(("127.0.0.1", 0))
    port = sock.getsockname()[1]
    sock.close()
    return port


@pytest.fixture(autouse=True)
def _isolated_environment(monkeypatch, tmp_path):
    """Keep host environment variables, .env files and logging state out of tests."""
    for name in list(os.environ):
        if name.upper().startswith("LATENCY_PROBE_"):
            monkeypatch.delenv(name, raising=False)
    monkeypatch.chdir(tmp_path)
    get_settings.cache_clear()
    clear_contextvars()
    yield
    get_settings.cache_clear()
    clear_contextvars()
    structlog.reset_defaults()
    root = logging.getLogger()
    for handler in root.handlers[:]:
        root.removeHandler(handler)
