"""
Test fixtures and configuration.
"""

import asyncio
import socket
from typing import Callable, List, Optional

import pytest

from dating_service.config.settings import Settings
from dating_service.infrastructure.shutdown import ShutdownManager

# ================================================================
# Fakes for the collaborators owned by the lifecycle controller
# ================================================================


class FakeDatabase:
    """Records connect/disconnect calls into a shared event log."""

    def __init__(
        self,
        events: List[str],
        connect_error: Optional[Exception] = None,
        close_error: Optional[Exception] = None,
        healthy: bool = True,
    ):
        self.events = events
        self.connect_error = connect_error
        self.close_error = close_error
        self.healthy = healthy
        self.connected = False

    async def connect(self) -> None:
        self.events.append("database.connect")
        if self.connect_error:
            raise self.connect_error
        self.connected = True

    async def disconnect(self) -> None:
        self.events.append("database.disconnect")
        if self.close_error:
            raise self.close_error
        self.connected = False

    async def health_check(self) -> bool:
        return self.healthy


class FakeServer:
    """HTTP server stand-in whose listen() blocks until shutdown()."""

    address = "0.0.0.0:5004"

    def __init__(
        self,
        events: List[str],
        listen_error: Optional[Exception] = None,
        shutdown_error: Optional[Exception] = None,
        shutdown_delay: float = 0.0,
        hang_on_shutdown: bool = False,
    ):
        self.events = events
        self.listen_error = listen_error
        self.shutdown_error = shutdown_error
        self.shutdown_delay = shutdown_delay
        self.hang_on_shutdown = hang_on_shutdown
        self.listening = False
        self._stop = asyncio.Event()

    async def listen(self) -> None:
        self.events.append("server.listen")
        if self.listen_error:
            raise self.listen_error
        self.listening = True
        await self._stop.wait()

    async def shutdown(self) -> None:
        self.events.append("server.shutdown")
        if self.hang_on_shutdown:
            await asyncio.Event().wait()
        await asyncio.sleep(self.shutdown_delay)
        self._stop.set()
        if self.shutdown_error:
            raise self.shutdown_error


class FakeContainer:
    """Container exposing pre-built fakes."""

    def __init__(self, settings, database, server, shutdown_manager):
        self.settings = settings
        self.database = database
        self.server = server
        self.shutdown_manager = shutdown_manager

    def create_http_server(self, app):
        self.server.app = app
        return self.server


# ================================================================
# Fixtures
# ================================================================


@pytest.fixture
def settings() -> Settings:
    """Settings isolated from .env files."""
    return Settings(
        _env_file=None,
        ENV="test",
        DB_USER="dating_user",
        DB_PASSWORD="secret",
        DB_NAME="dating_test",
        SHUTDOWN_TIMEOUT=2.0,
    )


@pytest.fixture
def events() -> List[str]:
    """Ordered log of collaborator calls."""
    return []


@pytest.fixture
def force_exits() -> List[str]:
    """Records force-exit requests instead of terminating pytest."""
    return []


@pytest.fixture
def shutdown_manager(force_exits) -> ShutdownManager:
    return ShutdownManager(
        shutdown_timeout=2.0,
        force_exit=lambda: force_exits.append("force_exit"),
    )


@pytest.fixture
def make_container(settings, events, shutdown_manager) -> Callable[..., FakeContainer]:
    """Factory for a FakeContainer with customizable fakes."""

    def _make(database=None, server=None, manager=None) -> FakeContainer:
        return FakeContainer(
            settings=settings,
            database=database or FakeDatabase(events),
            server=server or FakeServer(events),
            shutdown_manager=manager or shutdown_manager,
        )

    return _make


@pytest.fixture
def free_port() -> int:
    """A TCP port that was free a moment ago."""
    with socket.socket(socket.AF_INET, socket.SOCK_STREAM) as sock:
        sock.bind(("127.0.0.1", 0))
        return sock.getsockname()[1]


async def wait_until(predicate: Callable[[], bool], timeout: float = 5.0) -> None:
    """Poll predicate until it holds or timeout expires."""
    loop = asyncio.get_running_loop()
    deadline = loop.time() + timeout
    while not predicate():
        if loop.time() > deadline:
            raise AssertionError("condition not met in time")
        await asyncio.sleep(0.01)


@pytest.fixture
def wait_for() -> Callable:
    return wait_until
