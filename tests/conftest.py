"""Shared fixtures for the scraper tests."""

import asyncio
import socket
import threading
import time
from collections.abc import Generator
from contextlib import closing

import httpx
import pytest
from aiohttp import web

from fugotcha.common.lxml_document import LxmlDocument
from fugotcha.common.fields import SiteSchema
from fugotcha.sites import fugazi
from tests.mock_server import (
    MOCK_BASE_URL,
    RELEASES,
    SERIES_PATH,
    catalog_transport,
    create_app,
)


@pytest.fixture
def schema() -> SiteSchema:
    """The Fugazi schema pointed at the in-memory catalog."""
    return fugazi.build_schema(MOCK_BASE_URL)


@pytest.fixture
def catalog_document() -> Generator[LxmlDocument, None, None]:
    """An LxmlDocument that fetches from the in-memory catalog.

    Yields:
        LxmlDocument backed by an httpx.MockTransport serving RELEASES.
    """
    client = httpx.Client(transport=catalog_transport(RELEASES))
    with LxmlDocument.open(client=client) as document:
        yield document
    client.close()


# =============================================================================
# aiohttp test server fixtures
# =============================================================================


def find_free_port() -> int:
    """Find a free port on localhost.

    Returns:
        An available port number.
    """
    with closing(socket.socket(socket.AF_INET, socket.SOCK_STREAM)) as s:
        s.bind(("", 0))
        s.setsockopt(socket.SOL_SOCKET, socket.SO_REUSEADDR, 1)
        return s.getsockname()[1]


class AioHttpTestServer:
    """Wrapper to run aiohttp server in a background thread."""

    def __init__(self, app: web.Application, port: int) -> None:
        self.app = app
        self.port = port
        self.host = "127.0.0.1"
        self._loop: asyncio.AbstractEventLoop | None = None
        self._runner: web.AppRunner | None = None
        self._thread: threading.Thread | None = None
        self._started = threading.Event()

    @property
    def url(self) -> str:
        """Get the base URL of the server."""
        return f"http://{self.host}:{self.port}"

    @property
    def base_url(self) -> str:
        """Get the catalog base URL that page slugs are appended to."""
        return f"{self.url}{SERIES_PATH}"

    def start(self) -> None:
        """Start the server in a background thread."""
        self._thread = threading.Thread(target=self._run_server, daemon=True)
        self._thread.start()
        if not self._started.wait(timeout=5.0):
            raise RuntimeError("Test server did not start")
        # Give the listener a moment to accept connections
        time.sleep(0.05)

    def _run_server(self) -> None:
        """Run the server in an asyncio event loop."""
        self._loop = asyncio.new_event_loop()
        asyncio.set_event_loop(self._loop)

        async def start() -> None:
            self._runner = web.AppRunner(self.app)
            await self._runner.setup()
            site = web.TCPSite(self._runner, self.host, self.port)
            await site.start()

        self._loop.run_until_complete(start())
        self._started.set()
        self._loop.run_forever()

    def stop(self) -> None:
        """Stop the server and clean up resources."""
        if self._loop and self._runner:
            runner = self._runner
            future = asyncio.run_coroutine_threadsafe(
                runner.cleanup(), self._loop
            )
            try:
                future.result(timeout=2.0)
            except Exception:
                pass  # Best effort cleanup

        if self._loop:
            self._loop.call_soon_threadsafe(self._loop.stop)

        if self._thread:
            self._thread.join(timeout=2.0)


@pytest.fixture
def catalog_server() -> Generator[AioHttpTestServer, None, None]:
    """Create and start an aiohttp test server running the mock catalog.

    Yields:
        AioHttpTestServer instance serving RELEASES.
    """
    app = create_app(RELEASES)
    port = find_free_port()
    server = AioHttpTestServer(app, port)
    server.start()
    yield server
    server.stop()
