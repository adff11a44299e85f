"""
API server for the canister metrics exporter.

Provides HTTP endpoints for:
- /metrics - Prometheus metrics endpoint
- /health - Health check endpoint
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Callable
from dataclasses import dataclass, field

from aiohttp import web

from nx_gov_metrics.metrics import CounterReader, SimulatedCounterReader

from .endpoints.metrics import READER_KEY
from .routes import ROUTES

logger = logging.getLogger(__name__)


def _simulated_reader() -> CounterReader:
    """Default reader getter for servers running off the host."""
    return SimulatedCounterReader()


@dataclass(frozen=True, slots=True)
class ApiServerConfig:
    """Configuration for the API server."""

    host: str = "0.0.0.0"
    """Host address to bind to."""

    port: int = 9090
    """Port to listen on."""

    enabled: bool = True
    """Whether the API server is enabled."""


@dataclass(slots=True)
class ApiServer:
    """
    HTTP server exposing the canister metrics to a scraper.

    The reader is fetched on every scrape, so the embedding process can swap
    it without restarting the server.
    """

    config: ApiServerConfig
    """Server configuration."""

    reader_getter: Callable[[], CounterReader] = _simulated_reader
    """Callable that returns the counter reader to scrape."""

    _runner: web.AppRunner | None = field(default=None, init=False)
    """The aiohttp application runner."""

    _site: web.TCPSite | None = field(default=None, init=False)
    """The TCP site for the server."""

    _stop_task: asyncio.Task[None] | None = field(default=None, init=False)
    """Pending shutdown task, held until it completes."""

    @property
    def reader(self) -> CounterReader:
        """Get the current counter reader."""
        return self.reader_getter()

    def create_app(self) -> web.Application:
        """Build the aiohttp application with all routes registered."""
        app = web.Application()
        app[READER_KEY] = self.reader_getter
        app.add_routes([web.get(path, handler) for path, handler in ROUTES.items()])
        return app

    async def start(self) -> None:
        """Start the API server in the background."""
        if not self.config.enabled:
            logger.info("API server is disabled")
            return

        self._stop_task = None
        self._runner = web.AppRunner(self.create_app())
        await self._runner.setup()

        self._site = web.TCPSite(self._runner, self.config.host, self.config.port)
        await self._site.start()

        logger.info(f"API server listening on {self.config.host}:{self.config.port}")

    async def run(self) -> None:
        """
        Run the API server until shutdown.

        This method blocks until stop() is called.
        """
        await self.start()

        while self._runner is not None:
            await asyncio.sleep(1)

    def stop(self) -> None:
        """
        Request graceful shutdown.

        The cleanup task is kept on the server so it is not collected before
        it finishes; await stopped() to wait for it.
        """
        if self._runner is not None and self._stop_task is None:
            self._stop_task = asyncio.create_task(self._async_stop())

    async def stopped(self) -> None:
        """Wait for a requested shutdown to finish, re-raising its error."""
        if self._stop_task is not None:
            await self._stop_task

    async def _async_stop(self) -> None:
        """Gracefully stop the server."""
        if self._runner:
            await self._runner.cleanup()
            self._runner = None
            self._site = None
            logger.info("API server stopped")
