"""
API server for attestation submission, listings and metrics.

Provides HTTP endpoints for:
- POST /oracle/v0/attestations - Submit a signed oracle message
- GET /oracle/v0/attestations/price_value - List value attestations
- GET /oracle/v0/attestations/price_interval - List interval attestations
- GET /oracle/v0/attestations/aggregate_price_interval - List aggregate buckets
- GET /oracle/v0/health - Health check endpoint
- GET /metrics - Prometheus metrics endpoint
"""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass, field

from aiohttp import web

from oracle_attest.subspecs.attestations import AttestationService

from .endpoints.attestations import SERVICE_KEY
from .routes import ROUTES

logger = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class ApiServerConfig:
    """Configuration for the API server."""

    host: str = "0.0.0.0"
    """Host address to bind to."""

    port: int = 5053
    """Port to listen on."""


def create_app(service: AttestationService) -> web.Application:
    """Build the aiohttp application serving `service`."""
    app = web.Application()
    app[SERVICE_KEY] = service
    app.add_routes([web.route(method, path, handler) for (method, path), handler in ROUTES.items()])
    return app


@dataclass(slots=True)
class ApiServer:
    """
    HTTP API server for the attestation service.

    Uses aiohttp to handle HTTP protocol details. Request handlers reach the
    service through the application, so the server itself holds no state
    beyond its runner.
    """

    config: ApiServerConfig
    """Server configuration."""

    service: AttestationService
    """Service every request is dispatched to."""

    _runner: web.AppRunner | None = field(default=None, init=False)
    """The aiohttp application runner."""

    _site: web.TCPSite | None = field(default=None, init=False)
    """The TCP site for the server."""

    async def start(self) -> None:
        """Start the API server in the background."""
        self._runner = web.AppRunner(create_app(self.service))
        await self._runner.setup()

        self._site = web.TCPSite(self._runner, self.config.host, self.config.port)
        await self._site.start()

        logger.info("API server listening on %s:%d", self.config.host, self.config.port)

    async def run(self) -> None:
        """
        Run the API server until shutdown.

        This method blocks until stop() is called.
        """
        await self.start()

        # Keep running until stopped
        while self._runner is not None:
            await asyncio.sleep(1)

    def stop(self) -> None:
        """Request graceful shutdown."""
        if self._runner is not None:
            asyncio.create_task(self._async_stop())

    async def _async_stop(self) -> None:
        """Gracefully stop the server."""
        if self._runner:
            await self._runner.cleanup()
            self._runner = None
            self._site = None
            logger.info("API server stopped")
