"""HTTP server hosting the memo API and health check endpoints."""

from __future__ import annotations

import logging
from collections.abc import Callable
from datetime import datetime, timezone
from typing import TYPE_CHECKING, Any

from aiohttp import web

if TYPE_CHECKING:
    from memopad.infrastructure.persistence.database import DatabaseManager

logger = logging.getLogger(__name__)

RouteRegistrar = Callable[[web.Application], None]


class HttpServer:
    """HTTP server for the memo API.

    Provides /live and /ready endpoints for Kubernetes liveness and readiness
    checks and mounts the routes added by each registrar.
    """

    def __init__(
        self,
        db_manager: DatabaseManager,
        registrars: list[RouteRegistrar] | None = None,
        host: str = "0.0.0.0",
        port: int = 8080,
    ) -> None:
        """Initialize the server.

        Args:
            db_manager: DatabaseManager instance.
            registrars: Callables that add routes to the application.
            host: Interface to bind.
            port: Port to listen on. Use 0 for any available port.
        """
        self._db_manager = db_manager
        self._registrars = registrars or []
        self._host = host
        self._port = port
        self._actual_port = port
        self._server: web.AppRunner | None = None
        self._site: web.TCPSite | None = None
        self._running = False

    @property
    def is_running(self) -> bool:
        """Check if the server is running."""
        return self._running

    @property
    def port(self) -> int:
        """Get the port the server is listening on."""
        return self._actual_port

    async def check_liveness(self) -> dict[str, Any]:
        """Check if the application is alive.

        Returns:
            Liveness status with timestamp.
        """
        return {
            "status": "alive" if self._running else "dead",
            "timestamp": datetime.now(timezone.utc).isoformat(),
        }

    async def check_readiness(self) -> dict[str, Any]:
        """Check if the application is ready to serve traffic.

        Returns:
            Readiness status with component health details.
        """
        db_ok = await self._db_manager.is_healthy()
        return {
            "ready": db_ok,
            "database": db_ok,
        }

    async def _handle_live(self, request: web.Request) -> web.Response:
        """Handle /live endpoint."""
        result = await self.check_liveness()
        return web.json_response(result)

    async def _handle_ready(self, request: web.Request) -> web.Response:
        """Handle /ready endpoint."""
        result = await self.check_readiness()
        status = 200 if result["ready"] else 503
        return web.json_response(result, status=status)

    def build_app(self) -> web.Application:
        """Create the aiohttp application with all routes."""
        app = web.Application()
        app.router.add_get("/live", self._handle_live)
        app.router.add_get("/ready", self._handle_ready)
        for register in self._registrars:
            register(app)
        return app

    async def start(self) -> None:
        """Start the HTTP server."""
        self._server = web.AppRunner(self.build_app())
        await self._server.setup()

        self._site = web.TCPSite(self._server, self._host, self._port)
        await self._site.start()

        # Get actual port (useful when port=0 for dynamic allocation)
        if self._site._server is not None:
            sockets = self._site._server.sockets  # type: ignore[union-attr]
            if sockets:
                self._actual_port = sockets[0].getsockname()[1]

        self._running = True
        logger.info("HTTP server started on %s:%d", self._host, self.port)

    async def stop(self) -> None:
        """Stop the HTTP server."""
        if self._server is not None:
            await self._server.cleanup()
            self._server = None
            self._site = None

        self._running = False
        logger.info("HTTP server stopped")
