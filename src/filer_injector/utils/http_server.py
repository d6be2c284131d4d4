"""
Background aiohttp servers.

The admission webhook and the metrics endpoint both run as aiohttp
applications inside the webhook's event loop. Subclasses only declare routes.
"""

import logging
import ssl

from aiohttp import web

logger = logging.getLogger(__name__)


class HTTPServer:
    """aiohttp application served from the running event loop."""

    name = "HTTP server"

    def __init__(
        self,
        host: str = "0.0.0.0",
        port: int = 8080,
        ssl_context: ssl.SSLContext | None = None,
    ):
        self.host = host
        self.port = port
        self.ssl_context = ssl_context
        self.app = web.Application()
        self.runner: web.AppRunner | None = None
        self.add_routes(self.app.router)

    def add_routes(self, router: web.UrlDispatcher) -> None:
        raise NotImplementedError

    @property
    def url(self) -> str:
        scheme = "https" if self.ssl_context else "http"
        return f"{scheme}://{self.host}:{self.port}"

    async def start(self) -> None:
        """Bind the listening socket; raises if the port cannot be bound."""
        runner = web.AppRunner(self.app)
        await runner.setup()
        site = web.TCPSite(runner, self.host, self.port, ssl_context=self.ssl_context)
        try:
            await site.start()
        except OSError as e:
            logger.error(f"{self.name} cannot listen on {self.url}: {e}")
            await runner.cleanup()
            raise
        self.runner = runner
        logger.info(f"{self.name} listening on {self.url}")

    async def stop(self) -> None:
        """Close the listening socket and pending connections."""
        if self.runner is None:
            return
        await self.runner.cleanup()
        self.runner = None
        logger.info(f"{self.name} stopped")

    async def __aenter__(self):
        await self.start()
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        await self.stop()
