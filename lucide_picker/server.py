"""Lightweight HTTP service for the icon catalog and standalone markup."""

import errno
import logging
import math
from typing import Optional

from aiohttp import web

from lucide_picker.catalog import IconCatalog
from lucide_picker.errors import AssetUnavailable, InvalidIdentifier
from lucide_picker.markup import MarkupResolver, require_icon_name
from lucide_picker.picker import ICONS_PER_PAGE
from lucide_picker.sprite import SpriteLoader

logger = logging.getLogger(__name__)


class IconServer:
    """HTTP server exposing catalog search, the sprite and icon markup."""

    def __init__(
        self,
        catalog: IconCatalog,
        resolver: MarkupResolver,
        sprite_loader: SpriteLoader,
        page_size: int = ICONS_PER_PAGE,
    ):
        """Initialize icon server.

        Args:
            catalog: Icon catalog served at /icons and searched at /search
            resolver: Resolver for /icon/{name}
            sprite_loader: Loader for /sprite.svg
            page_size: Names per /search page
        """
        self.catalog = catalog
        self.resolver = resolver
        self.sprite_loader = sprite_loader
        self.page_size = page_size
        self._app: Optional[web.Application] = None
        self._runner: Optional[web.AppRunner] = None
        self._site: Optional[web.TCPSite] = None
        self._running = False

    def build_app(self) -> web.Application:
        app = web.Application()
        app.router.add_get("/health", self._handle_health)
        app.router.add_get("/icons", self._handle_icons)
        app.router.add_get("/search", self._handle_search)
        app.router.add_get("/sprite.svg", self._handle_sprite)
        app.router.add_get("/icon/{name}", self._handle_icon)
        app.router.add_options("/{tail:.*}", self._handle_cors)
        return app

    async def start(self, port: int, max_retries: int = 10) -> int:
        """Start the server.

        Args:
            port: Preferred port to listen on
            max_retries: Maximum number of ports to try if preferred port is taken

        Returns:
            The actual port the server is running on (may differ if preferred was taken)

        Raises:
            OSError: If no available port found after max_retries attempts
        """
        self._app = self.build_app()
        self._runner = web.AppRunner(self._app)
        await self._runner.setup()

        # Try binding to port, incrementing if taken
        actual_port = port
        last_error = None
        for attempt in range(max_retries):
            try:
                self._site = web.TCPSite(self._runner, "localhost", actual_port)
                await self._site.start()
                if actual_port != port:
                    logger.warning(
                        f"Port {port} was in use, using port {actual_port} instead"
                    )
                break
            except OSError as e:
                if e.errno in (errno.EADDRINUSE, 48, 98):
                    last_error = e
                    actual_port = port + attempt + 1
                else:
                    raise
        else:
            await self._runner.cleanup()
            raise OSError(
                f"Could not find available port after {max_retries} attempts "
                f"(tried {port}-{port + max_retries - 1}). Last error: {last_error}"
            )

        self._running = True
        return actual_port

    async def stop(self) -> None:
        """Stop the server."""
        self._running = False
        if self._runner:
            await self._runner.cleanup()

    def _cors_headers(self) -> dict:
        """Return CORS headers for cross-origin requests."""
        return {
            "Access-Control-Allow-Origin": "*",
            "Access-Control-Allow-Methods": "GET, OPTIONS",
            "Access-Control-Allow-Headers": "Content-Type",
        }

    async def _handle_cors(self, request: web.Request) -> web.Response:
        """Handle CORS preflight requests."""
        return web.Response(headers=self._cors_headers())

    async def _handle_health(self, request: web.Request) -> web.Response:
        """Health check endpoint."""
        return web.json_response(
            {"status": "healthy", "service": "lucide-picker", "icons": len(self.catalog)},
            headers=self._cors_headers(),
        )

    async def _handle_icons(self, request: web.Request) -> web.Response:
        """Return the full catalog as {name: [tags]}."""
        return web.json_response(self.catalog.to_dict(), headers=self._cors_headers())

    async def _handle_search(self, request: web.Request) -> web.Response:
        """Search the catalog.

        Query parameters:
        - q: search text (empty returns everything)
        - page: zero-based page index
        """
        query = request.query.get("q", "")
        try:
            page = int(request.query.get("page", "0"))
        except ValueError:
            return web.json_response(
                {"error": "page must be an integer"},
                status=400,
                headers=self._cors_headers(),
            )
        if page < 0:
            return web.json_response(
                {"error": "page must be >= 0"},
                status=400,
                headers=self._cors_headers(),
            )

        names = self.catalog.search(query)
        start = page * self.page_size
        return web.json_response(
            {
                "query": query,
                "total": len(names),
                "page": page,
                "pages": math.ceil(len(names) / self.page_size),
                "names": names[start:start + self.page_size],
            },
            headers=self._cors_headers(),
        )

    async def _handle_sprite(self, request: web.Request) -> web.Response:
        """Serve the shared symbol sprite."""
        try:
            content = await self.sprite_loader.load()
        except AssetUnavailable as e:
            return web.json_response(
                {"error": f"Sprite unavailable: {e.reason}"},
                status=503,
                headers=self._cors_headers(),
            )
        return web.Response(
            text=content,
            content_type="image/svg+xml",
            headers=self._cors_headers(),
        )

    async def _handle_icon(self, request: web.Request) -> web.Response:
        """Serve standalone SVG markup for one icon.

        Optional query parameters override presentation:
        class, width, height, stroke.
        """
        try:
            name = require_icon_name(request.match_info.get("name", ""))
        except InvalidIdentifier as e:
            return web.json_response(
                {"error": str(e)},
                status=400,
                headers=self._cors_headers(),
            )

        try:
            width = int(request.query.get("width", "24"))
            height = int(request.query.get("height", "24"))
        except ValueError:
            return web.json_response(
                {"error": "width and height must be integers"},
                status=400,
                headers=self._cors_headers(),
            )

        svg = await self.resolver.resolve(
            name,
            class_name=request.query.get("class", ""),
            width=width,
            height=height,
            stroke=request.query.get("stroke", "currentColor"),
        )
        if not svg:
            return web.json_response(
                {"error": f"Icon not found: {name}"},
                status=404,
                headers=self._cors_headers(),
            )
        return web.Response(
            text=svg,
            content_type="image/svg+xml",
            headers=self._cors_headers(),
        )
