"""Tests for lucide_picker server module."""

import json
from unittest.mock import MagicMock

import pytest

from lucide_picker.cache import MemoryMarkupCache
from lucide_picker.catalog import IconCatalog
from lucide_picker.markup import MarkupResolver
from lucide_picker.server import IconServer
from lucide_picker.sprite import SpriteLoader


def make_request(query=None, match_info=None):
    request = MagicMock()
    request.query = query or {}
    request.match_info = match_info or {}
    return request


@pytest.fixture
def icon_dir(temp_dir, rocket_svg):
    """Directory holding <name>.svg files for the resolver."""
    path = temp_dir / "icons"
    path.mkdir()
    (path / "rocket.svg").write_text(rocket_svg)
    return path


@pytest.fixture
def server(scenario_icons, icon_dir, sprite_file):
    return IconServer(
        catalog=IconCatalog(scenario_icons),
        resolver=MarkupResolver(cache=MemoryMarkupCache(), cdn_url=str(icon_dir)),
        sprite_loader=SpriteLoader(str(sprite_file)),
        page_size=2,
    )


class TestIconServerEndpoints:
    """Tests for the JSON endpoints."""

    @pytest.mark.asyncio
    async def test_health(self, server):
        response = await server._handle_health(make_request())
        assert response.status == 200
        assert json.loads(response.text) == {"status": "healthy", "service": "lucide-picker", "icons": 3}
        assert response.headers["Access-Control-Allow-Origin"] == "*"

    @pytest.mark.asyncio
    async def test_icons(self, server, scenario_icons):
        response = await server._handle_icons(make_request())
        assert json.loads(response.text) == scenario_icons

    @pytest.mark.asyncio
    async def test_search(self, server):
        """Test searching returns ordered matches in pages."""
        response = await server._handle_search(make_request({"q": "launch"}))
        data = json.loads(response.text)
        assert data["names"] == ["rocket", "rocket-ship"]
        assert data["total"] == 2
        assert data["pages"] == 1

    @pytest.mark.asyncio
    async def test_search_pages(self, server):
        response = await server._handle_search(make_request({"q": "", "page": "1"}))
        data = json.loads(response.text)
        assert data["names"] == ["rocket-ship"]
        assert data["page"] == 1
        assert data["pages"] == 2

    @pytest.mark.asyncio
    async def test_search_no_results(self, server):
        data = json.loads((await server._handle_search(make_request({"q": "zzz"}))).text)
        assert data["names"] == []
        assert data["pages"] == 0

    @pytest.mark.asyncio
    @pytest.mark.parametrize("page", ["abc", "-1"])
    async def test_search_invalid_page(self, server, page):
        response = await server._handle_search(make_request({"q": "", "page": page}))
        assert response.status == 400

    @pytest.mark.asyncio
    async def test_cors_preflight(self, server):
        response = await server._handle_cors(make_request())
        assert response.headers["Access-Control-Allow-Methods"] == "GET, OPTIONS"


class TestIconServerAssets:
    """Tests for the sprite and icon endpoints."""

    @pytest.mark.asyncio
    async def test_sprite(self, server, sprite_svg):
        response = await server._handle_sprite(make_request())
        assert response.status == 200
        assert response.content_type == "image/svg+xml"
        assert response.text == sprite_svg

    @pytest.mark.asyncio
    async def test_sprite_unavailable(self, server, temp_dir):
        server.sprite_loader = SpriteLoader(str(temp_dir / "missing.svg"))
        response = await server._handle_sprite(make_request())
        assert response.status == 503

    @pytest.mark.asyncio
    async def test_icon(self, server):
        """Test that query parameters decorate the markup."""
        request = make_request({"class": "big", "width": "48"}, {"name": "rocket"})
        response = await server._handle_icon(request)
        assert response.status == 200
        assert response.content_type == "image/svg+xml"
        assert 'class="lucide lucide-rocket big"' in response.text
        assert 'width="48"' in response.text

    @pytest.mark.asyncio
    async def test_icon_not_found(self, server):
        response = await server._handle_icon(make_request(match_info={"name": "missing"}))
        assert response.status == 404

    @pytest.mark.asyncio
    async def test_icon_invalid_name(self, server):
        response = await server._handle_icon(make_request(match_info={"name": "../etc/passwd"}))
        assert response.status == 400
        assert json.loads(response.text)["error"].startswith("Invalid icon identifier")

    @pytest.mark.asyncio
    async def test_icon_invalid_size(self, server):
        request = make_request({"width": "huge"}, {"name": "rocket"})
        response = await server._handle_icon(request)
        assert response.status == 400

    def test_build_app_routes(self, server):
        app = server.build_app()
        paths = {route.resource.canonical for route in app.router.routes()}
        assert {"/health", "/icons", "/search", "/sprite.svg", "/icon/{name}"} <= paths
