"""Shared pytest fixtures for lucide-picker tests."""

import tempfile
from pathlib import Path

import httpx
import pytest

from lucide_picker.markup import set_resolver
from lucide_picker.sprite import reset_sprite_loader
from lucide_picker.storage import StorageManager

ROCKET_SVG = (
    '<svg xmlns="http://www.w3.org/2000/svg" width="24" height="24" viewBox="0 0 24 24" '
    'fill="none" stroke="currentColor" stroke-width="2" stroke-linecap="round" '
    'stroke-linejoin="round" class="lucide lucide-rocket">'
    '<path d="M4.5 16.5c-1.5 1.26-2 5-2 5s3.74-.5 5-2"/></svg>'
)

SPRITE_SVG = (
    '<svg xmlns="http://www.w3.org/2000/svg" style="display:none">'
    '<symbol id="rocket" viewBox="0 0 24 24"><path d="M12 15v5"/></symbol>'
    '<symbol id="settings" viewBox="0 0 24 24"><circle cx="12" cy="12" r="3"/></symbol>'
    '</svg>'
)

SCENARIO_ICONS = {
    "rocket": ["launch", "space"],
    "settings": ["gear", "config"],
    "rocket-ship": ["launch"],
}


def mock_client(handler) -> httpx.AsyncClient:
    """httpx client whose requests are answered by handler(request)."""
    return httpx.AsyncClient(transport=httpx.MockTransport(handler))


@pytest.fixture
def temp_dir():
    """Create a temporary directory for tests."""
    with tempfile.TemporaryDirectory() as tmpdir:
        yield Path(tmpdir)


@pytest.fixture
def temp_storage(temp_dir):
    """Create a temporary StorageManager."""
    storage = StorageManager(base_dir=temp_dir)
    storage.ensure_dirs()
    return storage


@pytest.fixture
def sprite_file(temp_dir):
    """Write a small sprite to disk and return its path."""
    path = temp_dir / "sprite.svg"
    path.write_text(SPRITE_SVG)
    return path


@pytest.fixture
def scenario_icons():
    return dict(SCENARIO_ICONS)


@pytest.fixture(autouse=True)
def reset_shared_state():
    """Forget the process-wide sprite loader and resolver around each test."""
    reset_sprite_loader()
    set_resolver(None)
    yield
    reset_sprite_loader()
    set_resolver(None)


@pytest.fixture
def rocket_svg():
    return ROCKET_SVG


@pytest.fixture
def sprite_svg():
    return SPRITE_SVG


@pytest.fixture
def make_client():
    """Factory for httpx clients backed by a MockTransport handler."""
    return mock_client
