"""Shared symbol sprite, fetched once and attached to the document once.

Pickers render icons as <use href="#name"> references into this sprite
instead of embedding full markup for every grid entry.
"""

import asyncio
from enum import Enum
from typing import Optional

import httpx

from lucide_picker.dom import Document, Element
from lucide_picker.errors import AssetUnavailable
from lucide_picker.fetch import DEFAULT_TIMEOUT, fetch_text
from lucide_picker.log import get_logger

logger = get_logger(__name__)

SPRITE_CONTAINER_ID = "lucide-picker-sprite"
SPRITE_CONTAINER_STYLE = "position: absolute; width: 0; height: 0; overflow: hidden; visibility: hidden;"


class SpriteLoadState(Enum):
    UNLOADED = "unloaded"
    LOADING = "loading"
    LOADED = "loaded"


class SpriteLoader:
    """Memoized sprite loader.

    Concurrent callers share one in-flight fetch. A failed fetch is not
    remembered: the state drops back to UNLOADED and the next call retries.
    """

    def __init__(
        self,
        location: Optional[str] = None,
        client: Optional[httpx.AsyncClient] = None,
        timeout: float = DEFAULT_TIMEOUT,
    ):
        self.location = location
        self.client = client
        self.timeout = timeout
        self.state = SpriteLoadState.UNLOADED
        self.fetch_count = 0
        self._content: Optional[str] = None
        self._task: Optional[asyncio.Task] = None

    @property
    def loaded(self) -> bool:
        return self.state is SpriteLoadState.LOADED

    def _reset(self) -> None:
        self.state = SpriteLoadState.UNLOADED
        self._task = None

    async def _load(self) -> str:
        self.fetch_count += 1
        try:
            if not self.location:
                raise AssetUnavailable("", "sprite location not defined")
            content = await fetch_text(self.location, client=self.client, timeout=self.timeout)
        except AssetUnavailable as e:
            logger.warning("sprite_load_failed", location=e.location, reason=e.reason)
            self._reset()
            raise
        except BaseException:
            # Any other failure (including cancellation) must also allow a retry.
            self._reset()
            raise

        self._content = content
        self.state = SpriteLoadState.LOADED
        self._task = None
        logger.debug("sprite_loaded", location=self.location, size=len(content))
        return content

    async def load(self) -> str:
        """Fetch the sprite once and return its content.

        Raises:
            AssetUnavailable: If the fetch fails (a later call may retry)
        """
        if self.state is not SpriteLoadState.LOADED:
            if self._task is None:
                self.state = SpriteLoadState.LOADING
                self._task = asyncio.ensure_future(self._load())
            # Shield: one cancelled caller must not cancel the shared fetch.
            return await asyncio.shield(self._task)
        return self._content

    async def ensure_loaded(self, document: Document) -> None:
        """Make sure the sprite is fetched and attached to the document.

        Raises:
            AssetUnavailable: If the fetch fails (a later call may retry)
        """
        await self.load()
        self.attach(document)

    def attach(self, document: Document) -> Element:
        """Insert the hidden sprite container, unless it is already there."""
        existing = document.get_element_by_id(SPRITE_CONTAINER_ID)
        if existing is not None:
            return existing

        container = Element(
            "div",
            attrs={
                "id": SPRITE_CONTAINER_ID,
                "aria-hidden": "true",
                "style": SPRITE_CONTAINER_STYLE,
            },
        )
        container.set_html(self._content or "")
        document.body.prepend(container)
        return container


_default_loader: Optional[SpriteLoader] = None


def get_sprite_loader() -> SpriteLoader:
    """Return the process-wide sprite loader, creating it from the stored config."""
    global _default_loader
    if _default_loader is None:
        from lucide_picker.storage import StorageManager
        storage = StorageManager()
        _default_loader = SpriteLoader(
            location=storage.get_sprite_location(),
            timeout=storage.load_config().fetch_timeout,
        )
    return _default_loader


def reset_sprite_loader(loader: Optional[SpriteLoader] = None) -> None:
    """Replace the process-wide loader (None forgets it). Intended for tests."""
    global _default_loader
    _default_loader = loader
