"""Standalone SVG markup for a single icon.

Used wherever the shared sprite is not available (templates, emails,
the HTTP service). Base markup is fetched once per icon and cached; the
presentation attributes are applied per call after retrieval.
"""

import html
import re
from dataclasses import dataclass
from typing import Optional

import httpx

from lucide_picker.cache import WEEK_IN_SECONDS, MarkupCache, MemoryMarkupCache
from lucide_picker.errors import AssetUnavailable, InvalidIdentifier
from lucide_picker.fetch import DEFAULT_TIMEOUT, fetch_text
from lucide_picker.log import get_logger

logger = get_logger(__name__)

DEFAULT_CDN_URL = "https://unpkg.com/lucide-static@latest/icons/"
CACHE_KEY_PREFIX = "lucide_"
FAILED_MARKER = "\x00failed"

_SAFE_TOKEN = re.compile(r"^[A-Za-z0-9][A-Za-z0-9_-]*$")
_SVG_OPEN_TAG = re.compile(r"<svg(\s[^>]*)?>", re.IGNORECASE)
_REPLACED_ATTRS = re.compile(r"""\s(?:width|height|stroke)\s*=\s*(?:"[^"]*"|'[^']*'|[^\s>]+)""", re.IGNORECASE)
_CLASS_ATTR = re.compile(r"""\sclass\s*=\s*(?:"([^"]*)"|'([^']*)')""", re.IGNORECASE)


def sanitize_icon_name(value: object) -> str:
    """Reduce a value to a safe icon token, or "" if it cannot be one.

    Whitespace runs become dashes. Path separators, parent references and
    any character outside [A-Za-z0-9_-] reject the value outright.
    """
    if value is None:
        return ""
    name = re.sub(r"\s+", "-", str(value).strip())
    if not name or ".." in name or "/" in name or "\\" in name or "\x00" in name:
        return ""
    if not _SAFE_TOKEN.match(name):
        return ""
    return name


def require_icon_name(value: object) -> str:
    """Like sanitize_icon_name, but raise InvalidIdentifier instead of returning ""."""
    name = sanitize_icon_name(value)
    if not name:
        raise InvalidIdentifier(str(value))
    return name


@dataclass
class MarkupOptions:
    """Per-call presentation attributes."""

    class_name: str = ""
    width: int = 24
    height: int = 24
    stroke: str = "currentColor"


def decorate_svg(svg: str, options: Optional[MarkupOptions] = None) -> str:
    """Set class/width/height/stroke on the first <svg> opening tag.

    Existing width, height and stroke attributes are replaced; a caller
    class is appended to any existing class list.
    """
    options = options or MarkupOptions()
    match = _SVG_OPEN_TAG.search(svg)
    if not match:
        return svg

    attrs = match.group(1) or ""
    attrs = _REPLACED_ATTRS.sub("", attrs)

    if options.class_name:
        class_match = _CLASS_ATTR.search(attrs)
        if class_match:
            existing = class_match.group(1) if class_match.group(1) is not None else class_match.group(2)
            merged = f"{existing} {options.class_name}".strip()
            attrs = attrs[:class_match.start()] + attrs[class_match.end():]
        else:
            merged = options.class_name
        attrs += f' class="{html.escape(merged, quote=True)}"'

    attrs = attrs.rstrip()
    attrs += (
        f' width="{html.escape(str(options.width), quote=True)}"'
        f' height="{html.escape(str(options.height), quote=True)}"'
        f' stroke="{html.escape(str(options.stroke), quote=True)}"'
    )
    return svg[:match.start()] + f"<svg{attrs}>" + svg[match.end():]


class MarkupResolver:
    """Resolve icon names to decorated standalone SVG markup."""

    def __init__(
        self,
        cache: Optional[MarkupCache] = None,
        cdn_url: str = DEFAULT_CDN_URL,
        timeout: float = DEFAULT_TIMEOUT,
        cache_ttl: int = WEEK_IN_SECONDS,
        failure_ttl: int = 0,
        client: Optional[httpx.AsyncClient] = None,
    ):
        """Initialize resolver.

        Args:
            cache: Markup store. Defaults to an in-memory cache
            cdn_url: Base URL (or directory path) the "<name>.svg" files live under
            timeout: Fetch timeout in seconds
            cache_ttl: Lifetime of a cached successful fetch
            failure_ttl: Lifetime of a cached failure; 0 disables failure caching
            client: Optional shared httpx client
        """
        self.cache = cache if cache is not None else MemoryMarkupCache()
        self.cdn_url = cdn_url if cdn_url.endswith("/") else cdn_url + "/"
        self.timeout = timeout
        self.cache_ttl = cache_ttl
        self.failure_ttl = failure_ttl
        self.client = client

    def cache_key(self, name: str) -> str:
        return CACHE_KEY_PREFIX + name

    def source_url(self, name: str) -> str:
        return f"{self.cdn_url}{name}.svg"

    async def fetch_base(self, icon_name: str) -> str:
        """Return the undecorated markup for an icon, or "" on failure."""
        name = sanitize_icon_name(icon_name)
        if not name:
            logger.debug("markup_invalid_name", icon=str(icon_name))
            return ""

        key = self.cache_key(name)
        cached = self.cache.get(key)
        if cached == FAILED_MARKER:
            return ""
        if cached is not None:
            return cached

        try:
            svg = await fetch_text(self.source_url(name), client=self.client, timeout=self.timeout)
        except AssetUnavailable as e:
            logger.warning("markup_fetch_failed", icon=name, reason=e.reason)
            if self.failure_ttl > 0:
                self.cache.set(key, FAILED_MARKER, self.failure_ttl)
            return ""

        self.cache.set(key, svg, self.cache_ttl)
        logger.debug("markup_cached", icon=name, size=len(svg))
        return svg

    async def resolve(
        self,
        icon_name: str,
        *,
        class_name: str = "",
        width: int = 24,
        height: int = 24,
        stroke: str = "currentColor",
    ) -> str:
        """Resolve an icon to decorated SVG markup.

        Returns:
            SVG markup, or "" when the name is invalid or the icon cannot be fetched
        """
        svg = await self.fetch_base(icon_name)
        if not svg:
            return ""
        options = MarkupOptions(class_name=class_name, width=width, height=height, stroke=stroke)
        return decorate_svg(svg, options)


_default_resolver: Optional[MarkupResolver] = None


def get_resolver() -> MarkupResolver:
    """Return the shared resolver, creating it from the stored config."""
    global _default_resolver
    if _default_resolver is None:
        from lucide_picker.storage import StorageManager
        _default_resolver = StorageManager().build_resolver()
    return _default_resolver


def set_resolver(resolver: Optional[MarkupResolver]) -> None:
    """Replace the shared resolver (None resets it)."""
    global _default_resolver
    _default_resolver = resolver


async def resolve_icon_markup(
    name: str,
    *,
    class_name: str = "",
    width: int = 24,
    height: int = 24,
    stroke: str = "currentColor",
) -> str:
    """Template helper: standalone SVG for an icon, or "" on any failure."""
    if not name:
        return ""
    return await get_resolver().resolve(
        name, class_name=class_name, width=width, height=height, stroke=stroke
    )
