"""Text fetching for sprite and icon assets.

Assets come either from an HTTP(S) URL or from a local file path. Every
failure mode (network error, non-2xx status, empty body, unreadable or
non-UTF-8 file) is normalized to AssetUnavailable.
"""

import asyncio
from pathlib import Path
from typing import Optional, Union

import httpx

from lucide_picker.errors import AssetUnavailable

DEFAULT_TIMEOUT = 5.0


def is_remote(location: Union[str, Path]) -> bool:
    """True when the location is an HTTP(S) URL."""
    return str(location).startswith(("http://", "https://"))


async def fetch_text(
    location: Union[str, Path],
    client: Optional[httpx.AsyncClient] = None,
    timeout: float = DEFAULT_TIMEOUT,
) -> str:
    """Fetch text content from a URL or file path.

    Args:
        location: HTTP(S) URL or filesystem path
        client: Optional shared httpx client (a short-lived one is created otherwise)
        timeout: Request timeout in seconds

    Returns:
        Non-empty text content

    Raises:
        AssetUnavailable: On any fetch failure or empty content
    """
    if is_remote(location):
        text = await _fetch_http(str(location), client, timeout)
    else:
        text = await _fetch_file(Path(location))

    if not text.strip():
        raise AssetUnavailable(str(location), "empty body")
    return text


async def _fetch_http(
    url: str,
    client: Optional[httpx.AsyncClient],
    timeout: float,
) -> str:
    try:
        if client is not None:
            response = await client.get(url, timeout=timeout)
        else:
            async with httpx.AsyncClient() as owned:
                response = await owned.get(url, timeout=timeout)
    except httpx.HTTPError as e:
        raise AssetUnavailable(url, str(e) or type(e).__name__) from e

    if not response.is_success:
        raise AssetUnavailable(url, f"HTTP {response.status_code}")
    return response.text


async def _fetch_file(path: Path) -> str:
    try:
        return await asyncio.to_thread(path.read_text, encoding="utf-8")
    except (OSError, UnicodeDecodeError) as e:
        raise AssetUnavailable(str(path), str(e)) from e
