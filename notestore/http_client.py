"""
notestore — HTTP Client Management
===================================

What:  Factory for the shared httpx.AsyncClient and its shutdown helper.
How:   One AsyncClient (one connection pool) is shared by the Firebase
       backends and ImageService. Timeouts are always explicit.
Who:   NoteStore.from_settings(); tests pass their own client built on
       httpx.MockTransport instead.

Timeouts:
    timeout=http_timeout          read / write / pool (default: 30s)
    connect=http_connect_timeout  TCP + TLS handshake (default: 10s)
"""

from typing import Any, Optional

import httpx

from notestore import __version__
from notestore.config import Settings, settings


def build_timeout(config: Optional[Settings] = None) -> httpx.Timeout:
    config = config or settings
    return httpx.Timeout(config.http_timeout, connect=config.http_connect_timeout)


def create_http_client(
    config: Optional[Settings] = None,
    transport: Optional[httpx.AsyncBaseTransport] = None,
) -> httpx.AsyncClient:
    """
    Create the AsyncClient used for every outbound request.

    Args:
        config: Settings to read timeouts from (defaults to the singleton)
        transport: Override the network transport (httpx.MockTransport in tests)
    """
    return httpx.AsyncClient(
        timeout=build_timeout(config),
        transport=transport,
        follow_redirects=True,
        headers={"User-Agent": f"notestore/{__version__}"},
    )


def json_or_none(response: httpx.Response) -> Any:
    """Decoded JSON body, or None when the body is empty or not JSON."""
    try:
        return response.json()
    except ValueError:
        return None


async def dispose_client(client: httpx.AsyncClient) -> None:
    """Closes all pooled connections; safe to call twice."""
    if not client.is_closed:
        await client.aclose()
