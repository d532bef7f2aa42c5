"""Shared httpx plumbing for the remote clients."""

import logging
from typing import Any

import httpx

from bob.exceptions import RemoteError

logger = logging.getLogger(__name__)

DEFAULT_TIMEOUT = 30.0
USER_AGENT = "bob-chatops/1.0"


def build_async_client(
    base_url: str,
    *,
    headers: dict[str, str] | None = None,
    timeout: float = DEFAULT_TIMEOUT,
    transport: httpx.AsyncBaseTransport | None = None,
) -> httpx.AsyncClient:
    """Create an `httpx.AsyncClient` with the defaults every client uses.

    Args:
        base_url: API root all request paths are relative to
        headers: Extra headers (auth, API version)
        timeout: Per-request timeout in seconds
        transport: Optional transport override, used by tests

    Returns:
        Configured client
    """
    merged = {"User-Agent": USER_AGENT, "Accept": "application/json"}
    if headers:
        merged.update(headers)
    return httpx.AsyncClient(
        base_url=base_url.rstrip("/"),
        headers=merged,
        timeout=httpx.Timeout(timeout),
        transport=transport,
    )


async def send(
    client: httpx.AsyncClient,
    method: str,
    path: str,
    **kwargs: Any,
) -> httpx.Response:
    """Send a request and turn transport errors and non-2xx replies into `RemoteError`."""
    logger.debug("%s %s", method, path)
    try:
        response = await client.request(method, path, **kwargs)
    except httpx.HTTPError as e:
        raise RemoteError(f"{method} {path} failed: {e}") from e

    if response.is_error:
        snippet = response.text[:200]
        raise RemoteError(
            f"{method} {path} returned {response.status_code}: {snippet}",
            status_code=response.status_code,
        )
    return response


def json_body(response: httpx.Response) -> Any:
    """Decode a JSON reply, raising `RemoteError` on garbage."""
    try:
        return response.json()
    except ValueError as e:
        raise RemoteError(
            f"Invalid JSON from {response.request.method} {response.request.url.path}"
        ) from e
