"""Shared async HTTP helpers for provider adapters.

Keeps timeouts, retries and error translation in one place so adapters
only deal with provider payloads. Only transport errors (connection
failures, timeouts) are retried; HTTP status errors and malformed JSON
surface immediately as ProviderError.
"""

import logging
from typing import Any

import httpx
from tenacity import AsyncRetrying, retry_if_exception_type, stop_after_attempt, wait_exponential

from config import settings
from services.errors import ProviderError

logger = logging.getLogger(__name__)

USER_AGENT = "course-sponsor-discovery/1.0"


def build_client(
    base_url: str = "",
    timeout: float | None = None,
    headers: dict[str, str] | None = None,
    auth: httpx.Auth | tuple[str, str] | None = None,
    transport: httpx.AsyncBaseTransport | None = None,
) -> httpx.AsyncClient:
    """Create an AsyncClient with the default timeout and user agent."""
    merged = {"User-Agent": USER_AGENT, "Accept": "application/json"}
    merged.update(headers or {})
    return httpx.AsyncClient(
        base_url=base_url,
        timeout=timeout if timeout is not None else settings.http_timeout_seconds,
        headers=merged,
        auth=auth,
        transport=transport,
    )


async def request_json(
    client: httpx.AsyncClient,
    method: str,
    url: str,
    *,
    provider: str,
    max_attempts: int | None = None,
    retry_wait: Any = None,
    **kwargs: Any,
) -> Any:
    """Send one request with retry on transport errors and return decoded JSON.

    Raises:
        ProviderError: on exhausted retries, non-2xx status or a body that
            is not valid JSON.
    """
    retrying = AsyncRetrying(
        wait=retry_wait if retry_wait is not None else wait_exponential(min=1, max=16),
        stop=stop_after_attempt(max_attempts or settings.http_max_attempts),
        retry=retry_if_exception_type(httpx.TransportError),
        reraise=True,
    )
    try:
        async for attempt in retrying:
            with attempt:
                response = await client.request(method, url, **kwargs)
        response.raise_for_status()
    except httpx.HTTPStatusError as e:
        logger.error("%s returned HTTP %d for %s", provider, e.response.status_code, url)
        raise ProviderError(provider, f"HTTP {e.response.status_code} from {url}") from e
    except httpx.HTTPError as e:
        logger.error("%s request to %s failed: %s", provider, url, e)
        raise ProviderError(provider, f"request to {url} failed: {e}") from e

    try:
        return response.json()
    except ValueError as e:
        raise ProviderError(provider, f"malformed JSON from {url}") from e
