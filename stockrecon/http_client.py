"""Shared HTTP client with a global concurrency cap and retrying GETs."""

import asyncio
import logging
import random
from typing import Optional

import httpx

logger = logging.getLogger(__name__)

DEFAULT_MAX_CONCURRENT = 10
DEFAULT_TIMEOUT = 30
MAX_RETRY_AFTER = 60.0

# Transport failures worth another attempt; anything else propagates at once
RETRYABLE_ERRORS = (httpx.TimeoutException, httpx.ConnectError, httpx.RemoteProtocolError)

# Global HTTP semaphore (limits concurrent requests)
_http_semaphore: Optional[asyncio.Semaphore] = None
_max_concurrent = DEFAULT_MAX_CONCURRENT

# Global HTTP client (for connection pooling)
_http_client: Optional[httpx.AsyncClient] = None


def configure_http(max_concurrent_requests: int = DEFAULT_MAX_CONCURRENT) -> None:
    """Set the global concurrency cap. Takes effect for the next semaphore created."""
    global _max_concurrent, _http_semaphore
    _max_concurrent = max_concurrent_requests
    _http_semaphore = None


def get_http_semaphore() -> asyncio.Semaphore:
    global _http_semaphore
    if _http_semaphore is None:
        _http_semaphore = asyncio.Semaphore(_max_concurrent)
    return _http_semaphore


def get_http_client() -> httpx.AsyncClient:
    """Get or create the pooled client used when a caller brings none."""
    global _http_client
    if _http_client is None:
        _http_client = httpx.AsyncClient(
            timeout=DEFAULT_TIMEOUT,
            limits=httpx.Limits(max_connections=_max_concurrent * 2, max_keepalive_connections=_max_concurrent),
        )
    return _http_client


async def close_http_client() -> None:
    global _http_client
    if _http_client is not None:
        await _http_client.aclose()
        _http_client = None


def _backoff(attempt: int) -> float:
    """Exponential backoff with jitter; attempt counts from 1."""
    return 0.5 * (2 ** (attempt - 1)) + random.uniform(0, 0.2)


def _retry_after(response: httpx.Response) -> Optional[float]:
    value = response.headers.get("Retry-After")
    if value is None:
        return None
    try:
        return min(max(float(value), 0.0), MAX_RETRY_AFTER)
    except ValueError:
        # HTTP-date form
        return None


def _retry_delay(response: httpx.Response, attempt: int) -> Optional[float]:
    """Seconds to wait before retrying this response, or None if it is final."""
    if response.status_code == 429:
        delay = _retry_after(response)
        return _backoff(attempt) if delay is None else delay
    if response.status_code >= 500:
        return _backoff(attempt)
    return None


async def http_get(
    url: str,
    params: Optional[dict] = None,
    headers: Optional[dict] = None,
    timeout: float = DEFAULT_TIMEOUT,
    retries: int = 3,
    client: Optional[httpx.AsyncClient] = None,
) -> httpx.Response:
    """
    GET under the global semaphore, retrying 429, 5xx and transport failures.

    Args:
        url: URL to fetch
        params: Query parameters
        headers: Custom headers
        timeout: Request timeout in seconds
        retries: Total attempts, at least 1
        client: Client to use instead of the shared one

    Returns:
        The first final response (2xx)

    Raises:
        httpx.HTTPStatusError: 4xx, or 429/5xx on the last attempt
        httpx.TransportError: transport failure on the last attempt
    """
    if retries < 1:
        raise ValueError("retries must be at least 1")
    client = client or get_http_client()

    async with get_http_semaphore():
        for attempt in range(1, retries + 1):
            last_attempt = attempt == retries
            try:
                response = await client.get(url, params=params, headers=headers, timeout=timeout)
            except RETRYABLE_ERRORS as exc:
                if last_attempt:
                    logger.error("GET %s failed after %d attempts: %s", url, retries, exc)
                    raise
                delay = _backoff(attempt)
                logger.warning(
                    "GET %s attempt %d/%d failed (%s), retrying in %.2fs",
                    url, attempt, retries, type(exc).__name__, delay,
                )
                await asyncio.sleep(delay)
                continue

            delay = None if last_attempt else _retry_delay(response, attempt)
            if delay is None:
                response.raise_for_status()
                logger.debug("GET %s -> %d", url, response.status_code)
                return response

            logger.warning(
                "GET %s returned %d, retrying in %.2fs (attempt %d/%d)",
                url, response.status_code, delay, attempt, retries,
            )
            await asyncio.sleep(delay)

    raise RuntimeError("unreachable: the last attempt always returns or raises")
