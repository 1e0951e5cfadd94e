"""
HTTP client utilities for pyelevate.

Every fetcher talks to the network through one shared :class:`HTTPClient`:
an ``httpx.AsyncClient`` with a per-request deadline, a concurrency bound,
optional pacing between requests and optional retries. Failures are
normalized to :class:`~pyelevate.exceptions.NetworkError` so callers only
need to handle one exception family.
"""

from __future__ import annotations

import time
import random
import asyncio
from typing import Any, Dict, Optional, cast

import httpx

from pyelevate.utils.logger import get_logger
from pyelevate.__version__ import __version__
from pyelevate.exceptions import NetworkError, PackageIndexError
from pyelevate.constants import (
    DEFAULT_TIMEOUT,
    DEFAULT_MAX_RETRIES,
    DEFAULT_MAX_CONCURRENCY,
    USER_AGENT_TEMPLATE,
)

logger = get_logger("http")


class HTTPClient:
    """Asynchronous HTTP client shared by the resolution and enrichment phases.

    Args:
        timeout: Deadline for a single request, in seconds.
        max_retries: Extra attempts after a timeout, transport error or 5xx.
        rate_limit_delay: Minimum delay (seconds) between requests.
        verify_ssl: Whether to verify SSL certificates.
        user_agent: Custom User-Agent header value.
        max_concurrency: Maximum number of in-flight requests.

    Example:
        >>> async with HTTPClient(timeout=10) as client:
        ...     data = await client.get_json("https://pypi.org/pypi/requests/json")
    """

    def __init__(
        self,
        *,
        timeout: float = DEFAULT_TIMEOUT,
        max_retries: int = DEFAULT_MAX_RETRIES,
        rate_limit_delay: float = 0.0,
        verify_ssl: bool = True,
        user_agent: Optional[str] = None,
        max_concurrency: int = DEFAULT_MAX_CONCURRENCY,
    ) -> None:
        self.timeout = timeout
        self.max_retries = max(0, max_retries)
        self.rate_limit_delay = rate_limit_delay
        self.verify_ssl = verify_ssl
        self.user_agent = user_agent or USER_AGENT_TEMPLATE.format(version=__version__)
        self.max_concurrency = max_concurrency

        self._client: Optional[httpx.AsyncClient] = None
        self._last_request_time: float = 0.0
        self._rate_limit_lock = asyncio.Lock()
        self._semaphore = asyncio.Semaphore(max_concurrency)
        self._max_429_retries: int = 3

    async def __aenter__(self) -> "HTTPClient":
        await self._ensure_client()
        return self

    async def __aexit__(self, exc_type: Any, exc: Any, tb: Any) -> None:
        await self.close()

    async def _ensure_client(self) -> None:
        """Create the underlying httpx client on first use."""
        if self._client is None:
            self._client = httpx.AsyncClient(
                timeout=httpx.Timeout(self.timeout),
                http2=True,
                verify=self.verify_ssl,
                follow_redirects=True,
                headers={"User-Agent": self.user_agent},
            )

    async def close(self) -> None:
        """Close the underlying HTTP client."""
        if self._client is not None:
            await self._client.aclose()
            self._client = None

    async def _rate_limit(self) -> None:
        """Enforce a minimum delay between outgoing requests."""
        if self.rate_limit_delay <= 0:
            return

        async with self._rate_limit_lock:
            now = time.monotonic()
            wait = self._last_request_time + self.rate_limit_delay - now
            if wait > 0:
                self._last_request_time = now + wait
                await asyncio.sleep(wait)
            else:
                self._last_request_time = now

    async def _request(self, method: str, url: str, **kwargs: Any) -> httpx.Response:
        """Send one request, retrying only where ``max_retries`` allows."""
        await self._ensure_client()
        assert self._client is not None

        last_exc: Optional[Exception] = None
        throttled = 0
        attempt = 0

        while attempt <= self.max_retries:
            await self._rate_limit()
            try:
                async with self._semaphore:
                    response = await self._client.request(method, url, **kwargs)
            except httpx.TimeoutException as exc:
                last_exc = exc
                logger.debug("Timeout after %ss: %s %s", self.timeout, method, url)
            except httpx.TransportError as exc:
                last_exc = exc
                logger.debug("Transport error for %s %s: %s", method, url, exc)
            except httpx.HTTPError as exc:
                raise NetworkError(
                    f"Request failed for {url}: {exc}",
                    url=url,
                ) from exc
            else:
                if response.status_code == 429 and throttled < self._max_429_retries:
                    throttled += 1
                    retry_after = _retry_after_seconds(response)
                    logger.warning(
                        "Rate limited by %s, retrying in %ss (%d/%d)",
                        url,
                        retry_after,
                        throttled,
                        self._max_429_retries,
                    )
                    await asyncio.sleep(retry_after)
                    continue

                if response.status_code == 404:
                    raise PackageIndexError(
                        f"Resource not found: {url}",
                        url=url,
                        status_code=404,
                    )

                if response.status_code < 500 or attempt == self.max_retries:
                    return _check_status(response, url)

                last_exc = NetworkError(
                    f"HTTP {response.status_code} error for {url}",
                    url=url,
                    status_code=response.status_code,
                )

            if attempt < self.max_retries:
                delay = (2**attempt) + random.uniform(0.0, 0.3)
                logger.debug("Retrying %s in %.2fs", url, delay)
                await asyncio.sleep(delay)
            attempt += 1

        if isinstance(last_exc, NetworkError):
            raise last_exc
        raise NetworkError(
            f"Request failed after {self.max_retries + 1} attempt(s): {url}",
            url=url,
        ) from last_exc

    async def get(self, url: str, **kwargs: Any) -> httpx.Response:
        """Perform a GET request."""
        return await self._request("GET", url, **kwargs)

    async def post(self, url: str, **kwargs: Any) -> httpx.Response:
        """Perform a POST request."""
        return await self._request("POST", url, **kwargs)

    async def get_json(self, url: str, **kwargs: Any) -> Dict[str, Any]:
        """GET ``url`` and decode the body as a JSON object."""
        response = await self.get(url, **kwargs)
        return _decode_object(response, url)

    async def post_json(
        self,
        url: str,
        payload: Dict[str, Any],
        **kwargs: Any,
    ) -> Dict[str, Any]:
        """POST ``payload`` as JSON and decode the body as a JSON object."""
        response = await self.post(url, json=payload, **kwargs)
        return _decode_object(response, url)


def _retry_after_seconds(response: httpx.Response) -> int:
    try:
        return max(0, int(response.headers.get("Retry-After", "1")))
    except ValueError:
        return 1


def _check_status(response: httpx.Response, url: str) -> httpx.Response:
    """Return ``response`` if it is 2xx/3xx, else raise ``NetworkError``."""
    if response.status_code >= 400:
        raise NetworkError(
            f"HTTP {response.status_code} error for {url}",
            url=url,
            status_code=response.status_code,
            response_body=response.text,
        )
    return response


def _decode_object(response: httpx.Response, url: str) -> Dict[str, Any]:
    try:
        data = response.json()
    except ValueError as exc:
        raise NetworkError(
            f"Invalid JSON response from {url}",
            url=url,
            response_body=response.text,
        ) from exc

    if not isinstance(data, dict):
        raise NetworkError(
            f"Expected JSON object from {url}",
            url=url,
            response_body=response.text,
        )

    return cast(Dict[str, Any], data)
