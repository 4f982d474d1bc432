"""
Registry transport for peerbump.

Every package index lookup goes through :class:`HTTPClient`. One client is
shared per ``analyze`` invocation so a single connection pool, a single
concurrency gate and a single pacing clock cover all registries.

Failure handling by outcome:

========================  ==============================================
Outcome                   Handling
========================  ==============================================
2xx / 3xx                 returned to the caller
404                       :class:`RegistryError` (package is not listed)
429                       wait for ``Retry-After``, own retry budget
other 4xx                 :class:`NetworkError`, no retry
5xx, timeout, conn error  exponential backoff with jitter, then give up
========================  ==============================================
"""

from __future__ import annotations

import time
import httpx
import random
import asyncio
from typing import Any, Optional, Dict, cast

from peerbump.utils.logger import get_logger
from peerbump.__version__ import __version__
from peerbump.exceptions import NetworkError, RegistryError
from peerbump.constants import (
    DEFAULT_TIMEOUT,
    DEFAULT_MAX_RETRIES,
    USER_AGENT_TEMPLATE,
)

logger = get_logger("http")

# Consecutive 429 responses tolerated for one request.
THROTTLE_BUDGET = 5

# Upper bound of the random jitter added to each backoff step.
BACKOFF_JITTER = 0.3


def _normalize_url(url: str) -> str:
    """Drop surrounding whitespace and quotes copied from config files."""
    return url.strip().strip("\"'")


def _backoff_delay(attempt: int) -> float:
    """Seconds to wait before retry number ``attempt + 1``."""
    return float(2**attempt) + random.uniform(0.0, BACKOFF_JITTER)


class HTTPClient:
    """Async JSON client used to query package registries.

    Args:
        timeout: Per-request timeout in seconds.
        max_retries: Extra attempts after a transient failure.
        rate_limit_delay: Minimum spacing between two outgoing requests.
        verify_ssl: Verify TLS certificates.
        user_agent: ``User-Agent`` header, defaults to ``peerbump/<version>``.
        max_concurrency: Requests allowed in flight at once.

    Example:
        >>> async with HTTPClient() as client:
        ...     meta = await client.get_json("https://pypi.org/pypi/attrs/json")
    """

    def __init__(
        self,
        *,
        timeout: int = DEFAULT_TIMEOUT,
        max_retries: int = DEFAULT_MAX_RETRIES,
        rate_limit_delay: float = 0.0,
        verify_ssl: bool = True,
        user_agent: Optional[str] = None,
        max_concurrency: int = 10,
    ) -> None:
        self.timeout = timeout
        self.max_retries = max_retries
        self.rate_limit_delay = rate_limit_delay
        self.verify_ssl = verify_ssl
        self.user_agent = user_agent or USER_AGENT_TEMPLATE.format(version=__version__)
        self.max_concurrency = max_concurrency

        self._client: Optional[httpx.AsyncClient] = None
        self._gate = asyncio.Semaphore(max_concurrency)
        self._pace_lock = asyncio.Lock()
        self._last_request_time: float = 0.0
        self._max_429_retries: int = THROTTLE_BUDGET

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    async def __aenter__(self) -> "HTTPClient":
        await self._ensure_client()
        return self

    async def __aexit__(self, exc_type: Any, exc: Any, tb: Any) -> None:
        await self.close()

    async def _ensure_client(self) -> httpx.AsyncClient:
        if self._client is None:
            self._client = httpx.AsyncClient(
                http2=True,
                verify=self.verify_ssl,
                timeout=httpx.Timeout(self.timeout),
                follow_redirects=True,
                headers={
                    "Accept": "application/json",
                    "User-Agent": self.user_agent,
                },
            )
            logger.debug("Opened registry client (http2, timeout=%ss)", self.timeout)
        return self._client

    async def close(self) -> None:
        """Release the connection pool; safe to call more than once."""
        client, self._client = self._client, None
        if client is not None:
            await client.aclose()

    # ------------------------------------------------------------------
    # Single attempt
    # ------------------------------------------------------------------

    async def _pace(self) -> None:
        """Hold the caller until ``rate_limit_delay`` has passed since the last send."""
        if self.rate_limit_delay <= 0:
            return

        async with self._pace_lock:
            now = time.monotonic()
            wait = self._last_request_time + self.rate_limit_delay - now
            self._last_request_time = now + max(wait, 0.0)
            if wait > 0:
                await asyncio.sleep(wait)

    async def _send_once(self, method: str, url: str, **kwargs: Any) -> httpx.Response:
        client = await self._ensure_client()
        await self._pace()
        async with self._gate:
            return await client.request(method, url, **kwargs)

    @staticmethod
    def _retry_after(response: httpx.Response) -> int:
        """Seconds requested by a ``Retry-After`` header, 1 when unreadable."""
        raw = response.headers.get("Retry-After", "1")
        try:
            return max(int(raw), 0)
        except ValueError:
            return 1

    # ------------------------------------------------------------------
    # Retry loop
    # ------------------------------------------------------------------

    async def _request_with_retry(
        self,
        method: str,
        url: str,
        **kwargs: Any,
    ) -> httpx.Response:
        """Send ``method url`` until it succeeds or the retry budget runs out.

        Raises:
            RegistryError: The registry answered 404.
            NetworkError: A non-retryable 4xx, too many 429s, or every
                attempt failed transiently.
        """
        target = _normalize_url(url)
        attempts = self.max_retries + 1
        attempt = 0
        throttled = 0
        failure: Optional[Exception] = None

        while attempt < attempts:
            try:
                response = await self._send_once(method, target, **kwargs)
            except (httpx.TimeoutException, httpx.NetworkError) as exc:
                failure = exc
                logger.warning(
                    "%s talking to %s (attempt %d of %d)",
                    type(exc).__name__,
                    target,
                    attempt + 1,
                    attempts,
                )
            else:
                status = response.status_code

                if status == 429:
                    throttled += 1
                    if throttled > self._max_429_retries:
                        raise NetworkError(
                            f"Rate limit exceeded after {self._max_429_retries} retries",
                            url=target,
                            status_code=429,
                        )
                    pause = self._retry_after(response)
                    logger.warning(
                        "Registry throttled %s, sleeping %ds (%d/%d)",
                        target,
                        pause,
                        throttled,
                        self._max_429_retries,
                    )
                    await asyncio.sleep(pause)
                    continue

                if status < 400:
                    return response

                if status == 404:
                    raise RegistryError(
                        f"Resource not found: {target}",
                        url=target,
                        status_code=404,
                    )

                if status < 500:
                    raise NetworkError(
                        f"HTTP {status} error for {target}",
                        url=target,
                        status_code=status,
                        response_body=response.text,
                    )

                try:
                    response.raise_for_status()
                except httpx.HTTPStatusError as exc:
                    failure = exc
                logger.warning(
                    "Registry answered %d for %s (attempt %d of %d)",
                    status,
                    target,
                    attempt + 1,
                    attempts,
                )

            attempt += 1
            if attempt < attempts:
                delay = _backoff_delay(attempt - 1)
                logger.debug("Backing off %.2fs before retrying %s", delay, target)
                await asyncio.sleep(delay)

        raise NetworkError(
            f"Request failed after {attempts} attempts: {target}",
            url=target,
        ) from failure

    # ------------------------------------------------------------------
    # Public helpers
    # ------------------------------------------------------------------

    async def get(self, url: str, **kwargs: Any) -> httpx.Response:
        """GET ``url`` through the retry loop."""
        return await self._request_with_retry("GET", url, **kwargs)

    async def get_json(self, url: str, **kwargs: Any) -> Dict[str, Any]:
        """GET ``url`` and decode the body as a JSON object.

        Registry metadata documents are always objects, so any other JSON
        value is reported as a malformed response.

        Raises:
            RegistryError: The registry does not know the resource.
            NetworkError: Transport failure, or a body that is not a JSON object.
        """
        response = await self.get(url, **kwargs)

        try:
            payload = response.json()
        except ValueError as exc:
            raise NetworkError(
                f"Invalid JSON response from {url}",
                url=url,
                response_body=response.text,
            ) from exc

        if isinstance(payload, dict):
            return cast(Dict[str, Any], payload)

        raise NetworkError(
            f"Expected JSON object from {url}, got {type(payload).__name__}",
            url=url,
            response_body=response.text,
        )
