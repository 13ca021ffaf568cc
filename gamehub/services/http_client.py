"""Async HTTP client used by discovery."""

import asyncio
import time
from types import TracebackType

import httpx
import structlog

from .. import __version__

log = structlog.stdlib.get_logger()


def _parse_retry_after(value: str | None) -> float | None:
    if value is None:
        return None
    try:
        return max(0.0, float(value))
    except ValueError:
        return None


class HttpClientService:
    """One pooled ``httpx.AsyncClient`` with GET retries and cheap existence checks.

    Args:
        timeout: Per-request timeout in seconds
        max_retries: Extra GET attempts after the first one
        base_delay: First backoff delay in seconds, doubled per retry
        max_delay: Upper bound for any wait between attempts
        rate_limit_delay: Minimum spacing between GET requests, 0 to disable
        max_connections: Connection pool size
    """

    def __init__(
        self,
        timeout: float = 10.0,
        max_retries: int = 1,
        base_delay: float = 0.5,
        max_delay: float = 10.0,
        rate_limit_delay: float = 0.0,
        max_connections: int = 20,
    ) -> None:
        self.max_retries = max_retries
        self.base_delay = base_delay
        self.max_delay = max_delay
        self.rate_limit_delay = rate_limit_delay
        self._next_request_at = 0.0

        self._client = httpx.AsyncClient(
            headers={"User-Agent": f"game-hub/{__version__}"},
            timeout=timeout,
            follow_redirects=True,
            limits=httpx.Limits(max_connections=max_connections, max_keepalive_connections=max(1, max_connections // 2)),
        )
        log.debug("HTTP client ready", timeout=timeout, max_retries=max_retries, max_connections=max_connections)

    async def get(
        self,
        url: str,
        headers: dict[str, str] | None = None,
        params: dict[str, str] | None = None,
    ) -> httpx.Response:
        """GET a URL, retrying server errors and transport failures.

        Client errors (4xx) are raised at once, except 429, which waits for
        ``retry-after`` when the server sends one.

        Raises:
            httpx.HTTPStatusError: For a 4xx answer, or a 5xx answer on the last attempt
            httpx.RequestError: If the transport still fails on the last attempt
        """
        await self._wait_for_slot()

        attempt = 0
        while True:
            try:
                response = await self._client.get(url, headers=headers, params=params)
                response.raise_for_status()
            except (httpx.HTTPStatusError, httpx.RequestError) as e:
                delay = self._retry_delay(e, attempt)
                log.warning(
                    "HTTP GET request failed",
                    url=url,
                    attempt=attempt + 1,
                    error=str(e),
                    error_type=type(e).__name__,
                    retry_in=delay,
                )
                if delay is None:
                    raise
                await asyncio.sleep(delay)
                attempt += 1
                continue

            log.debug("HTTP GET request succeeded", url=url, status_code=response.status_code, size=len(response.content))
            return response

    def _retry_delay(self, error: httpx.HTTPError, attempt: int) -> float | None:
        """Seconds to wait before the next attempt, or None to give up."""
        if attempt >= self.max_retries:
            return None
        if isinstance(error, httpx.HTTPStatusError):
            status = error.response.status_code
            if status == 429:
                retry_after = _parse_retry_after(error.response.headers.get("retry-after"))
                if retry_after is not None:
                    return min(retry_after, self.max_delay)
            elif status < 500:
                return None
        return min(self.base_delay * 2 ** attempt, self.max_delay)

    async def exists(self, url: str) -> bool:
        """True if a HEAD request for ``url`` ends in a 2xx status.

        No body is transferred and nothing is retried; a transport failure
        counts as missing.
        """
        try:
            response = await self._client.head(url)
        except httpx.RequestError as e:
            log.debug("Existence check failed", url=url, error=str(e), error_type=type(e).__name__)
            return False
        log.debug("Existence check", url=url, status_code=response.status_code)
        return response.is_success

    async def _wait_for_slot(self) -> None:
        if self.rate_limit_delay <= 0:
            return
        wait = self._next_request_at - time.monotonic()
        if wait > 0:
            await asyncio.sleep(wait)
        self._next_request_at = time.monotonic() + self.rate_limit_delay

    async def close(self) -> None:
        await self._client.aclose()
        log.debug("HTTP client closed")

    async def __aenter__(self) -> "HttpClientService":
        return self

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc_val: BaseException | None,
        exc_tb: TracebackType | None,
    ) -> None:
        await self.close()
