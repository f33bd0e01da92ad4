"""
Async HTTP client for asset transfer.

Built on httpx. Requests to one host are spaced out by a HostThrottle,
transient transport failures are retried with exponential backoff
(tenacity), and bodies are streamed straight to disk.
"""

import asyncio
import time
from dataclasses import dataclass, field
from pathlib import Path
from typing import Optional
from urllib.parse import urlsplit

import httpx
import structlog
from tenacity import (
    retry,
    stop_after_attempt,
    wait_exponential,
    retry_if_exception_type,
)

from .browser import DEFAULT_USER_AGENT

logger = structlog.get_logger(__name__)


# Failures worth another attempt; HTTP error statuses are final
TRANSIENT_ERRORS = (httpx.TimeoutException, httpx.NetworkError)


@dataclass
class HostThrottle:
    """Minimum spacing between requests to one host."""
    requests_per_second: float = 5.0
    previous: float = 0.0
    lock: asyncio.Lock = field(default_factory=asyncio.Lock)

    async def wait_turn(self) -> None:
        async with self.lock:
            spacing = 1.0 / self.requests_per_second
            remaining = spacing - (time.monotonic() - self.previous)
            if remaining > 0:
                await asyncio.sleep(remaining)
            self.previous = time.monotonic()


class HttpClient:
    """
    Throttled, retrying download client.

    Usage:
        async with HttpClient(requests_per_second=2) as client:
            await client.download("https://www.thcf.org/logo.png", "images/logo.png")
    """

    def __init__(
        self,
        requests_per_second: float = 5.0,
        timeout: float = 30.0,
        user_agent: str = DEFAULT_USER_AGENT,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        """
        Initialize HTTP client.

        Args:
            requests_per_second: Request rate allowed per host
            timeout: Seconds before a request times out
            user_agent: User-Agent header
            transport: Custom httpx transport (tests pass a MockTransport)
        """
        self.requests_per_second = requests_per_second
        self.timeout = timeout
        self.user_agent = user_agent
        self.transport = transport

        self._session: Optional[httpx.AsyncClient] = None
        self._throttles: dict[str, HostThrottle] = {}

    async def __aenter__(self) -> "HttpClient":
        self._session = httpx.AsyncClient(
            timeout=self.timeout,
            follow_redirects=True,
            headers={"User-Agent": self.user_agent},
            transport=self.transport,
        )
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        if self._session is not None:
            await self._session.aclose()
            self._session = None

    def throttle_for(self, url: str) -> HostThrottle:
        host = urlsplit(url).netloc
        throttle = self._throttles.get(host)
        if throttle is None:
            throttle = HostThrottle(requests_per_second=self.requests_per_second)
            self._throttles[host] = throttle
        return throttle

    def _session_or_raise(self) -> httpx.AsyncClient:
        if self._session is None:
            raise RuntimeError("HttpClient is not open. Use 'async with HttpClient()'.")
        return self._session

    @retry(
        stop=stop_after_attempt(3),
        wait=wait_exponential(multiplier=1, min=1, max=10),
        retry=retry_if_exception_type(TRANSIENT_ERRORS),
        reraise=True,
    )
    async def _stream_to_file(self, url: str, target: Path, chunk_size: int) -> int:
        session = self._session_or_raise()
        size = 0

        async with session.stream("GET", url) as response:
            if response.status_code != 200:
                raise httpx.HTTPStatusError(
                    f"HTTP {response.status_code} for {url}",
                    request=response.request,
                    response=response,
                )

            target.parent.mkdir(parents=True, exist_ok=True)
            with open(target, "wb") as out:
                async for chunk in response.aiter_bytes(chunk_size):
                    out.write(chunk)
                    size += len(chunk)

        return size

    async def download(
        self,
        url: str,
        save_path: str | Path,
        chunk_size: int = 8192,
    ) -> int:
        """
        Save the body of url to save_path.

        A failed transfer leaves no partial file behind.

        Returns:
            Size of the saved file in bytes

        Raises:
            httpx.HTTPError: Non-200 status, or transport failure after retries
        """
        self._session_or_raise()
        target = Path(save_path)

        await self.throttle_for(url).wait_turn()
        logger.debug("downloading", url=url, path=str(target))

        try:
            size = await self._stream_to_file(url, target, chunk_size)
        except Exception:
            target.unlink(missing_ok=True)
            raise

        logger.debug("download_complete", url=url, path=str(target), bytes=size)
        return size
