"""HTTP fetching with rate-limit gating, retries and pacing."""

import asyncio
from dataclasses import dataclass
from typing import Any, Dict, Optional

import aiohttp

from funding_arb.transport.rate_limiter import RateLimiter
from funding_arb.utils import get_logger


USER_AGENT = "funding-arb/1.0"


@dataclass
class FetchResult:
    """Outcome of a fetch: parsed JSON on success, last error message otherwise."""

    data: Any = None
    error: Optional[str] = None
    attempts: int = 0

    @property
    def success(self) -> bool:
        return self.error is None


class ResilientFetcher:
    """
    GET-and-parse-JSON client for one provider.

    - Waits for a free slot in the provider's rate limiter before each call.
    - HTTP 429: waits twice the base delay, then retries.
    - Other errors: waits ``base_delay * attempt`` before the next attempt.
    - After a successful call waits ``base_delay`` once more so that steady
      state throughput stays under the provider quota.

    Failures are returned as ``FetchResult`` with ``error`` set, never raised.
    """

    def __init__(
        self,
        name: str,
        limiter: RateLimiter,
        base_delay: float = 2.4,
        max_retries: int = 3,
        timeout: float = 30.0,
        session: Optional[aiohttp.ClientSession] = None,
    ):
        self.name = name
        self.limiter = limiter
        self.base_delay = base_delay
        self.max_retries = max_retries
        self.timeout = timeout
        self._session = session
        self._owns_session = session is None
        self._logger = get_logger()

    async def _get_session(self) -> aiohttp.ClientSession:
        """Get or create aiohttp session."""
        if self._session is None or self._session.closed:
            timeout = aiohttp.ClientTimeout(total=self.timeout, connect=10)
            connector = aiohttp.TCPConnector(limit=10, force_close=True)
            self._session = aiohttp.ClientSession(
                headers={"Accept": "application/json", "User-Agent": USER_AGENT},
                timeout=timeout,
                connector=connector,
            )
            self._owns_session = True
        return self._session

    async def close(self):
        """Close HTTP session if this fetcher created it."""
        if self._owns_session and self._session and not self._session.closed:
            await self._session.close()
            self._session = None

    async def _wait_for_slot(self) -> None:
        while not self.limiter.can_proceed():
            wait = self.limiter.time_until_next_slot()
            self._logger.debug(f"{self.name}: rate limit reached, waiting {wait:.1f}s")
            await asyncio.sleep(wait)

    async def fetch(
        self,
        url: str,
        headers: Optional[Dict[str, str]] = None,
        params: Optional[Dict[str, Any]] = None,
        max_retries: Optional[int] = None,
    ) -> FetchResult:
        """Fetch a URL and parse the JSON body."""
        retries = max_retries if max_retries is not None else self.max_retries
        session = await self._get_session()
        last_error = "Max retries exceeded"

        self._logger.debug(f"{self.name}: GET {url}")

        for attempt in range(1, retries + 1):
            await self._wait_for_slot()
            self.limiter.record()

            try:
                async with session.get(url, headers=headers, params=params) as resp:
                    if resp.status == 429:
                        last_error = "HTTP 429: Too Many Requests"
                        self._logger.warning(
                            f"{self.name}: rate limit hit, waiting before retry "
                            f"(attempt {attempt}/{retries})"
                        )
                        await asyncio.sleep(self.base_delay * 2)
                        continue

                    if resp.status < 200 or resp.status >= 300:
                        raise aiohttp.ClientError(f"HTTP {resp.status}: {resp.reason}")

                    data = await resp.json(content_type=None)

                await asyncio.sleep(self.base_delay)
                return FetchResult(data=data, attempts=attempt)

            except (aiohttp.ClientError, asyncio.TimeoutError, ValueError) as e:
                last_error = str(e) or e.__class__.__name__
                self._logger.warning(
                    f"{self.name}: request failed for {url} (attempt {attempt}/{retries}): {last_error}"
                )
                if attempt < retries:
                    await asyncio.sleep(self.base_delay * attempt)

        return FetchResult(error=last_error, attempts=retries)
