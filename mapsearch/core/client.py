"""Rate-limited HTTP client for the Nominatim geocoding service."""
import asyncio
import time
from typing import Any, Callable, Dict, Optional

import requests

from mapsearch.core.config import (
    ACCEPT_LANGUAGE,
    NOMINATIM_URL,
    RATE_LIMIT_MS,
    REQUEST_TIMEOUT_MS,
    SEARCH_LIMIT,
    USER_AGENT,
)
from mapsearch.core.errors import MalformedResponse, NetworkError
from mapsearch.core.models import Query
from mapsearch.utils.timing import Timer


class RateLimiter:
    """Spaces request starts at least min_interval apart for everyone sharing it."""

    def __init__(self, min_interval_ms: float = RATE_LIMIT_MS, clock: Callable[[], float] = time.monotonic):
        """
        Initialize rate limiter.

        Args:
            min_interval_ms: Minimum gap between the starts of two requests
            clock: Monotonic time source in seconds
        """
        self.min_interval = min_interval_ms / 1000.0
        self._clock = clock
        self._lock: Optional[asyncio.Lock] = None
        self._lock_loop: Optional[asyncio.AbstractEventLoop] = None
        self._last_request_time: Optional[float] = None

    @property
    def last_request_time(self) -> Optional[float]:
        return self._last_request_time

    def _get_lock(self) -> asyncio.Lock:
        # asyncio.Lock binds to the loop it first waits on; each asyncio.run gets its own.
        loop = asyncio.get_running_loop()
        if self._lock is None or self._lock_loop is not loop:
            self._lock = asyncio.Lock()
            self._lock_loop = loop
        return self._lock

    async def acquire(self) -> float:
        """
        Wait until the interval since the previous start has passed, then claim the slot.

        The wait and the stamp happen under one lock, so concurrent callers are
        admitted one at a time.

        Returns:
            Clock value recorded as this request's start
        """
        async with self._get_lock():
            if self._last_request_time is not None:
                while True:
                    remaining = self._last_request_time + self.min_interval - self._clock()
                    if remaining <= 0:
                        break
                    await asyncio.sleep(remaining)
            self._last_request_time = self._clock()
            return self._last_request_time


class RateLimitedClient:
    """Nominatim client; every request passes through a shared RateLimiter."""

    def __init__(
        self,
        rate_limiter: Optional[RateLimiter] = None,
        session: Optional[requests.Session] = None,
        base_url: str = NOMINATIM_URL,
        user_agent: str = USER_AGENT,
        timeout_ms: float = REQUEST_TIMEOUT_MS,
        limit: int = SEARCH_LIMIT,
        language: str = ACCEPT_LANGUAGE,
    ):
        """
        Initialize client.

        Args:
            rate_limiter: Limiter to share with other clients (a private one is created if omitted)
            session: requests session used for HTTP
            base_url: Nominatim base URL
            user_agent: User-Agent identifying this application
            timeout_ms: Upper bound on a single request, excluding the rate-limit wait
            limit: Maximum number of search results to ask for
            language: Preferred response language
        """
        self.rate_limiter = rate_limiter or RateLimiter()
        self.session = session or requests.Session()
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout_ms / 1000.0
        self.limit = limit
        self.language = language
        self.headers = {
            "User-Agent": user_agent,
            "Accept-Language": language,
        }

    def _get(self, url: str, params: Dict[str, str]) -> requests.Response:
        return self.session.get(url, params=params, headers=self.headers, timeout=self.timeout)

    async def request(self, query: Query) -> Any:
        """
        Send one query and return the decoded JSON body.

        Args:
            query: Text or coordinate query

        Returns:
            Decoded JSON payload (not validated)

        Raises:
            NetworkError: on transport failure, timeout or non-2xx status
            MalformedResponse: if the body is not JSON
        """
        url = f"{self.base_url}/{query.endpoint}"
        params = query.to_params(limit=self.limit, language=self.language)

        await self.rate_limiter.acquire()

        with Timer("geocode_request", endpoint=query.endpoint):
            try:
                response = await asyncio.wait_for(
                    asyncio.to_thread(self._get, url, params),
                    timeout=self.timeout,
                )
            except asyncio.TimeoutError as e:
                raise NetworkError(
                    f"Request to /{query.endpoint} timed out after {self.timeout:.1f}s", cause=e
                ) from e
            except requests.RequestException as e:
                raise NetworkError(f"Request to /{query.endpoint} failed: {e}", cause=e) from e

        if not 200 <= response.status_code < 300:
            raise NetworkError(
                f"HTTP error! status: {response.status_code}", status_code=response.status_code
            )

        try:
            return response.json()
        except ValueError as e:
            raise MalformedResponse(f"Response from /{query.endpoint} is not JSON") from e

    async def search(self, text: str) -> Any:
        return await self.request(Query.for_text(text))

    async def reverse(self, latitude: float, longitude: float) -> Any:
        return await self.request(Query.for_point(latitude, longitude))

    def close(self):
        self.session.close()
