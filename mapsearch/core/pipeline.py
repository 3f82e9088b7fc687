"""Query pipeline: debounced, rate-limited, stale-suppressed geocoding lookups."""
from typing import Any, Callable, Dict, Iterator, List, Optional, Union

from mapsearch.core.client import RateLimitedClient
from mapsearch.core.config import (
    HOVER_DEBOUNCE_MS,
    ORIGIN_HOVER,
    ORIGIN_SEARCH,
    SEARCH_DEBOUNCE_MS,
    SEARCH_LIMIT,
)
from mapsearch.core.debounce import Debouncer
from mapsearch.core.errors import MalformedResponse, NetworkError
from mapsearch.core.models import CandidateResult, Query
from mapsearch.utils.error_handler import catch_and_log
from mapsearch.utils.logging import log_error, log_structured

# Returned by run_search / run_reverse when a newer query for the same origin superseded it
STALE = object()

CandidatesCallback = Callable[[List[CandidateResult]], Any]
LocationCallback = Callable[[str, Optional[CandidateResult]], Any]


def iter_candidates(payload: Any, limit: int = SEARCH_LIMIT) -> Iterator[CandidateResult]:
    """
    Lazily parse a search payload into distinct candidates, at most limit of them.

    Non-list payloads yield nothing; entries without a name or coordinates are skipped.
    """
    if not isinstance(payload, list):
        if payload is not None:
            log_structured("warning", "Search response is not a list", payload_type=type(payload).__name__)
        return

    seen = set()
    for item in payload:
        if len(seen) >= limit:
            return
        try:
            candidate = CandidateResult.from_payload(item)
        except MalformedResponse as e:
            log_structured("warning", "Skipping malformed search result", error=str(e))
            continue
        if candidate in seen:
            continue
        seen.add(candidate)
        yield candidate


def parse_reverse(payload: Any) -> Optional[CandidateResult]:
    """Single best match from a reverse payload, or None."""
    if not isinstance(payload, dict):
        if payload is not None:
            log_structured("warning", "Reverse response is not an object", payload_type=type(payload).__name__)
        return None
    # Nominatim answers {"error": "Unable to geocode"} for open water
    if "error" in payload:
        log_structured("debug", "Reverse lookup found nothing", error=str(payload["error"]))
        return None
    try:
        return CandidateResult.from_payload(payload)
    except MalformedResponse as e:
        log_structured("warning", "Malformed reverse result", error=str(e))
        return None


class QueryPipeline:
    """
    Turns typed text and pointer positions into published geocoding results.

    Every origin (search box, each map hover probe) has its own debounce slot
    and its own generation counter. A response is published only if no newer
    query for its origin has been issued since it was sent.
    """

    def __init__(
        self,
        client: Optional[RateLimitedClient] = None,
        debouncer: Optional[Debouncer] = None,
        on_candidates: Optional[CandidatesCallback] = None,
        on_location: Optional[LocationCallback] = None,
        search_delay_ms: float = SEARCH_DEBOUNCE_MS,
        hover_delay_ms: float = HOVER_DEBOUNCE_MS,
        limit: int = SEARCH_LIMIT,
    ):
        """
        Initialize pipeline.

        Args:
            client: Geocoding client (its rate limiter may be shared with other pipelines)
            debouncer: Debouncer owning the per-origin timers
            on_candidates: Receives each published search result list
            on_location: Receives (origin, candidate or None) for each published reverse lookup
            search_delay_ms: Quiet period before a typed query is sent
            hover_delay_ms: Quiet period before a pointer position is looked up
            limit: Maximum number of candidates per search
        """
        self.client = client or RateLimitedClient()
        self.debouncer = debouncer or Debouncer()
        self.on_candidates = on_candidates
        self.on_location = on_location
        self.search_delay_ms = search_delay_ms
        self.hover_delay_ms = hover_delay_ms
        self.limit = limit
        self._generations: Dict[str, int] = {}

    def issue_token(self, origin: str) -> int:
        """Start a new generation for origin; answers carrying older tokens are dropped."""
        token = self._generations.get(origin, 0) + 1
        self._generations[origin] = token
        return token

    def is_current(self, origin: str, token: int) -> bool:
        return self._generations.get(origin, 0) == token

    def search(self, text: str) -> None:
        """
        Handle a keystroke in the search box.

        Blank text clears the results at once without touching the network;
        anything else is sent after the search quiet period.
        """
        if not text or not text.strip():
            self.cancel(ORIGIN_SEARCH)
            self._publish_candidates([])
            return
        token = self.issue_token(ORIGIN_SEARCH)
        self.debouncer.schedule(ORIGIN_SEARCH, self.run_search, self.search_delay_ms, text, token)

    def reverse_lookup(self, latitude: float, longitude: float, origin: str = ORIGIN_HOVER,
                       delay_ms: Optional[float] = None) -> None:
        """Handle a pointer position from a map; looked up after the hover quiet period."""
        if delay_ms is None:
            delay_ms = self.hover_delay_ms
        token = self.issue_token(origin)
        self.debouncer.schedule(origin, self.run_reverse, delay_ms, latitude, longitude, origin, token)

    def cancel(self, origin: str) -> None:
        """Drop the pending query for origin and make any in-flight response stale."""
        self.debouncer.cancel(origin)
        self.issue_token(origin)

    def close(self) -> None:
        self.debouncer.cancel_all()

    async def run_search(self, text: str, token: Optional[int] = None) -> Union[List[CandidateResult], object]:
        """
        Run a search immediately (no debounce) and publish it if still current.

        Args:
            text: Search text
            token: Generation issued when the search was scheduled; a fresh one if omitted

        Returns:
            Published candidate list, or STALE if a newer search superseded this one
        """
        if token is None:
            token = self.issue_token(ORIGIN_SEARCH)

        candidates: List[CandidateResult] = []
        if text and text.strip():
            payload = await self._fetch(Query.for_text(text), ORIGIN_SEARCH)
            candidates = list(iter_candidates(payload, self.limit))

        if not self.is_current(ORIGIN_SEARCH, token):
            log_structured("debug", "Dropped stale response", origin=ORIGIN_SEARCH, token=token)
            return STALE

        log_structured("info", "Search results published", result_count=len(candidates))
        self._publish_candidates(candidates)
        return candidates

    async def run_reverse(self, latitude: float, longitude: float,
                          origin: str = ORIGIN_HOVER,
                          token: Optional[int] = None) -> Union[Optional[CandidateResult], object]:
        """
        Reverse-geocode a point immediately and publish it if still current.

        Returns:
            Best match or None, or STALE if a newer lookup for origin superseded this one
        """
        if token is None:
            token = self.issue_token(origin)

        payload = await self._fetch(Query.for_point(latitude, longitude), origin)
        result = parse_reverse(payload)

        if not self.is_current(origin, token):
            log_structured("debug", "Dropped stale response", origin=origin, token=token)
            return STALE

        if self.on_location is not None:
            catch_and_log(self.on_location)(origin, result)
        return result

    async def _fetch(self, query: Query, origin: str) -> Any:
        try:
            return await self.client.request(query)
        except NetworkError as e:
            log_error(e, {
                "module": "pipeline",
                "origin": origin,
                "endpoint": query.endpoint,
                "status_code": e.status_code,
            }, level="warning")
        except MalformedResponse as e:
            log_error(e, {
                "module": "pipeline",
                "origin": origin,
                "endpoint": query.endpoint,
            }, level="warning")
        return None

    def _publish_candidates(self, candidates: List[CandidateResult]) -> None:
        if self.on_candidates is not None:
            catch_and_log(self.on_candidates)(candidates)
