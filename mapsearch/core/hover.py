"""Pointer probe: shows what lies under the cursor on a map."""
from typing import Any, Callable, Optional

from mapsearch.core.config import HOVER_SETTLE_MS, ORIGIN_HOVER
from mapsearch.core.location import resolve_location
from mapsearch.core.models import CandidateResult, HoverInfo, ResolvedLocation
from mapsearch.core.pipeline import STALE, QueryPipeline
from mapsearch.utils.error_handler import catch_and_log


class HoverProbe:
    """
    Turns pointer movement over one map into hover readouts.

    Movement restarts a short settle timer. Once the pointer rests, the
    coordinates are shown straight away and a reverse lookup is scheduled
    through the pipeline under this probe's origin; its answer adds the
    address and postcode. Leaving the map cancels both steps.
    """

    def __init__(
        self,
        pipeline: QueryPipeline,
        origin: str = ORIGIN_HOVER,
        on_hover: Optional[Callable[[Optional[HoverInfo]], Any]] = None,
        settle_ms: float = HOVER_SETTLE_MS,
    ):
        """
        Initialize probe.

        Args:
            pipeline: Pipeline that owns the debouncer and request tokens
            origin: Origin key, distinct per map
            on_hover: Receives each new readout, or None when it should be hidden
            settle_ms: Time the pointer must rest before anything is shown
        """
        self.pipeline = pipeline
        self.origin = origin
        self.on_hover = on_hover
        self.settle_ms = settle_ms
        self.info: Optional[HoverInfo] = None
        self._settle_key = f"{origin}:settle"

    def move(self, latitude: float, longitude: float) -> None:
        self.pipeline.debouncer.schedule(self._settle_key, self._settled, self.settle_ms, latitude, longitude)

    def leave(self) -> None:
        self.pipeline.debouncer.cancel(self._settle_key)
        self.pipeline.cancel(self.origin)
        self._publish(None)

    async def click(self, latitude: float, longitude: float) -> Optional[ResolvedLocation]:
        """Look up a clicked point at once, bypassing the hover delays."""
        self.pipeline.debouncer.cancel(self._settle_key)
        self.pipeline.debouncer.cancel(self.origin)
        result = await self.pipeline.run_reverse(latitude, longitude, self.origin)
        if not isinstance(result, CandidateResult):
            return None
        return resolve_location(result)

    def close(self) -> None:
        self.pipeline.debouncer.cancel(self._settle_key)
        self.pipeline.cancel(self.origin)

    def _settled(self, latitude: float, longitude: float) -> None:
        # A new readout makes any lookup still in flight for this map stale.
        token = self.pipeline.issue_token(self.origin)
        self._publish(HoverInfo(latitude=latitude, longitude=longitude))
        self.pipeline.debouncer.schedule(
            self.origin, self._lookup, self.pipeline.hover_delay_ms, latitude, longitude, token
        )

    async def _lookup(self, latitude: float, longitude: float, token: int) -> None:
        result = await self.pipeline.run_reverse(latitude, longitude, self.origin, token)
        if result is STALE or result is None:
            return
        self._publish(HoverInfo(
            latitude=latitude,
            longitude=longitude,
            address=result.short_name,
            postcode=result.postcode,
        ))

    def _publish(self, info: Optional[HoverInfo]) -> None:
        self.info = info
        if self.on_hover is not None:
            catch_and_log(self.on_hover)(info)
