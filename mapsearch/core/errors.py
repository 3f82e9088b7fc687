"""Exception types raised inside the query pipeline."""
from typing import Optional


class MapSearchError(Exception):
    """Base class for map search failures."""


class NetworkError(MapSearchError):
    """Transport failure, timeout or non-2xx response from the geocoding service."""

    def __init__(self, message: str, status_code: Optional[int] = None, cause: Optional[BaseException] = None):
        super().__init__(message)
        self.status_code = status_code
        self.cause = cause


class MalformedResponse(MapSearchError):
    """Payload is not the JSON shape the endpoint promises."""


class FormattingError(MapSearchError):
    """A derived display field could not be computed."""
