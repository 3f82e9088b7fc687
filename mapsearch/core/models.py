"""Data models for geocoding queries and results."""
from dataclasses import dataclass, field
from typing import Optional, Tuple, Dict, Any

from mapsearch.core.errors import MalformedResponse


@dataclass(frozen=True)
class Query:
    """A single geocoding request: free text or a coordinate pair."""
    text: Optional[str] = None
    latitude: Optional[float] = None
    longitude: Optional[float] = None

    def __post_init__(self):
        has_text = self.text is not None
        has_coords = self.latitude is not None and self.longitude is not None
        if has_text == has_coords:
            raise ValueError("Query needs either text or a latitude/longitude pair")

    @classmethod
    def for_text(cls, text: str) -> "Query":
        return cls(text=text)

    @classmethod
    def for_point(cls, latitude: float, longitude: float) -> "Query":
        return cls(latitude=float(latitude), longitude=float(longitude))

    @property
    def is_reverse(self) -> bool:
        return self.text is None

    @property
    def endpoint(self) -> str:
        return "reverse" if self.is_reverse else "search"

    def to_params(self, limit: int = 5, language: str = "en") -> Dict[str, str]:
        """Query-string parameters for the Nominatim endpoint."""
        if self.is_reverse:
            return {
                "format": "json",
                "lat": str(self.latitude),
                "lon": str(self.longitude),
                "addressdetails": "1",
                "accept_language": language,
            }
        return {
            "format": "json",
            "q": self.text,
            "addressdetails": "1",
            "limit": str(limit),
            "accept_language": language,
        }


@dataclass(frozen=True)
class CandidateResult:
    """An unconfirmed match returned by the geocoding service."""
    display_name: str
    latitude: float
    longitude: float
    country_name: Optional[str] = None
    country_code: Optional[str] = None
    postcode: Optional[str] = None

    @classmethod
    def from_payload(cls, item: Any) -> "CandidateResult":
        """
        Build a candidate from one Nominatim result object.

        Args:
            item: Decoded JSON object with display_name, lat, lon and address

        Returns:
            CandidateResult

        Raises:
            MalformedResponse: if the object lacks a name or usable coordinates
        """
        if not isinstance(item, dict):
            raise MalformedResponse(f"Expected result object, got {type(item).__name__}")

        display_name = item.get("display_name")
        if not isinstance(display_name, str) or not display_name:
            raise MalformedResponse("Result has no display_name")

        try:
            latitude = float(item["lat"])
            longitude = float(item["lon"])
        except (KeyError, TypeError, ValueError) as e:
            raise MalformedResponse(f"Result has unusable coordinates: {e}") from e

        address = item.get("address")
        if not isinstance(address, dict):
            address = {}

        return cls(
            display_name=display_name,
            latitude=latitude,
            longitude=longitude,
            country_name=address.get("country") or None,
            country_code=address.get("country_code") or None,
            postcode=address.get("postcode") or None,
        )

    @property
    def short_name(self) -> str:
        """First comma-separated segment of the display name."""
        return self.display_name.split(",")[0].strip()


@dataclass(frozen=True)
class ResolvedLocation:
    """A committed candidate plus locally derived display fields."""
    name: str
    country: str
    postcode: str
    coordinates: Tuple[float, float]  # (lon, lat)
    timezone_label: str
    currency_code: str
    country_code: str

    @property
    def longitude(self) -> float:
        return self.coordinates[0]

    @property
    def latitude(self) -> float:
        return self.coordinates[1]

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for serialization."""
        return {
            "name": self.name,
            "country": self.country,
            "postcode": self.postcode,
            "coordinates": list(self.coordinates),
            "timezone": self.timezone_label,
            "currency": self.currency_code,
            "country_code": self.country_code,
        }


@dataclass(frozen=True)
class HoverInfo:
    """Readout shown while the pointer rests over the map."""
    latitude: float
    longitude: float
    address: Optional[str] = None
    postcode: Optional[str] = None


@dataclass(frozen=True)
class SelectionState:
    """Candidate list with the keyboard highlight (-1 means none)."""
    candidates: Tuple[CandidateResult, ...] = field(default_factory=tuple)
    highlighted_index: int = -1

    @property
    def highlighted(self) -> Optional[CandidateResult]:
        if 0 <= self.highlighted_index < len(self.candidates):
            return self.candidates[self.highlighted_index]
        return None
