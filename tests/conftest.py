"""Pytest configuration and fixtures."""
import time
import pytest
from mapsearch.core.client import RateLimitedClient, RateLimiter


class FakeResponse:
    """Stand-in for requests.Response."""

    def __init__(self, payload=None, status_code=200, body_is_json=True):
        self.payload = payload
        self.status_code = status_code
        self.body_is_json = body_is_json

    def json(self):
        if not self.body_is_json:
            raise ValueError("Expecting value: line 1 column 1 (char 0)")
        return self.payload


class FakeSession:
    """Records calls made by RateLimitedClient and replays scripted responses."""

    def __init__(self, responses=None, delay=0.0, error=None):
        self.responses = list(responses or [])
        self.delay = delay
        self.error = error
        self.calls = []
        self.closed = False

    def get(self, url, params=None, headers=None, timeout=None):
        self.calls.append({
            "url": url,
            "params": params,
            "headers": headers,
            "timeout": timeout,
            "started_at": time.monotonic(),
        })
        if self.delay:
            time.sleep(self.delay)
        if self.error is not None:
            raise self.error
        if self.responses:
            return self.responses.pop(0)
        return FakeResponse([])

    def close(self):
        self.closed = True


class FakeClient:
    """Async client double for pipeline tests.

    Payloads and errors are keyed by query text, or by (lat, lon) for reverse
    queries. A key with a gate blocks until the test sets the event.
    """

    def __init__(self):
        self.payloads = {}
        self.errors = {}
        self.gates = {}
        self.queries = []

    @staticmethod
    def key_for(query):
        if query.is_reverse:
            return (query.latitude, query.longitude)
        return query.text

    async def request(self, query):
        self.queries.append(query)
        key = self.key_for(query)
        gate = self.gates.get(key)
        if gate is not None:
            await gate.wait()
        if key in self.errors:
            raise self.errors[key]
        return self.payloads.get(key, [] if not query.is_reverse else None)


def make_result(name, lat, lon, country=None, country_code=None, postcode=None):
    """Build one Nominatim result object."""
    address = {}
    if country:
        address["country"] = country
    if country_code:
        address["country_code"] = country_code
    if postcode:
        address["postcode"] = postcode
    return {
        "display_name": name,
        "lat": str(lat),
        "lon": str(lon),
        "address": address,
    }


@pytest.fixture
def search_payload():
    """Sample Nominatim search response."""
    return [
        make_result("Westminster, London, Greater London, England, SW1A 1AA, United Kingdom",
                    51.5014, -0.1419, "United Kingdom", "gb", "SW1A 1AA"),
        make_result("London, Ontario, Canada", 42.9849, -81.2453, "Canada", "ca", "N6A 3N7"),
        make_result("London, Kentucky, United States", 37.1290, -84.0833, "United States", "us"),
    ]


@pytest.fixture
def reverse_payload():
    """Sample Nominatim reverse response."""
    return make_result("Juba, Central Equatoria, South Sudan", 4.85, 31.6, "South Sudan", "ss")


@pytest.fixture
def fake_session():
    return FakeSession()


@pytest.fixture
def fast_limiter():
    """Rate limiter that never makes tests wait."""
    return RateLimiter(min_interval_ms=0)


@pytest.fixture
def client(fake_session, fast_limiter):
    return RateLimitedClient(rate_limiter=fast_limiter, session=fake_session)


@pytest.fixture
def fake_client():
    return FakeClient()


@pytest.fixture
def result_factory():
    return make_result
