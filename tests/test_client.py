"""Tests for the rate limiter and HTTP client."""
import asyncio

import pytest
import requests
from conftest import FakeResponse, FakeSession
from mapsearch.core.client import RateLimitedClient, RateLimiter
from mapsearch.core.errors import MalformedResponse, NetworkError
from mapsearch.core.models import Query


def test_rate_limiter_spaces_request_starts():
    """Test two back-to-back acquisitions are at least the floor apart."""
    limiter = RateLimiter(min_interval_ms=1000)

    async def scenario():
        return await asyncio.gather(limiter.acquire(), limiter.acquire())

    first, second = asyncio.run(scenario())
    assert second - first >= 1.0


def test_rate_limiter_survives_new_event_loops():
    """Test one limiter serves contended callers across separate asyncio.run calls."""
    limiter = RateLimiter(min_interval_ms=50)

    async def scenario():
        return await asyncio.gather(limiter.acquire(), limiter.acquire())

    first_run = asyncio.run(scenario())
    second_run = asyncio.run(scenario())
    assert first_run[1] - first_run[0] >= 0.05
    assert second_run[0] - first_run[1] >= 0.05
    assert second_run[1] - second_run[0] >= 0.05


def test_rate_limiter_first_call_does_not_wait():
    """Test an idle limiter admits immediately."""
    ticks = iter([100.0, 100.0])
    limiter = RateLimiter(min_interval_ms=1000, clock=lambda: next(ticks))

    stamp = asyncio.run(limiter.acquire())
    assert stamp == 100.0
    assert limiter.last_request_time == 100.0


def test_rate_limiter_no_wait_after_interval():
    """Test no delay once the interval has already elapsed."""
    now = [10.0]
    limiter = RateLimiter(min_interval_ms=1000, clock=lambda: now[0])

    async def scenario():
        await limiter.acquire()
        now[0] = 11.5
        return await asyncio.wait_for(limiter.acquire(), timeout=0.1)

    assert asyncio.run(scenario()) == 11.5


def test_client_calls_are_spaced_across_callers():
    """Test concurrent requests through one client start a full interval apart."""
    session = FakeSession()
    client = RateLimitedClient(rate_limiter=RateLimiter(1000), session=session)

    async def scenario():
        await asyncio.gather(client.search("paris"), client.reverse(48.85, 2.35))

    asyncio.run(scenario())
    assert len(session.calls) == 2
    gap = session.calls[1]["started_at"] - session.calls[0]["started_at"]
    assert gap >= 0.95


def test_shared_limiter_spans_clients():
    """Test two clients sharing one limiter are spaced together."""
    limiter = RateLimiter(300)
    session_a, session_b = FakeSession(), FakeSession()
    client_a = RateLimitedClient(rate_limiter=limiter, session=session_a)
    client_b = RateLimitedClient(rate_limiter=limiter, session=session_b)

    async def scenario():
        await asyncio.gather(client_a.search("a"), client_b.search("b"))

    asyncio.run(scenario())
    starts = sorted([session_a.calls[0]["started_at"], session_b.calls[0]["started_at"]])
    assert starts[1] - starts[0] >= 0.25


def test_search_request_shape(client, fake_session, search_payload):
    """Test URL, parameters and headers of a search."""
    fake_session.responses.append(FakeResponse(search_payload))

    payload = asyncio.run(client.search("London"))

    assert payload == search_payload
    call = fake_session.calls[0]
    assert call["url"] == "https://nominatim.openstreetmap.org/search"
    assert call["params"]["q"] == "London"
    assert call["params"]["limit"] == "5"
    assert call["params"]["addressdetails"] == "1"
    assert call["headers"]["User-Agent"] == "PostcodeSearchApp/1.0"
    assert call["headers"]["Accept-Language"] == "en"
    assert call["timeout"] == 5.0


def test_reverse_request_shape(client, fake_session, reverse_payload):
    """Test URL and parameters of a reverse lookup."""
    fake_session.responses.append(FakeResponse(reverse_payload))

    payload = asyncio.run(client.reverse(4.85, 31.6))

    assert payload["display_name"].startswith("Juba")
    call = fake_session.calls[0]
    assert call["url"] == "https://nominatim.openstreetmap.org/reverse"
    assert call["params"]["lat"] == "4.85"
    assert call["params"]["lon"] == "31.6"


def test_non_2xx_raises_network_error(client, fake_session):
    """Test HTTP errors carry the status code."""
    fake_session.responses.append(FakeResponse({"error": "busy"}, status_code=503))

    with pytest.raises(NetworkError) as excinfo:
        asyncio.run(client.request(Query.for_text("x")))
    assert excinfo.value.status_code == 503


def test_transport_failure_raises_network_error(fast_limiter):
    """Test transport errors carry their cause."""
    cause = requests.ConnectionError("connection refused")
    client = RateLimitedClient(rate_limiter=fast_limiter, session=FakeSession(error=cause))

    with pytest.raises(NetworkError) as excinfo:
        asyncio.run(client.search("x"))
    assert excinfo.value.cause is cause
    assert excinfo.value.status_code is None


def test_timeout_raises_network_error(fast_limiter):
    """Test the per-request timeout."""
    client = RateLimitedClient(rate_limiter=fast_limiter, session=FakeSession(delay=0.5), timeout_ms=100)

    with pytest.raises(NetworkError) as excinfo:
        asyncio.run(client.search("slow"))
    assert isinstance(excinfo.value.cause, asyncio.TimeoutError)


def test_non_json_body_raises_malformed(client, fake_session):
    """Test undecodable bodies."""
    fake_session.responses.append(FakeResponse(body_is_json=False))

    with pytest.raises(MalformedResponse):
        asyncio.run(client.search("x"))


def test_custom_base_url_and_close(fast_limiter):
    """Test base URL handling and session close."""
    session = FakeSession()
    client = RateLimitedClient(rate_limiter=fast_limiter, session=session, base_url="http://localhost:8080/")

    asyncio.run(client.search("x"))
    client.close()

    assert session.calls[0]["url"] == "http://localhost:8080/search"
    assert session.closed
