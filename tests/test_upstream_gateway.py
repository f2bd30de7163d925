import pytest
import requests

from fakes import INVALID_JSON, FakeResponse, FakeSession
from ladder.core.exceptions import ConfigError, UpstreamError
from ladder.upstream.api import EndpointSpec, Throttle, UpstreamGateway

SPEC = EndpointSpec("https://example.test/", "/thing", params={"a": 1}, label="thing")


def _gateway(session, **kwargs):
    sleeps: list[float] = []
    gw = UpstreamGateway(
        "key-123",
        session=session,
        call_delay_seconds=0.0,
        sleep=sleeps.append,
        **kwargs,
    )
    return gw, sleeps


def test_sets_auth_header_and_url():
    session = FakeSession([FakeResponse(200, {"ok": True})])
    gw, _ = _gateway(session)
    assert gw.fetch_required(SPEC) == {"ok": True}
    assert session.headers["X-Riot-Token"] == "key-123"
    assert session.calls == [("https://example.test/thing", {"a": 1})]
    assert gw.call_count == 1


def test_missing_key_is_config_error():
    with pytest.raises(ConfigError):
        UpstreamGateway("", session=FakeSession())


@pytest.mark.parametrize(
    "response",
    [
        FakeResponse(404, {}),
        FakeResponse(403, {}),
        FakeResponse(200, INVALID_JSON),
        requests.ConnectionError("boom"),
    ],
)
def test_required_raises_and_optional_returns_none(response):
    gw, _ = _gateway(FakeSession([response, response]), max_retries=1)
    with pytest.raises(UpstreamError):
        gw.fetch_required(SPEC)
    assert gw.fetch_optional(SPEC) is None


def test_not_found_flag():
    gw, _ = _gateway(FakeSession([FakeResponse(404, {})]), max_retries=1)
    with pytest.raises(UpstreamError) as exc:
        gw.fetch_required(SPEC)
    assert exc.value.is_not_found
    assert exc.value.status == 404


def test_retries_rate_limit_using_retry_after():
    session = FakeSession(
        [
            FakeResponse(429, {}, headers={"Retry-After": "3"}),
            FakeResponse(503, {}),
            FakeResponse(200, [1, 2]),
        ]
    )
    gw, sleeps = _gateway(session, max_retries=3, backoff_factor=2.0)
    assert gw.fetch_required(SPEC) == [1, 2]
    # Retry-After first, then backoff ** attempt
    assert sleeps == [3.0, 2.0]
    assert gw.call_count == 3


def test_retries_exhausted_raise_with_status():
    session = FakeSession([FakeResponse(500, {}), FakeResponse(500, {})])
    gw, _ = _gateway(session, max_retries=2)
    with pytest.raises(UpstreamError) as exc:
        gw.fetch_required(SPEC)
    assert exc.value.status == 500


def test_throttle_spaces_consecutive_calls():
    now = [100.0]
    slept: list[float] = []

    def sleep(seconds):
        slept.append(seconds)
        now[0] += seconds

    throttle = Throttle(1.3, clock=lambda: now[0], sleep=sleep)
    throttle.wait()
    now[0] += 0.3
    throttle.wait()
    now[0] += 5.0
    throttle.wait()
    assert slept == [pytest.approx(1.0)]


def test_gateway_throttles_every_call():
    now = [0.0]
    slept: list[float] = []

    def sleep(seconds):
        slept.append(seconds)
        now[0] += seconds

    session = FakeSession([FakeResponse(200, {}), FakeResponse(404, {}), FakeResponse(200, {})])
    gw = UpstreamGateway(
        "k",
        session=session,
        call_delay_seconds=1.3,
        max_retries=1,
        clock=lambda: now[0],
        sleep=sleep,
    )
    gw.fetch_required(SPEC)
    gw.fetch_optional(SPEC)
    gw.fetch_required(SPEC)
    assert slept == [pytest.approx(1.3), pytest.approx(1.3)]
