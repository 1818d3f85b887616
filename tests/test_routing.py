import pytest
import requests

from apps.common.geo import Coordinates
from apps.orders import routing

ORIGIN = Coordinates(lat=14.5995, lng=120.9842)
DEST = Coordinates(lat=14.6095, lng=120.9942)


class FakeResponse:
    def __init__(self, payload, status=200):
        self._payload = payload
        self.status_code = status
        self.ok = status < 400

    def json(self):
        if isinstance(self._payload, Exception):
            raise self._payload
        return self._payload


@pytest.fixture
def real_route(monkeypatch, settings):
    # undo the autouse stub so the provider client itself runs
    monkeypatch.undo()
    settings.MAPBOX_ACCESS_TOKEN = "pk.test"
    calls = []

    def _install(response):
        def fake_get(url, params=None, timeout=None):
            calls.append((url, params, timeout))
            if isinstance(response, Exception):
                raise response
            return response

        monkeypatch.setattr(routing.requests, "get", fake_get)
        return calls

    return _install


def test_distance_from_first_route(real_route):
    calls = real_route(FakeResponse({"code": "Ok", "routes": [{"distance": 1234.5}]}))
    assert routing.route_distance(ORIGIN, DEST) == 1234.5
    url, params, _ = calls[0]
    assert url.endswith("/driving/120.9842,14.5995;120.9942,14.6095")
    assert params["access_token"] == "pk.test"


def test_result_is_cached(real_route):
    calls = real_route(FakeResponse({"code": "Ok", "routes": [{"distance": 800}]}))
    routing.route_distance(ORIGIN, DEST)
    routing.route_distance(ORIGIN, DEST)
    assert len(calls) == 1


@pytest.mark.parametrize(
    "response",
    [
        FakeResponse({"code": "NoRoute", "routes": []}),
        FakeResponse({}, status=500),
        FakeResponse(ValueError("bad json")),
        FakeResponse({"code": "Ok", "routes": [{}]}),
        requests.Timeout("slow"),
    ],
)
def test_failures_return_none(real_route, response):
    real_route(response)
    assert routing.route_distance(ORIGIN, DEST) is None


def test_missing_token_returns_none(real_route, settings):
    calls = real_route(FakeResponse({"code": "Ok", "routes": [{"distance": 1}]}))
    settings.MAPBOX_ACCESS_TOKEN = ""
    assert routing.route_distance(ORIGIN, DEST) is None
    assert calls == []
