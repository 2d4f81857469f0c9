# ABOUTME: Endpoint tests for GET /api/weather on the Starlette app.
# ABOUTME: Drives the app through TestClient with a mocked upstream httpx client.

from unittest.mock import AsyncMock, patch

import httpx
import pytest
from starlette.testclient import TestClient

from cupola.deps import WeatherDeps
from cupola.web import create_app

GENERAL_DOC = {
    "version": "3.0",
    "data": [{"parameter": "t_2m:C", "coordinates": [{"dates": [{"value": 15.5}]}]}],
}


def _response(status_code: int = 200, json_data=None, text: str | None = None) -> httpx.Response:
    request = httpx.Request("GET", "https://test")
    if text is not None:
        return httpx.Response(status_code=status_code, text=text, request=request)
    return httpx.Response(status_code=status_code, json=json_data, request=request)


def _mock_client(*responses) -> httpx.AsyncClient:
    """Mock httpx.AsyncClient whose get() returns (or raises) the given items in order."""
    mock = AsyncMock(spec=httpx.AsyncClient)
    mock.get.side_effect = list(responses)
    return mock


def _client_for(*responses) -> tuple[TestClient, object]:
    upstream = _mock_client(*responses)
    return TestClient(create_app(WeatherDeps(http_client=upstream))), upstream


class TestWeatherEndpoint:
    def test_merges_upstream_responses(self, credentials_env):
        """A successful request returns the merged document with status 200.

        Implementation: General mock returns one entry, ocean mock returns an empty list.
        Passing implies: The route wires query params, credentials and merge together.
        """
        client, _ = _client_for(_response(json_data=GENERAL_DOC), _response(json_data={"data": []}))
        resp = client.get("/api/weather", params={"lat": "10", "lon": "20"})

        assert resp.status_code == 200
        body = resp.json()
        assert body["version"] == "3.0"
        assert body["data"] == GENERAL_DOC["data"]

    def test_missing_lat_returns_400(self, credentials_env):
        """A request without lat is rejected with the fixed error body.

        Implementation: Calls the route with only lon.
        Passing implies: Clients get a 400 and a readable message.
        """
        client, upstream = _client_for()
        resp = client.get("/api/weather", params={"lon": "20"})

        assert resp.status_code == 400
        assert resp.json() == {"error": "Missing lat or lon parameters"}
        upstream.get.assert_not_called()

    def test_missing_credentials_returns_500(self, no_credentials_env):
        """Without credentials in the environment the route answers 500.

        Implementation: Clears both credential variables before the request.
        Passing implies: Credentials are read at request time and their absence is reported.
        """
        client, upstream = _client_for()
        resp = client.get("/api/weather", params={"lat": "10", "lon": "20"})

        assert resp.status_code == 500
        assert resp.json() == {"error": "Meteomatics credentials missing in .env"}
        upstream.get.assert_not_called()

    def test_general_upstream_error_is_propagated(self, credentials_env):
        """A 503 from the general upstream call is returned with its status and text.

        Implementation: General mock returns 503 with a plain-text body.
        Passing implies: Hard upstream failures reach the client unchanged.
        """
        client, upstream = _client_for(_response(503, text="Service Unavailable"))
        resp = client.get("/api/weather", params={"lat": "10", "lon": "20"})

        assert resp.status_code == 503
        assert resp.json() == {"error": "Service Unavailable"}
        assert upstream.get.call_count == 1

    def test_ocean_upstream_error_still_succeeds(self, credentials_env):
        """A 503 from the ocean call leaves a 200 with general-only data.

        Implementation: General mock succeeds, ocean mock returns 503.
        Passing implies: The ocean soft failure is invisible to the client.
        """
        client, _ = _client_for(_response(json_data=GENERAL_DOC), _response(503, text="down"))
        resp = client.get("/api/weather", params={"lat": "10", "lon": "20"})

        assert resp.status_code == 200
        assert resp.json()["data"] == GENERAL_DOC["data"]

    def test_unexpected_exception_returns_500_with_message(self, credentials_env):
        """An unexpected exception inside the pipeline becomes a 500 with its message.

        Implementation: Patches aggregate_weather to raise RuntimeError.
        Passing implies: The route never leaks a stack trace as an unhandled error.
        """
        client, _ = _client_for()
        with patch("cupola.web.aggregate_weather", side_effect=RuntimeError("boom")):
            resp = client.get("/api/weather", params={"lat": "10", "lon": "20"})

        assert resp.status_code == 500
        assert resp.json() == {"error": "boom"}

    @pytest.mark.parametrize("method", ["post", "put"])
    def test_only_get_is_allowed(self, method, credentials_env):
        """Non-GET methods are refused by the router.

        Implementation: Sends POST and PUT requests.
        Passing implies: The endpoint is read-only.
        """
        client, _ = _client_for()
        resp = getattr(client, method)("/api/weather?lat=10&lon=20")
        assert resp.status_code == 405
