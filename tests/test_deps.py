# ABOUTME: Tests for environment-driven configuration and the dependency container.
# ABOUTME: Validates credential lookup, the client base URL and the shared httpx client.

import httpx
import pytest

from cupola.deps import DEFAULT_API_URL, WeatherDeps, api_base_url, create_http_client, load_credentials


class TestLoadCredentials:
    def test_reads_both_values(self, credentials_env):
        """load_credentials returns the username and password from the environment.

        Implementation: Sets both variables via the credentials_env fixture.
        Passing implies: Upstream auth uses the deployment's account.
        """
        creds = load_credentials()
        assert creds.username == "alice"
        assert creds.password == "s3cret"

    @pytest.mark.parametrize("missing", ["METEOMATICS_USERNAME", "METEOMATICS_PASSWORD"])
    def test_missing_value_returns_none(self, credentials_env, monkeypatch, missing):
        """load_credentials returns None when either variable is unset.

        Implementation: Removes one variable at a time.
        Passing implies: Partial configuration is treated as no configuration.
        """
        monkeypatch.delenv(missing)
        assert load_credentials() is None

    def test_empty_value_returns_none(self, credentials_env, monkeypatch):
        """An empty password counts as missing.

        Implementation: Sets the password to an empty string.
        Passing implies: Blank .env entries do not produce a broken auth header.
        """
        monkeypatch.setenv("METEOMATICS_PASSWORD", "")
        assert load_credentials() is None


class TestApiBaseUrl:
    def test_default(self, monkeypatch):
        """Without CUPOLA_API_URL the local development server is used.

        Implementation: Clears the variable.
        Passing implies: The region client works out of the box against a local app.
        """
        monkeypatch.delenv("CUPOLA_API_URL", raising=False)
        assert api_base_url() == DEFAULT_API_URL

    def test_strips_trailing_slash(self, monkeypatch):
        """A configured URL loses its trailing slash.

        Implementation: Sets CUPOLA_API_URL with a trailing slash.
        Passing implies: Joined endpoint paths never contain a double slash.
        """
        monkeypatch.setenv("CUPOLA_API_URL", "https://cupola.example.org/")
        assert api_base_url() == "https://cupola.example.org"


class TestWeatherDeps:
    @pytest.mark.asyncio
    async def test_holds_real_client(self):
        """WeatherDeps accepts the client built by create_http_client.

        Implementation: Builds deps from a fresh client and closes it.
        Passing implies: The container validates httpx clients as arbitrary types.
        """
        client = create_http_client()
        deps = WeatherDeps(http_client=client)
        assert isinstance(deps.http_client, httpx.AsyncClient)
        await client.aclose()
