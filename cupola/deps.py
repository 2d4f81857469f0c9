# ABOUTME: Dependency container and configuration lookups using Pydantic BaseModel.
# ABOUTME: Holds the httpx.AsyncClient and reads Meteomatics credentials from the environment.

import os

import httpx
from pydantic import BaseModel, ConfigDict

DEFAULT_API_URL = "http://localhost:8000"


class WeatherDeps(BaseModel):
    """Dependencies shared by the web routes and the region client."""

    model_config = ConfigDict(arbitrary_types_allowed=True)

    http_client: httpx.AsyncClient


class MeteomaticsCredentials(BaseModel):
    """Basic-auth account for the upstream Meteomatics API."""

    username: str
    password: str


def load_credentials() -> MeteomaticsCredentials | None:
    """Read upstream credentials from the process environment, None if either is unset."""
    username = os.environ.get("METEOMATICS_USERNAME")
    password = os.environ.get("METEOMATICS_PASSWORD")
    if not username or not password:
        return None
    return MeteomaticsCredentials(username=username, password=password)


def api_base_url() -> str:
    """Base URL of the weather endpoint used by the region client."""
    return os.environ.get("CUPOLA_API_URL", DEFAULT_API_URL).rstrip("/")


def create_http_client() -> httpx.AsyncClient:
    """Create the shared httpx client.

    Upstream calls are single-shot: no retry transport and the default httpx timeout.
    """
    return httpx.AsyncClient()
