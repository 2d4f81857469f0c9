# ABOUTME: Service layer for the Meteomatics API: builds requests and merges the two upstream responses.
# ABOUTME: Returns a tagged AggregateOk / AggregateErr result instead of raising for expected failures.

import base64
import logging
from datetime import datetime, timezone
from enum import Enum

import httpx
from pydantic import BaseModel

from cupola.deps import MeteomaticsCredentials

logger = logging.getLogger(__name__)

METEOMATICS_URL = "https://api.meteomatics.com"

GENERAL_PARAMS = (
    "t_2m:C",
    "relative_humidity_2m:p",
    "precip_24h:mm",
    "wind_speed_10m:ms",
    "fosberg_fire_weather_index:idx",
    "heavy_rain_warning_24h:idx",
    "soil_moisture_index_-5cm:idx",
)

OCEAN_PARAMS = (
    "t_sea_sfc:C",
    "salinity_0m:psu",
    "sea_ice_concentration:p",
    "sea_ice_thickness:m",
    "surge_amplitude:cm",
)

OCEAN_MODEL = "ecmwf-cmems"

MISSING_PARAMS_MESSAGE = "Missing lat or lon parameters"
MISSING_CREDENTIALS_MESSAGE = "Meteomatics credentials missing in .env"


class ErrorKind(str, Enum):
    MISSING_PARAMETER = "missing_parameter"
    CONFIGURATION = "configuration"
    UPSTREAM = "upstream"
    INTERNAL = "internal"


class AggregateOk(BaseModel):
    """Merged upstream document. ocean_degraded is set when the ocean call soft-failed."""

    document: dict
    ocean_degraded: bool = False


class AggregateErr(BaseModel):
    """Terminal failure for one aggregator request, mapped 1:1 onto an HTTP error response."""

    kind: ErrorKind
    status_code: int
    detail: str


AggregateResult = AggregateOk | AggregateErr


def format_timestamp(now: datetime | None = None) -> str:
    """ISO-8601 UTC timestamp with seconds precision and a trailing Z."""
    now = now or datetime.now(timezone.utc)
    return now.astimezone(timezone.utc).strftime("%Y-%m-%dT%H:%M:%SZ")


def basic_auth_header(credentials: MeteomaticsCredentials) -> str:
    token = base64.b64encode(f"{credentials.username}:{credentials.password}".encode()).decode()
    return f"Basic {token}"


def build_url(timestamp: str, params: tuple[str, ...], lat: str, lon: str) -> str:
    return f"{METEOMATICS_URL}/{timestamp}/{','.join(params)}/{lat},{lon}/json"


async def fetch_ocean_data(client: httpx.AsyncClient, url: str, headers: dict) -> list | None:
    """Fetch the ocean parameter set. Any failure is soft: logs a warning and returns None."""
    try:
        resp = await client.get(url, headers=headers, params={"model": OCEAN_MODEL})
    except httpx.HTTPError as e:
        logger.warning("Meteomatics ocean API unreachable: %s", e)
        return None

    if not resp.is_success:
        logger.warning("Meteomatics ocean API warning: %s %s", resp.status_code, resp.text)
        return None

    try:
        data = resp.json().get("data")
    except (ValueError, AttributeError) as e:
        logger.warning("Meteomatics ocean API returned an unreadable body: %s", e)
        return None
    if not isinstance(data, list):
        logger.warning("Meteomatics ocean API returned no data array")
        return None
    return data


async def aggregate_weather(
    client: httpx.AsyncClient,
    lat: str | None,
    lon: str | None,
    credentials: MeteomaticsCredentials | None,
    now: datetime | None = None,
) -> AggregateResult:
    """Query general and ocean parameters for (lat, lon) and merge the two data arrays.

    The calls run sequentially with a shared timestamp. A failed general call ends the
    request; a failed ocean call degrades to an empty ocean list.
    """
    if not lat or not lon:
        return AggregateErr(kind=ErrorKind.MISSING_PARAMETER, status_code=400, detail=MISSING_PARAMS_MESSAGE)
    if credentials is None:
        return AggregateErr(kind=ErrorKind.CONFIGURATION, status_code=500, detail=MISSING_CREDENTIALS_MESSAGE)

    logger.debug("Weather request for lat=%s lon=%s", lat, lon)
    timestamp = format_timestamp(now)
    headers = {"Authorization": basic_auth_header(credentials)}

    try:
        general_resp = await client.get(build_url(timestamp, GENERAL_PARAMS, lat, lon), headers=headers)
    except httpx.HTTPError as e:
        logger.exception("Meteomatics general API request failed")
        return AggregateErr(kind=ErrorKind.INTERNAL, status_code=500, detail=str(e) or type(e).__name__)

    if not general_resp.is_success:
        logger.error("Meteomatics general API error: %s %s", general_resp.status_code, general_resp.text)
        return AggregateErr(kind=ErrorKind.UPSTREAM, status_code=general_resp.status_code, detail=general_resp.text)

    try:
        general = general_resp.json()
    except ValueError as e:
        logger.exception("Meteomatics general API returned invalid JSON")
        return AggregateErr(kind=ErrorKind.INTERNAL, status_code=500, detail=str(e))
    if not isinstance(general, dict) or not isinstance(general.get("data"), list):
        return AggregateErr(
            kind=ErrorKind.INTERNAL, status_code=500, detail="Meteomatics general response has no data array"
        )

    ocean_data = await fetch_ocean_data(client, build_url(timestamp, OCEAN_PARAMS, lat, lon), headers)

    merged = {**general, "data": [*general["data"], *(ocean_data or [])]}
    logger.debug("Weather response: %s", merged)
    return AggregateOk(document=merged, ocean_degraded=ocean_data is None)
