# ABOUTME: Client side of the weather endpoint: fetches the merged document and flattens it.
# ABOUTME: Extracts the twelve known parameters into a RegionSnapshot, nulling invalid soil moisture.

import logging
import math

import httpx

from cupola.models import GeoCoordinate, ParameterSample, RegionSnapshot

logger = logging.getLogger(__name__)

SNAPSHOT_PARAMETERS = {
    "temperature": "t_2m:C",
    "humidity": "relative_humidity_2m:p",
    "precipitation": "precip_24h:mm",
    "wind_speed": "wind_speed_10m:ms",
    "fire_index": "fosberg_fire_weather_index:idx",
    "heavy_rain_warning": "heavy_rain_warning_24h:idx",
    "soil_moisture": "soil_moisture_index_-5cm:idx",
    "ice_concentration": "sea_ice_concentration:p",
    "ice_thickness": "sea_ice_thickness:m",
    "sea_surface_temp": "t_sea_sfc:C",
    "salinity": "salinity_0m:psu",
    "surge_amplitude": "surge_amplitude:cm",
}


class RegionFetchError(Exception):
    """Raised when region data cannot be fetched. The message is shown to the user as-is."""


def find_sample(document: dict, parameter: str) -> ParameterSample:
    """Find the first entry for ``parameter`` and take its first coordinate's first date value.

    A missing entry, a broken path or a non-numeric or non-finite value yields value=None.
    """
    entries = document.get("data") if isinstance(document, dict) else None
    if not isinstance(entries, list):
        return ParameterSample(parameter=parameter)

    entry = next((e for e in entries if isinstance(e, dict) and e.get("parameter") == parameter), None)
    if entry is None:
        return ParameterSample(parameter=parameter)

    try:
        value = entry["coordinates"][0]["dates"][0]["value"]
    except (KeyError, IndexError, TypeError):
        return ParameterSample(parameter=parameter)

    if isinstance(value, bool) or not isinstance(value, (int, float)) or not math.isfinite(value):
        return ParameterSample(parameter=parameter)
    return ParameterSample(parameter=parameter, value=value)


def parse_region_snapshot(document: dict) -> RegionSnapshot:
    """Flatten the merged aggregator document into a RegionSnapshot."""
    values = {field: find_sample(document, name).value for field, name in SNAPSHOT_PARAMETERS.items()}

    # Upstream reports sentinels like -999 for soil moisture over water
    moisture = values["soil_moisture"]
    if moisture is not None and not 0 <= moisture <= 1:
        values["soil_moisture"] = None

    return RegionSnapshot(**values)


async def fetch_region(client: httpx.AsyncClient, base_url: str, coord: GeoCoordinate) -> RegionSnapshot:
    """Fetch and parse region data for ``coord`` from the weather endpoint at ``base_url``."""
    logger.debug("Fetching %s/api/weather for lat=%s lon=%s", base_url, coord.latitude, coord.longitude)
    try:
        resp = await client.get(
            f"{base_url}/api/weather",
            params={"lat": f"{coord.latitude:.6f}", "lon": f"{coord.longitude:.6f}"},
        )
    except httpx.HTTPError as e:
        raise RegionFetchError(str(e) or type(e).__name__) from e

    if not resp.is_success:
        raise RegionFetchError(f"API error: {resp.status_code} - {resp.text}")

    try:
        document = resp.json()
    except ValueError as e:
        raise RegionFetchError(f"Invalid response body: {e}") from e

    return parse_region_snapshot(document)
