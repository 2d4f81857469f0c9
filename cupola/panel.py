# ABOUTME: Data panel view model: pure reducers for panel state and the four formatted data tabs.
# ABOUTME: Turns a RegionSnapshot plus risk levels into labelled, colour-tagged rows.

from pydantic import BaseModel, ConfigDict

from cupola.models import GeoCoordinate, PanelState, RegionSnapshot
from cupola.risk import fire_risk, flood_risk, is_missing, surge_alert

NEUTRAL_COLOR = "#e4e4e7"
SURGE_ALERT_COLOR = "#ef4444"
SURGE_NORMAL_COLOR = "#14b8a6"

NOT_AVAILABLE = "N/A"
POLAR_ONLY = "N/A (polar regions only)"
COASTAL_ONLY = "N/A (coastal regions only)"


class Row(BaseModel):
    model_config = ConfigDict(frozen=True)

    label: str
    text: str
    color: str = NEUTRAL_COLOR


class Tab(BaseModel):
    model_config = ConfigDict(frozen=True)

    key: str
    title: str
    rows: tuple[Row, ...]


# Reducers


def open_region(state: PanelState, coord: GeoCoordinate) -> PanelState:
    """A click selected a new region: show the panel in its loading state."""
    return PanelState(region=coord, loading=True)


def region_loaded(state: PanelState, coord: GeoCoordinate, snapshot: RegionSnapshot) -> PanelState:
    if state.region != coord:
        return state
    return PanelState(region=coord, snapshot=snapshot)


def region_failed(state: PanelState, coord: GeoCoordinate, message: str) -> PanelState:
    if state.region != coord:
        return state
    return PanelState(region=coord, error=message)


def close_panel(state: PanelState) -> PanelState:
    return PanelState()


# Formatting


def _num(value: float | None, suffix: str = "", missing: str = NOT_AVAILABLE, fmt: str = "g") -> str:
    if is_missing(value):
        return missing
    return f"{value:{fmt}}{suffix}"


def coordinate_label(coord: GeoCoordinate) -> str:
    return f"Lat: {coord.latitude:.2f}° Lon: {coord.longitude:.2f}°"


def error_banner(message: str) -> str:
    return f"Error: {message}. Check coordinates or API status."


def build_tabs(snapshot: RegionSnapshot) -> list[Tab]:
    """Build the fire, climate, ice and ocean tabs, in that order."""
    fire = fire_risk(snapshot.fire_index)
    fire_text = fire.value if is_missing(snapshot.fire_index) else f"{fire.value} ({snapshot.fire_index:.0f})"
    flood = flood_risk(snapshot.heavy_rain_warning, snapshot.soil_moisture)

    moisture = None if is_missing(snapshot.soil_moisture) else snapshot.soil_moisture * 100
    surge_m = None if is_missing(snapshot.surge_amplitude) else snapshot.surge_amplitude / 100

    return [
        Tab(
            key="fires",
            title="Fire Activity",
            rows=(
                Row(label="Risk Level (Fosberg Index)", text=fire_text, color=fire.color),
                Row(label="Soil Moisture (contrib.)", text=_num(moisture, "%", fmt=".0f")),
            ),
        ),
        Tab(
            key="climate",
            title="Climate Data",
            rows=(
                Row(label="Temperature", text=_num(snapshot.temperature, " °C")),
                Row(label="Humidity", text=_num(snapshot.humidity, " %")),
                Row(label="Precipitation (24h)", text=_num(snapshot.precipitation, " mm", fmt=".1f")),
                Row(label="Wind speed", text=_num(snapshot.wind_speed, " m/s")),
                Row(label="Flood Risk Level", text=flood.value, color=flood.color),
            ),
        ),
        Tab(
            key="ice",
            title="Ice Coverage",
            rows=(
                Row(label="Coverage", text=_num(snapshot.ice_concentration, "%", POLAR_ONLY)),
                Row(label="Average Thickness", text=_num(snapshot.ice_thickness, " m", POLAR_ONLY, ".1f")),
            ),
        ),
        Tab(
            key="ocean",
            title="Ocean Conditions",
            rows=(
                Row(label="Surface Temperature", text=_num(snapshot.sea_surface_temp, " °C", COASTAL_ONLY)),
                Row(label="Salinity", text=_num(snapshot.salinity, " PSU", COASTAL_ONLY)),
                Row(
                    label="Sea Level Surge (risk)",
                    text=_num(surge_m, " m", COASTAL_ONLY, ".2f"),
                    color=SURGE_ALERT_COLOR if surge_alert(snapshot.surge_amplitude) else SURGE_NORMAL_COLOR,
                ),
            ),
        ),
    ]
