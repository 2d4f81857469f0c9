# ABOUTME: Pydantic BaseModels for coordinates, upstream samples, region snapshots and panel state.
# ABOUTME: Defines the immutable value types passed between the scene, parser and panel layers.

from enum import Enum

from pydantic import BaseModel, ConfigDict, Field, field_validator


class GeoCoordinate(BaseModel):
    """Geographic point selected on the globe."""

    model_config = ConfigDict(frozen=True)

    latitude: float = Field(ge=-90, le=90)
    longitude: float = Field(ge=-180, le=180)


class ParameterSample(BaseModel):
    """One upstream parameter value, None when the upstream omitted it."""

    model_config = ConfigDict(frozen=True)

    parameter: str
    value: float | None = None


class RegionSnapshot(BaseModel):
    """Flattened weather, ocean and ice metrics for one coordinate."""

    model_config = ConfigDict(frozen=True)

    temperature: float | None = None
    humidity: float | None = None
    precipitation: float | None = None
    wind_speed: float | None = None
    fire_index: float | None = None
    heavy_rain_warning: float | None = None
    soil_moisture: float | None = None
    ice_concentration: float | None = None
    ice_thickness: float | None = None
    sea_surface_temp: float | None = None
    salinity: float | None = None
    surge_amplitude: float | None = None

    @field_validator("soil_moisture")
    @classmethod
    def _soil_moisture_in_unit_range(cls, v: float | None) -> float | None:
        if v is not None and not 0 <= v <= 1:
            raise ValueError("soil_moisture must lie in [0, 1]")
        return v


class RiskLevel(str, Enum):
    """Three-level risk category plus Unavailable for missing inputs."""

    LOW = "Low"
    MEDIUM = "Medium"
    HIGH = "High"
    UNAVAILABLE = "N/A"

    @property
    def color(self) -> str:
        return _RISK_COLORS[self]


_RISK_COLORS = {
    RiskLevel.LOW: "#22c55e",
    RiskLevel.MEDIUM: "#eab308",
    RiskLevel.HIGH: "#ef4444",
    RiskLevel.UNAVAILABLE: "#71717a",
}


class PanelState(BaseModel):
    """Side panel state. Replaced wholesale by the reducers in cupola.panel."""

    model_config = ConfigDict(frozen=True)

    region: GeoCoordinate | None = None
    snapshot: RegionSnapshot | None = None
    loading: bool = False
    error: str | None = None

    @property
    def visible(self) -> bool:
        return self.region is not None
