# ABOUTME: Pure risk classifiers mapping upstream indices to a RiskLevel.
# ABOUTME: Covers Fosberg fire risk, rain/soil-moisture flood risk and storm surge alerting.

import math

from cupola.models import RiskLevel

FIRE_LOW_BELOW = 30
FIRE_MEDIUM_BELOW = 60
FLOOD_MEDIUM_ABOVE = 1
FLOOD_HIGH_ABOVE = 2
SURGE_ALERT_CM = 50


def is_missing(value: float | None) -> bool:
    return value is None or math.isnan(value)


def fire_risk(index: float | None) -> RiskLevel:
    """Classify a Fosberg fire weather index."""
    if is_missing(index) or index < 0:
        return RiskLevel.UNAVAILABLE
    if index < FIRE_LOW_BELOW:
        return RiskLevel.LOW
    if index < FIRE_MEDIUM_BELOW:
        return RiskLevel.MEDIUM
    return RiskLevel.HIGH


def flood_risk(rain_warning: float | None, soil_moisture: float | None) -> RiskLevel:
    """Classify flood risk from the 24h heavy-rain warning plus soil moisture index."""
    if is_missing(rain_warning) or is_missing(soil_moisture):
        return RiskLevel.UNAVAILABLE
    if not 0 <= soil_moisture <= 1:
        return RiskLevel.UNAVAILABLE

    score = rain_warning + soil_moisture
    if score > FLOOD_HIGH_ABOVE:
        return RiskLevel.HIGH
    if score > FLOOD_MEDIUM_ABOVE:
        return RiskLevel.MEDIUM
    return RiskLevel.LOW


def surge_alert(amplitude_cm: float | None) -> bool:
    return not is_missing(amplitude_cm) and amplitude_cm > SURGE_ALERT_CM
