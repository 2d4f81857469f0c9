# ABOUTME: Vector math and the sphere-point to latitude/longitude conversion.
# ABOUTME: The globe uses north pole along +Y and prime meridian along +Z.

import math
from typing import NamedTuple

from cupola.models import GeoCoordinate

GLOBE_RADIUS = 2.0


class Vector3(NamedTuple):
    x: float
    y: float
    z: float

    def add(self, other: "Vector3") -> "Vector3":
        return Vector3(self.x + other.x, self.y + other.y, self.z + other.z)

    def scale(self, k: float) -> "Vector3":
        return Vector3(self.x * k, self.y * k, self.z * k)

    def dot(self, other: "Vector3") -> float:
        return self.x * other.x + self.y * other.y + self.z * other.z

    def length(self) -> float:
        return math.sqrt(self.dot(self))

    def normalized(self) -> "Vector3":
        n = self.length()
        if n == 0:
            raise ValueError("cannot normalize a zero-length vector")
        return self.scale(1 / n)


def resolve_point(point: Vector3, radius: float = GLOBE_RADIUS) -> GeoCoordinate | None:
    """Convert a point on the globe sphere to a geographic coordinate.

    Returns None when the point cannot be resolved (|y / radius| > 1 from floating
    error near the poles, or NaN input). Callers treat None as "no region selected".
    """
    ratio = point.y / radius
    if math.isnan(ratio) or abs(ratio) > 1:
        return None

    lat = math.degrees(math.asin(ratio))
    lon = math.degrees(math.atan2(point.x, point.z))
    if math.isnan(lat) or math.isnan(lon):
        return None
    return GeoCoordinate(latitude=lat, longitude=lon)
