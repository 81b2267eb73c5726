"""Conversion between degrees and the API's fixed-point coordinates."""

import math
from decimal import ROUND_HALF_UP, Decimal

from .models import Coordinates, ScaledCoordinates

COORDINATE_SCALE = 1_000_000

EARTH_RADIUS_METERS = 6_371_000


def to_scaled(value: float) -> int:
    """
    Convert a coordinate in degrees to the scaled wire format.

    Rounds half away from zero on the decimal representation of ``value``,
    so ``to_scaled(1.1234565) == 1123457`` and
    ``to_scaled(-1.1234565) == -1123457``.

    Raises:
        ValueError: If value is not finite.
    """
    if not math.isfinite(value):
        raise ValueError(f"Cannot scale non-finite coordinate {value!r}")
    scaled = Decimal(repr(value)) * COORDINATE_SCALE
    return int(scaled.quantize(Decimal(1), rounding=ROUND_HALF_UP))


def from_scaled(value: int) -> float:
    """Convert a scaled wire coordinate back to degrees."""
    return value / COORDINATE_SCALE


def to_scaled_coordinates(coords: Coordinates) -> ScaledCoordinates:
    return ScaledCoordinates(latitude=to_scaled(coords.lat), longitude=to_scaled(coords.lon))


def from_scaled_coordinates(scaled: ScaledCoordinates) -> Coordinates:
    return Coordinates(lat=from_scaled(scaled.latitude), lon=from_scaled(scaled.longitude))


def calculate_distance(origin: Coordinates, destination: Coordinates) -> float:
    """
    Great-circle distance between two points.

    Args:
        origin: First point.
        destination: Second point.

    Returns:
        Distance in meters (haversine formula).
    """
    d_lat = math.radians(destination.lat - origin.lat)
    d_lon = math.radians(destination.lon - origin.lon)
    lat1 = math.radians(origin.lat)
    lat2 = math.radians(destination.lat)

    a = (
        math.sin(d_lat / 2) ** 2
        + math.cos(lat1) * math.cos(lat2) * math.sin(d_lon / 2) ** 2
    )
    c = 2 * math.atan2(math.sqrt(a), math.sqrt(1 - a))
    return EARTH_RADIUS_METERS * c


def is_valid_coordinates(coords: Coordinates) -> bool:
    """Check that both values are finite numbers inside the lat/lon ranges."""
    lat, lon = coords.lat, coords.lon
    for value in (lat, lon):
        if isinstance(value, bool) or not isinstance(value, (int, float)):
            return False
        if not math.isfinite(value):
            return False
    return -90 <= lat <= 90 and -180 <= lon <= 180
