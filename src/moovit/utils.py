"""Small helpers for picking apart API payloads."""

import math
from datetime import datetime, timezone
from typing import Any, Optional

from .coordinates import from_scaled
from .models import Coordinates


def dig(obj: Any, *keys: str) -> Any:
    """Follow nested dict keys, returning None as soon as one is missing."""
    for key in keys:
        if not isinstance(obj, dict):
            return None
        obj = obj.get(key)
        if obj is None:
            return None
    return obj


def utc_from_ms(ms: Optional[int]) -> datetime:
    """Epoch milliseconds to an aware UTC datetime (None counts as 0)."""
    return datetime.fromtimestamp((ms or 0) / 1000, tz=timezone.utc)


def round_half_up(value: float) -> int:
    return int(math.floor(value + 0.5))


def latlon_to_coordinates(latlon: Optional[dict]) -> Coordinates:
    """Scaled ``{"latitude", "longitude"}`` dict to Coordinates; missing parts are 0."""
    return Coordinates(
        lat=from_scaled(dig(latlon, "latitude") or 0),
        lon=from_scaled(dig(latlon, "longitude") or 0),
    )


def enum_or_int(enum_cls, value: int):
    """Map a numeric code onto ``enum_cls``, keeping unknown codes as plain ints."""
    try:
        return enum_cls(value)
    except ValueError:
        return value
