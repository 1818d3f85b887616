from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Any

from .errors import InvalidCoordinates


@dataclass(frozen=True, slots=True)
class Coordinates:
    lat: float
    lng: float

    def as_dict(self) -> dict[str, float]:
        return {"lat": self.lat, "lng": self.lng}


def is_valid(lat: float, lng: float) -> bool:
    if not (math.isfinite(lat) and math.isfinite(lng)):
        return False
    if not (-90.0 <= lat <= 90.0 and -180.0 <= lng <= 180.0):
        return False
    # (0, 0) is what unset map pickers send
    return not (lat == 0.0 and lng == 0.0)


def parse_coordinates(raw: Any) -> Coordinates:
    """Build ``Coordinates`` from ``{"lat": .., "lng": ..}`` or raise InvalidCoordinates."""
    if not isinstance(raw, dict):
        raise InvalidCoordinates()
    try:
        lat = float(raw.get("lat"))
        lng = float(raw.get("lng"))
    except (TypeError, ValueError):
        raise InvalidCoordinates()
    if not is_valid(lat, lng):
        raise InvalidCoordinates()
    return Coordinates(lat=lat, lng=lng)
