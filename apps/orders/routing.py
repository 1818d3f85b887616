from __future__ import annotations

import logging
from typing import Any, Final

import requests
from django.conf import settings
from django.core.cache import cache

from apps.common.geo import Coordinates


log = logging.getLogger(__name__)

DIRECTIONS_URL_TEMPLATE: Final[str] = "https://api.mapbox.com/directions/v5/mapbox/driving/{coordinates}"
DEFAULT_TIMEOUT: Final[float] = 5.0  # seconds
ROUTE_CACHE_TTL: Final[int] = 60 * 10


class RoutingError(Exception):
    pass


def _cache_key(origin: Coordinates, destination: Coordinates) -> str:
    # ~1m precision; repeated checkouts from the same pin reuse the route
    return "route:{:.5f},{:.5f};{:.5f},{:.5f}".format(origin.lng, origin.lat, destination.lng, destination.lat)


def _request_directions(origin: Coordinates, destination: Coordinates, token: str) -> dict[str, Any]:
    coordinates = f"{origin.lng},{origin.lat};{destination.lng},{destination.lat}"
    url = DIRECTIONS_URL_TEMPLATE.format(coordinates=coordinates)
    timeout = float(getattr(settings, "ROUTING_TIMEOUT_SECONDS", DEFAULT_TIMEOUT))
    try:
        response = requests.get(
            url,
            params={"access_token": token, "overview": "false"},
            timeout=timeout,
        )
    except requests.RequestException as exc:
        raise RoutingError(f"directions request failed: {exc.__class__.__name__}") from exc
    if not response.ok:
        raise RoutingError(f"directions returned HTTP {response.status_code}")
    try:
        return response.json()
    except ValueError as exc:
        raise RoutingError("directions returned invalid JSON") from exc


def _distance_from_payload(payload: dict[str, Any]) -> float:
    if payload.get("code") not in (None, "Ok"):
        raise RoutingError(f"no route: {payload.get('code')}")
    routes = payload.get("routes") or []
    if not routes:
        raise RoutingError("no route")
    distance = routes[0].get("distance")
    if isinstance(distance, bool) or not isinstance(distance, (int, float)) or distance < 0:
        raise RoutingError("route without distance")
    return float(distance)


def route_distance(origin: Coordinates, destination: Coordinates) -> float | None:
    """Driving distance in meters, or None when the provider cannot answer.

    Never raises: checkout must keep working through a provider outage.
    """
    token = getattr(settings, "MAPBOX_ACCESS_TOKEN", "") or ""
    if not token:
        log.warning("[routing] MAPBOX_ACCESS_TOKEN not configured")
        return None
    key = _cache_key(origin, destination)
    cached = cache.get(key)
    if cached is not None:
        return float(cached)
    try:
        distance = _distance_from_payload(_request_directions(origin, destination, token))
    except RoutingError as exc:
        log.warning("[routing] distance unavailable: %s", exc)
        return None
    cache.set(key, distance, timeout=int(getattr(settings, "ROUTING_CACHE_SECONDS", ROUTE_CACHE_TTL)))
    log.info("[routing] distance=%.0fm", distance)
    return distance
