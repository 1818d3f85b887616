from __future__ import annotations

import logging
from dataclasses import dataclass
from decimal import Decimal
from typing import Final

from apps.common.geo import Coordinates
from apps.common.money import round_cents
from apps.restaurant.config import RestaurantConfig

from . import routing


log = logging.getLogger(__name__)

FREE_RADIUS_METERS: Final[int] = 500
FLAT_RADIUS_METERS: Final[int] = 1000
FLAT_FEE_CENTS: Final[int] = 2000

SOURCE_ROUTED: Final[str] = "routed"
SOURCE_FALLBACK: Final[str] = "fallback"
SOURCE_UNAVAILABLE: Final[str] = "unavailable"


@dataclass(frozen=True, slots=True)
class DeliveryQuote:
    fee_cents: int
    source: str
    distance_meters: float | None = None

    @property
    def is_routed(self) -> bool:
        return self.source == SOURCE_ROUTED

    @property
    def is_fallback(self) -> bool:
        return self.source == SOURCE_FALLBACK


NO_DELIVERY = DeliveryQuote(fee_cents=0, source="")


def fee_for_distance(distance_meters: float | None, fee_per_km_cents: int) -> int:
    """Tiered delivery fee in cents.

    <= 500m is free, <= 1km is the flat fee, beyond that every extra
    kilometre (pro rata) costs ``fee_per_km_cents``. Unknown or negative
    distances cost nothing.
    """
    if distance_meters is None or distance_meters < 0:
        return 0
    if distance_meters <= FREE_RADIUS_METERS:
        return 0
    if distance_meters <= FLAT_RADIUS_METERS:
        return FLAT_FEE_CENTS
    extra_km = (Decimal(str(distance_meters)) - FLAT_RADIUS_METERS) / Decimal(1000)
    return FLAT_FEE_CENTS + round_cents(extra_km * Decimal(fee_per_km_cents))


def quote_delivery(
    config: RestaurantConfig,
    destination: Coordinates,
    *,
    client_fee_cents: int | None = None,
) -> DeliveryQuote:
    distance = None
    if config.coordinates is not None:
        distance = routing.route_distance(config.coordinates, destination)
    else:
        log.warning("[routing] restaurant has no coordinates; cannot route")
    if distance is not None:
        return DeliveryQuote(
            fee_cents=fee_for_distance(distance, config.fee_per_km_cents),
            source=SOURCE_ROUTED,
            distance_meters=distance,
        )
    if client_fee_cents is not None and client_fee_cents > 0:
        log.info("[routing] provider unavailable, accepting client fee=%s", client_fee_cents)
        return DeliveryQuote(fee_cents=int(client_fee_cents), source=SOURCE_FALLBACK)
    return DeliveryQuote(fee_cents=0, source=SOURCE_UNAVAILABLE)
