from __future__ import annotations

import datetime as dt
import logging
from dataclasses import dataclass, field
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from django.conf import settings

from apps.common.errors import OrderingUnavailable
from apps.common.geo import Coordinates, is_valid

from .models import Restaurant


log = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class PreorderSlot:
    date: dt.date
    start_time: dt.time
    end_time: dt.time

    def contains(self, local: dt.datetime) -> bool:
        return local.date() == self.date and self.start_time <= local.time() <= self.end_time


@dataclass(frozen=True, slots=True)
class RestaurantConfig:
    """Immutable snapshot of the restaurant row.

    Loaded once per request and handed to pricing, delivery and chat code so
    none of them reach for the table on their own.
    """

    name: str = "Restaurant"
    platform_fee_cents: int = 0
    platform_fee_enabled: bool = False
    fee_per_km_cents: int = 1500
    coordinates: Coordinates | None = None
    opening_time: dt.time | None = None
    closing_time: dt.time | None = None
    timezone: str = "UTC"
    allow_delivery: bool = True
    allow_new_orders: bool = True
    preorder_restrictions_enabled: bool = False
    preorder_windows: tuple[PreorderSlot, ...] = field(default_factory=tuple)

    @property
    def effective_platform_fee_cents(self) -> int:
        return self.platform_fee_cents if self.platform_fee_enabled else 0

    @property
    def tz(self) -> ZoneInfo:
        try:
            return ZoneInfo(self.timezone or "UTC")
        except (ZoneInfoNotFoundError, ValueError):
            log.warning("[restaurant] unknown timezone=%s, falling back to UTC", self.timezone)
            return ZoneInfo("UTC")

    def allows_preorder_at(self, when: dt.datetime) -> bool:
        if not self.preorder_restrictions_enabled:
            return True
        local = when.astimezone(self.tz)
        return any(slot.contains(local) for slot in self.preorder_windows)


def _coordinates(r: Restaurant) -> Coordinates | None:
    if r.latitude is None or r.longitude is None:
        return None
    if not is_valid(r.latitude, r.longitude):
        return None
    return Coordinates(lat=r.latitude, lng=r.longitude)


def from_model(r: Restaurant) -> RestaurantConfig:
    windows = tuple(
        PreorderSlot(date=w.date, start_time=w.start_time, end_time=w.end_time)
        for w in r.preorder_windows.all()
    )
    return RestaurantConfig(
        name=r.name,
        platform_fee_cents=int(r.platform_fee_cents or 0),
        platform_fee_enabled=bool(r.platform_fee_enabled),
        fee_per_km_cents=int(r.fee_per_km_cents or 0),
        coordinates=_coordinates(r),
        opening_time=r.opening_time,
        closing_time=r.closing_time,
        timezone=r.timezone or settings.TIME_ZONE,
        allow_delivery=bool(r.allow_delivery),
        allow_new_orders=bool(r.allow_new_orders),
        preorder_restrictions_enabled=bool(r.preorder_restrictions_enabled),
        preorder_windows=windows,
    )


def load_restaurant_config(*, required: bool = True) -> RestaurantConfig:
    """Snapshot of the restaurant row.

    With ``required=False`` a missing row yields the defaults, so order
    management and chat keep working on a half-configured install.
    """
    r = Restaurant.objects.prefetch_related("preorder_windows").order_by("created_at").first()
    if r is None:
        if required:
            raise OrderingUnavailable("The restaurant has not been set up yet.")
        return RestaurantConfig(timezone=settings.TIME_ZONE)
    return from_model(r)
