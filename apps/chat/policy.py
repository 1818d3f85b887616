from __future__ import annotations

import datetime as dt

from apps.restaurant.config import RestaurantConfig


def chat_window_closes_at(status_changed_at: dt.datetime, config: RestaurantConfig) -> dt.datetime:
    """Last instant chat stays open after an order turns final.

    Open for the rest of the day the status changed and through closing time
    on the following day; all of the following day when no closing time is
    configured. Days are calendar days in the restaurant's timezone.
    """
    tz = config.tz
    next_day = status_changed_at.astimezone(tz).date() + dt.timedelta(days=1)
    if config.closing_time is None:
        return dt.datetime.combine(next_day + dt.timedelta(days=1), dt.time.min, tzinfo=tz)
    return dt.datetime.combine(next_day, config.closing_time, tzinfo=tz)


def grace_period_expired(
    status_changed_at: dt.datetime | None,
    config: RestaurantConfig,
    now: dt.datetime,
) -> bool:
    if status_changed_at is None:
        return False
    closes_at = chat_window_closes_at(status_changed_at, config)
    if config.closing_time is None:
        return now >= closes_at
    return now > closes_at
