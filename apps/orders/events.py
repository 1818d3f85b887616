from __future__ import annotations

import logging
from typing import Iterable

from apps.chat import services as chat_services

from . import audit
from .models import Order
from .transitions import AuditEntry, ChatNotice, Event, Transition


log = logging.getLogger(__name__)


def dispatch(order: Order, events: Iterable[Event]) -> None:
    for event in events:
        if isinstance(event, ChatNotice):
            chat_services.post_notice(
                order,
                sender_id=event.sender_id,
                sender_name=event.sender_name,
                sender_role=event.sender_role,
                message=event.message,
            )
        elif isinstance(event, AuditEntry):
            audit.record(order, event)
        else:  # pragma: no cover
            raise TypeError(f"unknown event: {type(event).__name__}")


def apply_transition(order: Order, transition: Transition) -> Order:
    """Write field changes and every event. Caller owns the transaction."""
    if transition.changes:
        for name, value in transition.changes.items():
            setattr(order, name, value)
        order.save(update_fields=[*transition.changes.keys(), "updated_at"])
        log.info("[orders] order=%s changed=%s", order.public_code, sorted(transition.changes))
    dispatch(order, transition.events)
    return order
