from __future__ import annotations

from django.db.models import QuerySet

from .models import Order, OrderModification
from .transitions import AuditEntry


def record(order: Order, entry: AuditEntry) -> OrderModification:
    return OrderModification.objects.create(
        order=order,
        modified_by_id=entry.actor_id,
        modified_by_name=(entry.actor_name or "")[:160],
        modification_type=entry.modification_type,
        previous_value=entry.previous_value,
        new_value=entry.new_value,
        item_details=(entry.item_details or "")[:500],
    )


def history_for(order: Order) -> QuerySet[OrderModification]:
    return order.modifications.order_by("-created_at")


def all_history() -> QuerySet[OrderModification]:
    return OrderModification.objects.select_related("order").order_by("-created_at")
