from __future__ import annotations

import logging
import re
from dataclasses import dataclass
from typing import Any, Iterable

from django.db.models import Count, F, Max, OuterRef, Q, Subquery
from django.utils import timezone

from apps.common.errors import ChatDisabled, InvalidRequest, NotFound, Unauthorized
from apps.common.ids import as_uuid
from apps.common.rate_limit import enforce
from apps.common.sanitize import sanitize_text
from apps.orders.models import Order
from apps.restaurant.config import RestaurantConfig, load_restaurant_config

from .models import ChatMessage, ChatReadCursor
from .policy import grace_period_expired


log = logging.getLogger(__name__)

MAX_MESSAGE_LENGTH = 100
MAX_UNREAD_ORDERS = 100
_IMAGE_URL = re.compile(r"https?://\S+\.(?:png|jpe?g|gif|webp|heic)(?:\?\S*)?", re.IGNORECASE)


@dataclass(frozen=True, slots=True)
class UnreadSummary:
    order_id: str
    unread_count: int
    last_message: ChatMessage | None


def _other_role(user) -> str:
    return ChatMessage.ROLE_OWNER if user.role == ChatMessage.ROLE_CUSTOMER else ChatMessage.ROLE_CUSTOMER


def visible_orders(user):
    if user.is_owner:
        return Order.objects.all()
    return Order.objects.filter(customer=user)


def get_order_for_chat(user, order_id: Any) -> Order:
    pk = as_uuid(order_id)
    order = Order.objects.filter(pk=pk).first() if pk else None
    if order is None:
        raise NotFound("Order not found.")
    if not user.is_owner and order.customer_id != user.pk:
        raise Unauthorized("You don't have access to this order.")
    return order


def list_messages(user, order_id: Any) -> list[ChatMessage]:
    order = get_order_for_chat(user, order_id)
    return list(order.chat_messages.order_by("timestamp"))


def post_notice(order: Order, *, sender_id: Any, sender_name: str, sender_role: str, message: str) -> ChatMessage:
    """Store an automatic message. Not rate-limited and not length-capped."""
    return ChatMessage.objects.create(
        order=order,
        sender_id=sender_id,
        sender_name=(sender_name or "Restaurant")[:160],
        sender_role=sender_role,
        message=sanitize_text(message)[:500],
    )


def _disable_if_expired(order: Order, config: RestaurantConfig, now) -> None:
    if not order.is_final:
        return
    changed_at = order.status_changed_at or order.updated_at
    if not grace_period_expired(changed_at, config, now):
        return
    if order.allow_chat:
        # outside any transaction: the flag must survive the error below
        Order.objects.filter(pk=order.pk).update(allow_chat=False, updated_at=now)
        log.info("[chat] grace period over, chat disabled order=%s", order.public_code)
    raise ChatDisabled("Chat is disabled for this order. The work day grace period has ended.")


def send_message(user, order_id: Any, text: Any, *, now=None) -> ChatMessage:
    now = now or timezone.now()
    enforce("chat.send", f"user:{user.pk}")
    order = get_order_for_chat(user, order_id)
    config = load_restaurant_config(required=False)
    _disable_if_expired(order, config, now)
    if not order.allow_chat:
        raise ChatDisabled()

    raw = text if isinstance(text, str) else ""
    if len(raw.strip()) > MAX_MESSAGE_LENGTH:
        raise InvalidRequest("Message must be 100 characters or less.")
    message = sanitize_text(raw)
    if not message:
        raise InvalidRequest("Message cannot be empty.")
    if user.is_customer and not order.allow_customer_images and _IMAGE_URL.search(message):
        raise Unauthorized("Images are not enabled for this chat.")

    sender_name = config.name if user.is_owner else user.name_for_display
    msg = ChatMessage.objects.create(
        order=order,
        sender=user,
        sender_name=sender_name[:160],
        sender_role=user.role,
        message=message,
    )
    log.info("[chat] message order=%s role=%s", order.public_code, user.role)
    return msg


def mark_as_read(user, order_id: Any) -> ChatReadCursor | None:
    """Move the cursor to the newest message, never to wall-clock time."""
    order = get_order_for_chat(user, order_id)
    latest = order.chat_messages.aggregate(latest=Max("timestamp"))["latest"]
    if latest is None:
        return None
    cursor, _ = ChatReadCursor.objects.update_or_create(
        order=order, user=user, defaults={"last_read_at": latest}
    )
    return cursor


def _unread_messages(user, orders):
    cursor = ChatReadCursor.objects.filter(order_id=OuterRef("order_id"), user=user).values("last_read_at")[:1]
    return (
        ChatMessage.objects.filter(order__in=orders, sender_role=_other_role(user))
        .annotate(read_upto=Subquery(cursor))
        .filter(Q(read_upto__isnull=True) | Q(timestamp__gt=F("read_upto")))
    )


def unread_summary(user, order_ids: Iterable[Any]) -> list[UnreadSummary]:
    ids = []
    for raw in order_ids:
        raw = str(raw).strip()
        if raw:
            pk = as_uuid(raw)
            ids.append(str(pk) if pk else raw)
    if len(ids) > MAX_UNREAD_ORDERS:
        raise InvalidRequest(f"At most {MAX_UNREAD_ORDERS} orders per request.")
    pks = [as_uuid(i) for i in ids if as_uuid(i)]
    visible = {str(pk) for pk in visible_orders(user).filter(pk__in=pks).values_list("pk", flat=True)}
    counts = {
        str(row["order_id"]): row["n"]
        for row in _unread_messages(user, visible).order_by().values("order_id").annotate(n=Count("id"))
    }
    results = []
    for order_id in ids:
        if order_id not in visible:
            results.append(UnreadSummary(order_id=order_id, unread_count=0, last_message=None))
            continue
        last = ChatMessage.objects.filter(order_id=order_id).order_by("-timestamp").first()
        results.append(UnreadSummary(order_id=order_id, unread_count=counts.get(order_id, 0), last_message=last))
    return results


def total_unread(user) -> int:
    return _unread_messages(user, visible_orders(user)).count()


