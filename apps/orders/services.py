from __future__ import annotations

import dataclasses
import datetime as dt
import logging
from typing import Any

from django.contrib.auth import get_user_model
from django.db import transaction
from django.db.models import QuerySet
from django.utils import timezone
from django.utils.dateparse import parse_datetime

from apps.chat.emitter import welcome_message
from apps.common.errors import (
    InvalidRequest,
    InvalidSchedule,
    NotFound,
    OrderingUnavailable,
    Unauthorized,
)
from apps.common.geo import parse_coordinates
from apps.common.http import int_field
from apps.common.ids import as_uuid
from apps.common.phone import normalize_or_blank
from apps.common.rate_limit import enforce
from apps.common.sanitize import sanitize_text
from apps.common.storage import resolve_to_url
from apps.restaurant.config import RestaurantConfig, load_restaurant_config
from apps.vouchers import services as vouchers

from . import audit, pricing, transitions
from .delivery import NO_DELIVERY, DeliveryQuote, quote_delivery
from .events import apply_transition, dispatch
from .models import DenialReason, Order, OrderItem, OrderModification
from .transitions import UNSET, Actor, ChatNotice, Context, CustomerRequest, ItemSnapshot, OrderState, OwnerRequest


log = logging.getLogger(__name__)

MAX_INSTRUCTIONS_LENGTH = 100
MAX_LIST = 200
OWNER_ONLY_EXTRAS = ("denial_reason", "scheduled_at", "items", "allow_chat", "allow_customer_images")


# ---- helpers ---------------------------------------------------------------

def actor_for(user) -> Actor:
    return Actor(id=user.pk, role=user.role, name=user.name_for_display)


def system_owner():
    User = get_user_model()
    return User.objects.filter(role=User.ROLE_OWNER, is_active=True).order_by("date_joined").first()


def _context(config: RestaurantConfig, now: dt.datetime) -> Context:
    owner = system_owner()
    return Context(
        now=now,
        tz=config.tz,
        restaurant_name=config.name,
        owner_id=owner.pk if owner else None,
    )


def parse_when(raw: Any, config: RestaurantConfig) -> dt.datetime | None:
    """ISO-8601 string or epoch milliseconds. Naive values are restaurant-local."""
    if raw is None or raw == "":
        return None
    if isinstance(raw, bool):
        raise InvalidSchedule()
    if isinstance(raw, (int, float)):
        try:
            return dt.datetime.fromtimestamp(raw / 1000, tz=dt.timezone.utc)
        except (OverflowError, OSError, ValueError):
            raise InvalidSchedule()
    if not isinstance(raw, str):
        raise InvalidSchedule()
    try:
        parsed = parse_datetime(raw.strip())
    except ValueError:
        parsed = None
    if parsed is None:
        raise InvalidSchedule()
    if timezone.is_naive(parsed):
        parsed = parsed.replace(tzinfo=config.tz)
    return parsed


def snapshot_items(order: Order) -> tuple[ItemSnapshot, ...]:
    return tuple(
        ItemSnapshot(
            key=pricing.line_key(
                item.menu_item_id,
                item.variant_id,
                [c["choice_id"] for c in item.selected_choices.values()],
                [(b["menu_item_id"], b["variant_id"]) for b in item.bundle_items],
            ),
            name=item.name,
            quantity=item.quantity,
            unit_price_cents=item.unit_price_cents,
            line_total_cents=item.line_total_cents,
        )
        for item in order.items.all()
    )


def snapshot(order: Order) -> OrderState:
    return OrderState(
        id=order.pk,
        customer_id=order.customer_id,
        status=order.status,
        order_type=order.order_type,
        pre_order_scheduled_at=order.pre_order_scheduled_at,
        payment_plan=order.payment_plan,
        remaining_payment_method=order.remaining_payment_method,
        remaining_payment_proof_url=order.remaining_payment_proof_url,
        denial_reason=order.denial_reason,
        gcash_number=order.gcash_number,
        accepted_at=order.accepted_at,
        subtotal_cents=order.subtotal_cents,
        platform_fee_cents=order.platform_fee_cents,
        delivery_fee_cents=order.delivery_fee_cents,
        discount_cents=order.discount_cents,
        total_cents=order.total_cents,
        items=snapshot_items(order),
    )


def _priced_snapshot(lines: tuple[pricing.PricedLine, ...]) -> tuple[ItemSnapshot, ...]:
    return tuple(
        ItemSnapshot(
            key=p.key,
            name=p.line.menu_item.name,
            quantity=p.line.quantity,
            unit_price_cents=p.unit_price_cents,
            line_total_cents=p.line_total_cents,
        )
        for p in lines
    )


def _write_items(order: Order, lines: tuple[pricing.PricedLine, ...]) -> None:
    for position, priced in enumerate(lines):
        OrderItem.objects.create(order=order, position=position, **priced.as_item_fields())


def _locked_order(order_id: Any) -> Order:
    pk = as_uuid(order_id)
    order = Order.objects.select_for_update().filter(pk=pk).first() if pk else None
    if order is None:
        raise NotFound("Order not found.")
    return order


def _choice(payload: dict[str, Any], name: str, choices, *, default: str = "") -> str:
    value = payload.get(name) or default
    if not isinstance(value, str):
        raise InvalidRequest(f"Invalid value for '{name}'.")
    if value and value not in {code for code, _ in choices}:
        raise InvalidRequest(f"Invalid value for '{name}'.")
    return value


def _claimed(payload: dict[str, Any]) -> pricing.ClaimedAmounts:
    return pricing.ClaimedAmounts(
        subtotal_cents=int_field(payload, "subtotal_cents"),
        platform_fee_cents=int_field(payload, "platform_fee_cents"),
        delivery_fee_cents=int_field(payload, "delivery_fee_cents"),
        discount_cents=int_field(payload, "discount_cents"),
        total_cents=int_field(payload, "total_cents"),
    )


def _optional_proof(payload: dict[str, Any], name: str) -> str:
    ref = payload.get(name)
    if ref in (None, ""):
        return ""
    if not isinstance(ref, str):
        raise InvalidRequest(f"'{name}' must be a string.")
    return resolve_to_url(ref)


# ---- createOrder -----------------------------------------------------------

def create_order(user, payload: dict[str, Any], *, now: dt.datetime | None = None) -> Order:
    """Price, verify and persist a customer's candidate order.

    The routing provider is consulted before the transaction opens; voucher
    lock, usage increment, order rows and the welcome message commit together.
    """
    if not user.is_customer:
        raise Unauthorized("Only customers can create orders.")
    enforce("orders.create", f"user:{user.pk}")
    now = now or timezone.now()
    config = load_restaurant_config()
    if not config.allow_new_orders:
        raise OrderingUnavailable()

    order_type = _choice(payload, "order_type", Order.TYPE_CHOICES)
    if not order_type:
        raise InvalidRequest("'order_type' is required.")
    is_preorder = order_type == Order.TYPE_PREORDER
    fulfillment = ""
    scheduled_at = None
    if is_preorder:
        fulfillment = _choice(payload, "pre_order_fulfillment", Order.FULFILLMENT_CHOICES)
        if not fulfillment:
            raise InvalidSchedule("Please choose pickup or delivery for your pre-order.")
        scheduled_at = parse_when(payload.get("pre_order_scheduled_at"), config)
        if scheduled_at is None or scheduled_at <= now:
            raise InvalidSchedule()
        if not config.allows_preorder_at(scheduled_at):
            raise InvalidSchedule("The selected pre-order time is outside the available windows.")
    is_delivery = order_type == Order.TYPE_DELIVERY or fulfillment == Order.FULFILLMENT_DELIVERY
    if is_delivery and not config.allow_delivery:
        raise OrderingUnavailable("Delivery is not available right now.")

    raw_instructions = payload.get("special_instructions") or ""
    if not isinstance(raw_instructions, str) or len(raw_instructions.strip()) > MAX_INSTRUCTIONS_LENGTH:
        raise InvalidRequest("Landmark/Special instructions must be 100 characters or less.")
    instructions = sanitize_text(raw_instructions)

    plan = _choice(payload, "payment_plan", Order.PLAN_CHOICES, default=Order.PLAN_FULL)
    downpayment = None
    remaining_method = ""
    if plan == Order.PLAN_DOWNPAYMENT:
        downpayment = int_field(payload, "downpayment_cents", required=True)
        remaining_method = _choice(payload, "remaining_payment_method", Order.REMAINING_CHOICES)
        if not remaining_method:
            raise InvalidRequest("'remaining_payment_method' is required for downpayments.")

    claimed = _claimed(payload)
    screenshot_url = _optional_proof(payload, "payment_screenshot")
    downpayment_proof_url = _optional_proof(payload, "downpayment_proof")
    remaining_proof_url = _optional_proof(payload, "remaining_payment_proof")

    coords = None
    delivery: DeliveryQuote = NO_DELIVERY
    if is_delivery:
        coords = parse_coordinates(payload.get("customer_coordinates"))
        delivery = quote_delivery(config, coords, client_fee_cents=claimed.delivery_fee_cents)

    customer_name = sanitize_text(str(payload.get("customer_name") or "")) or user.name_for_display
    with transaction.atomic():
        lines = pricing.price_items(payload.get("items"))
        subtotal = pricing.subtotal_of(lines)
        voucher = None
        discount = 0
        code = vouchers.normalize_code(payload.get("voucher_code"))
        if code:
            voucher = vouchers.check_voucher(vouchers.get_voucher_by_code(code, for_update=True), subtotal, now=now)
            discount = vouchers.compute_discount(voucher, subtotal)
        quote = pricing.build_quote(lines, config, delivery, discount_cents=discount)
        pricing.verify_claims(claimed, quote)
        if downpayment is not None and not (0 < downpayment <= quote.total_cents):
            raise InvalidRequest("Downpayment must be more than zero and no more than the order total.")
        if voucher is not None:
            vouchers.increment_usage(voucher.pk)

        order = Order.objects.create(
            customer=user,
            order_type=order_type,
            status=Order.STATUS_PREORDER_PENDING if is_preorder else Order.STATUS_PENDING,
            pre_order_fulfillment=fulfillment,
            pre_order_scheduled_at=scheduled_at,
            customer_name=customer_name[:160],
            customer_phone=normalize_or_blank(payload.get("customer_phone") or user.phone),
            customer_address=sanitize_text(str(payload.get("customer_address") or ""))[:255],
            customer_lat=coords.lat if coords else None,
            customer_lng=coords.lng if coords else None,
            gcash_number=str(payload.get("gcash_number") or user.gcash_number or "").strip()[:20],
            subtotal_cents=quote.subtotal_cents,
            platform_fee_cents=quote.platform_fee_cents,
            delivery_fee_cents=quote.delivery_fee_cents,
            delivery_fee_source=delivery.source,
            discount_cents=quote.discount_cents,
            total_cents=quote.total_cents,
            voucher_code=voucher.code if voucher else "",
            payment_plan=plan,
            downpayment_cents=downpayment,
            downpayment_proof_url=downpayment_proof_url,
            remaining_payment_method=remaining_method,
            remaining_payment_proof_url=remaining_proof_url,
            payment_screenshot_url=screenshot_url,
            special_instructions=instructions,
            status_changed_at=now,
        )
        _write_items(order, lines)
        ctx = _context(config, now)
        dispatch(
            order,
            [
                ChatNotice(
                    sender_id=ctx.owner_id,
                    sender_name=config.name,
                    sender_role=transitions.ROLE_OWNER,
                    message=welcome_message(order.public_code, is_preorder=is_preorder),
                )
            ],
        )
    log.info(
        "[orders] created order=%s type=%s total=%s delivery=%s",
        order.public_code,
        order_type,
        order.total_cents,
        delivery.source or "-",
    )
    return order


# ---- updateOrderStatus -----------------------------------------------------

def _status(payload: dict[str, Any]) -> str | None:
    status = payload.get("status")
    if status in (None, ""):
        return None
    if not isinstance(status, str):
        raise InvalidRequest("'status' must be a string.")
    return status


def _owner_request(payload: dict[str, Any], config: RestaurantConfig) -> OwnerRequest:
    scheduled_at = UNSET
    if "scheduled_at" in payload:
        scheduled_at = parse_when(payload.get("scheduled_at"), config)
    denial_reason = payload.get("denial_reason")
    if denial_reason is not None:
        if not isinstance(denial_reason, str):
            raise InvalidRequest("'denial_reason' must be a string.")
        denial_reason = sanitize_text(denial_reason)[:255]
    flags = {}
    for name in ("allow_chat", "allow_customer_images"):
        value = payload.get(name)
        if value is not None and not isinstance(value, bool):
            raise InvalidRequest(f"'{name}' must be true or false.")
        flags[name] = value
    return OwnerRequest(
        status=_status(payload),
        denial_reason=denial_reason,
        scheduled_at=scheduled_at,
        **flags,
    )


def update_order_status(user, order_id: Any, payload: dict[str, Any], *, now: dt.datetime | None = None) -> Order:
    now = now or timezone.now()
    config = load_restaurant_config(required=False)
    actor = actor_for(user)
    with transaction.atomic():
        order = _locked_order(order_id)
        ctx = _context(config, now)
        if user.is_owner:
            if payload.get("items") is not None:
                _edit_items_locked(order, actor, payload["items"], ctx)
            transition = transitions.owner_update(snapshot(order), actor, _owner_request(payload, config), ctx)
        else:
            if any(name in payload for name in OWNER_ONLY_EXTRAS):
                raise Unauthorized()
            proof = payload.get("remaining_payment_proof")
            if proof is not None and not isinstance(proof, str):
                raise InvalidRequest("'remaining_payment_proof' must be a string.")
            req = CustomerRequest(status=_status(payload), remaining_payment_proof_url=proof)
            transition = transitions.customer_update(snapshot(order), actor, req, ctx)
            if "remaining_payment_proof_url" in transition.changes:
                changes = {**transition.changes, "remaining_payment_proof_url": resolve_to_url(proof)}
                transition = dataclasses.replace(transition, changes=changes)
        apply_transition(order, transition)
    return order


# ---- updateOrderItems ------------------------------------------------------

def _edit_items_locked(
    order: Order,
    actor: Actor,
    raw_items: Any,
    ctx: Context,
    *,
    modification_type: str | None = None,
    note: str = "",
) -> None:
    state = snapshot(order)
    transitions.ensure_items_editable(state)
    lines = pricing.price_items(raw_items)
    transition = transitions.edit_items(
        state, actor, _priced_snapshot(lines), ctx, modification_type=modification_type, note=note
    )
    order.items.all().delete()
    _write_items(order, lines)
    apply_transition(order, transition)


def update_order_items(
    user,
    order_id: Any,
    raw_items: Any,
    *,
    modification_type: str | None = None,
    note: str = "",
    now: dt.datetime | None = None,
) -> Order:
    if not user.is_owner:
        raise Unauthorized("Only owners can modify order items.")
    now = now or timezone.now()
    config = load_restaurant_config(required=False)
    with transaction.atomic():
        order = _locked_order(order_id)
        _edit_items_locked(
            order,
            actor_for(user),
            raw_items,
            _context(config, now),
            modification_type=modification_type,
            note=sanitize_text(note or ""),
        )
    return order


# ---- queries ---------------------------------------------------------------

def list_orders(user, *, status: str | None = None) -> QuerySet[Order]:
    qs = Order.objects.all() if user.is_owner else Order.objects.filter(customer=user)
    if status:
        wanted = [s.strip() for s in status.split(",") if s.strip()]
        if any(s not in transitions.STATUSES for s in wanted):
            raise InvalidRequest("Unknown status filter.")
        qs = qs.filter(status__in=wanted)
    return qs.prefetch_related("items").order_by("-created_at")[:MAX_LIST]


def get_order(user, order_id: Any) -> Order:
    pk = as_uuid(order_id)
    order = Order.objects.prefetch_related("items").filter(pk=pk).first() if pk else None
    if order is None:
        raise NotFound("Order not found.")
    if not user.is_owner and order.customer_id != user.pk:
        raise Unauthorized("You don't have access to this order.")
    return order


def order_history(user, order_id: Any | None = None) -> QuerySet[OrderModification]:
    if not user.is_owner:
        raise Unauthorized()
    if order_id is None:
        return audit.all_history()[:MAX_LIST]
    pk = as_uuid(order_id)
    order = Order.objects.filter(pk=pk).first() if pk else None
    if order is None:
        raise NotFound("Order not found.")
    return audit.history_for(order)


def denial_reasons(user) -> QuerySet[DenialReason]:
    if not user.is_owner:
        raise Unauthorized()
    return DenialReason.objects.filter(is_preset=True)


def distance_quote(user, payload: dict[str, Any]) -> DeliveryQuote:
    enforce("routing.distance", f"user:{user.pk}")
    coords = parse_coordinates(payload.get("customer_coordinates"))
    config = load_restaurant_config()
    return quote_delivery(config, coords)
