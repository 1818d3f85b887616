"""Order state machine.

Every function here is pure: it takes an ``OrderState`` snapshot plus the
request and returns a ``Transition`` (field changes + events) or raises a
DomainError. Nothing is written; ``events.apply_transition`` does that.
"""
from __future__ import annotations

import datetime as dt
from dataclasses import dataclass, field
from typing import Any, Final, Union
from zoneinfo import ZoneInfo

from apps.chat import emitter
from apps.common.errors import (
    CancellationWindowClosed,
    InvalidRequest,
    InvalidSchedule,
    OrderFinal,
    OrderNotEditable,
    Unauthorized,
)

from .models import Order, OrderModification

ROLE_OWNER: Final[str] = "owner"
ROLE_CUSTOMER: Final[str] = "customer"

STATUSES: Final[frozenset[str]] = frozenset(code for code, _ in Order.STATUS_CHOICES)
FINAL_STATUSES: Final[frozenset[str]] = Order.FINAL_STATUSES
ITEM_LOCKED_STATUSES: Final[frozenset[str]] = frozenset({Order.STATUS_ACCEPTED, Order.STATUS_IN_TRANSIT})
CANCELLABLE: Final[frozenset[str]] = frozenset({Order.STATUS_PENDING, Order.STATUS_DENIED})
PREORDER_CANCELLABLE: Final[frozenset[str]] = CANCELLABLE | {Order.STATUS_PREORDER_PENDING}
CANCELLATION_NOTICE: Final[dt.timedelta] = dt.timedelta(days=1)
ITEM_MODIFICATION_TYPES: Final[frozenset[str]] = frozenset(
    {
        OrderModification.TYPE_ITEM_ADDED,
        OrderModification.TYPE_ITEM_REMOVED,
        OrderModification.TYPE_ITEM_QUANTITY_CHANGED,
        OrderModification.TYPE_ITEM_PRICE_CHANGED,
        OrderModification.TYPE_ORDER_EDITED,
    }
)


class _Unset:
    def __repr__(self) -> str:  # pragma: no cover
        return "UNSET"


UNSET: Any = _Unset()


@dataclass(frozen=True, slots=True)
class Actor:
    id: Any
    role: str
    name: str


@dataclass(frozen=True, slots=True)
class ItemSnapshot:
    key: str
    name: str
    quantity: int
    unit_price_cents: int
    line_total_cents: int

    def as_dict(self) -> dict[str, Any]:
        return {
            "key": self.key,
            "name": self.name,
            "quantity": self.quantity,
            "unit_price_cents": self.unit_price_cents,
            "line_total_cents": self.line_total_cents,
        }


@dataclass(frozen=True, slots=True)
class OrderState:
    id: Any
    customer_id: Any
    status: str
    order_type: str
    pre_order_scheduled_at: dt.datetime | None = None
    payment_plan: str = Order.PLAN_FULL
    remaining_payment_method: str = ""
    remaining_payment_proof_url: str = ""
    denial_reason: str = ""
    gcash_number: str = ""
    accepted_at: dt.datetime | None = None
    subtotal_cents: int = 0
    platform_fee_cents: int = 0
    delivery_fee_cents: int = 0
    discount_cents: int = 0
    total_cents: int = 0
    items: tuple[ItemSnapshot, ...] = ()

    @property
    def is_final(self) -> bool:
        return self.status in FINAL_STATUSES

    @property
    def is_preorder(self) -> bool:
        return self.order_type == Order.TYPE_PREORDER


@dataclass(frozen=True, slots=True)
class Context:
    now: dt.datetime
    tz: ZoneInfo
    restaurant_name: str = ""
    # identity the refund notice is sent as
    owner_id: Any = None


@dataclass(frozen=True, slots=True)
class ChatNotice:
    sender_id: Any
    sender_name: str
    sender_role: str
    message: str


@dataclass(frozen=True, slots=True)
class AuditEntry:
    modification_type: str
    previous_value: dict[str, Any] | None
    new_value: dict[str, Any] | None
    item_details: str
    actor_id: Any
    actor_name: str


Event = Union[ChatNotice, AuditEntry]


@dataclass(frozen=True, slots=True)
class Transition:
    changes: dict[str, Any] = field(default_factory=dict)
    events: tuple[Event, ...] = ()

    @property
    def is_noop(self) -> bool:
        return not self.changes and not self.events


@dataclass(frozen=True, slots=True)
class OwnerRequest:
    status: str | None = None
    denial_reason: str | None = None
    scheduled_at: Any = UNSET
    allow_chat: bool | None = None
    allow_customer_images: bool | None = None


@dataclass(frozen=True, slots=True)
class CustomerRequest:
    status: str | None = None
    remaining_payment_proof_url: str | None = None


def _owner_notice(actor: Actor, ctx: Context, message: str) -> ChatNotice:
    return ChatNotice(
        sender_id=actor.id,
        sender_name=ctx.restaurant_name or actor.name,
        sender_role=ROLE_OWNER,
        message=message,
    )


def _iso(value: dt.datetime | None) -> str | None:
    return value.isoformat() if value else None


def _status_events(state: OrderState, actor: Actor, new: str, ctx: Context, denial_reason: str) -> tuple[Event, ...]:
    prompt_balance = (
        state.payment_plan == Order.PLAN_DOWNPAYMENT
        and state.remaining_payment_method == Order.REMAINING_ONLINE
        and not state.remaining_payment_proof_url
    )
    message = emitter.status_message(
        state.status,
        new,
        first_acceptance=state.accepted_at is None,
        denial_reason=denial_reason,
        prompt_remaining_balance=prompt_balance,
    )
    audit = AuditEntry(
        modification_type=OrderModification.TYPE_STATUS_CHANGED,
        previous_value={"status": state.status},
        new_value={"status": new},
        item_details=emitter.status_audit_summary(state.status, new),
        actor_id=actor.id,
        actor_name=actor.name,
    )
    return (_owner_notice(actor, ctx, message), audit)


def owner_update(state: OrderState, actor: Actor, req: OwnerRequest, ctx: Context) -> Transition:
    if actor.role != ROLE_OWNER:
        raise Unauthorized()
    touches_order = req.status is not None or req.scheduled_at is not UNSET or req.denial_reason is not None
    if touches_order and state.is_final:
        raise OrderFinal()
    if req.status is not None and req.status not in STATUSES:
        raise InvalidRequest(f"Unknown status '{req.status}'.")

    changes: dict[str, Any] = {}
    events: list[Event] = []

    if req.allow_chat is not None:
        changes["allow_chat"] = bool(req.allow_chat)
    if req.allow_customer_images is not None:
        changes["allow_customer_images"] = bool(req.allow_customer_images)

    denial_reason = state.denial_reason
    if req.denial_reason is not None:
        denial_reason = req.denial_reason.strip()
        changes["denial_reason"] = denial_reason

    if req.scheduled_at is not UNSET:
        schedule = schedule_change(state, actor, req.scheduled_at, ctx)
        changes.update(schedule.changes)
        events.extend(schedule.events)

    if req.status is not None and req.status != state.status:
        changes["status"] = req.status
        changes["status_changed_at"] = ctx.now
        if req.status == Order.STATUS_ACCEPTED and state.accepted_at is None:
            changes["accepted_at"] = ctx.now
        events.extend(_status_events(state, actor, req.status, ctx, denial_reason))

    return Transition(changes=changes, events=tuple(events))


def schedule_change(state: OrderState, actor: Actor, scheduled_at: dt.datetime | None, ctx: Context) -> Transition:
    if state.is_final:
        raise OrderFinal()
    if not state.is_preorder:
        raise InvalidRequest("Only pre-orders have a schedule.")
    if scheduled_at is not None and scheduled_at <= ctx.now:
        raise InvalidSchedule()
    if scheduled_at == state.pre_order_scheduled_at:
        return Transition()
    local = scheduled_at.astimezone(ctx.tz) if scheduled_at else None
    previous_local = state.pre_order_scheduled_at.astimezone(ctx.tz) if state.pre_order_scheduled_at else None
    details = "Pre-order schedule changed from {} to {}".format(
        f"{previous_local:%Y-%m-%d %H:%M}" if previous_local else "unset",
        f"{local:%Y-%m-%d %H:%M}" if local else "unset",
    )
    return Transition(
        changes={"pre_order_scheduled_at": scheduled_at},
        events=(
            AuditEntry(
                modification_type=OrderModification.TYPE_ORDER_EDITED,
                previous_value={"pre_order_scheduled_at": _iso(state.pre_order_scheduled_at)},
                new_value={"pre_order_scheduled_at": _iso(scheduled_at)},
                item_details=details,
                actor_id=actor.id,
                actor_name=actor.name,
            ),
            _owner_notice(actor, ctx, emitter.schedule_message(local)),
        ),
    )


def customer_update(state: OrderState, actor: Actor, req: CustomerRequest, ctx: Context) -> Transition:
    if actor.role != ROLE_CUSTOMER or actor.id != state.customer_id:
        raise Unauthorized()
    if req.status is not None:
        if req.remaining_payment_proof_url is not None:
            raise Unauthorized()
        return _customer_cancel(state, actor, req.status, ctx)
    if req.remaining_payment_proof_url is not None:
        return Transition(changes={"remaining_payment_proof_url": req.remaining_payment_proof_url})
    raise Unauthorized()


def _customer_cancel(state: OrderState, actor: Actor, status: str, ctx: Context) -> Transition:
    if state.is_final:
        raise OrderFinal()
    if status != Order.STATUS_CANCELLED:
        raise Unauthorized()
    allowed = PREORDER_CANCELLABLE if state.is_preorder else CANCELLABLE
    if state.status not in allowed:
        raise Unauthorized()
    if state.is_preorder and state.pre_order_scheduled_at is not None:
        if state.pre_order_scheduled_at - ctx.now < CANCELLATION_NOTICE:
            raise CancellationWindowClosed()
    return Transition(
        changes={"status": Order.STATUS_CANCELLED, "status_changed_at": ctx.now},
        events=(
            ChatNotice(
                sender_id=actor.id,
                sender_name=actor.name,
                sender_role=ROLE_CUSTOMER,
                message=emitter.CUSTOMER_CANCELLED,
            ),
            ChatNotice(
                sender_id=ctx.owner_id,
                sender_name=ctx.restaurant_name,
                sender_role=ROLE_OWNER,
                message=emitter.refund_notice(state.gcash_number),
            ),
            AuditEntry(
                modification_type=OrderModification.TYPE_STATUS_CHANGED,
                previous_value={"status": state.status},
                new_value={"status": Order.STATUS_CANCELLED},
                item_details=emitter.status_audit_summary(state.status, Order.STATUS_CANCELLED),
                actor_id=actor.id,
                actor_name=actor.name,
            ),
        ),
    )


@dataclass(frozen=True, slots=True)
class ItemChanges:
    added: tuple[ItemSnapshot, ...] = ()
    removed: tuple[ItemSnapshot, ...] = ()
    # (before, after) pairs for lines present on both sides
    kept: tuple[tuple[ItemSnapshot, ItemSnapshot], ...] = ()

    @property
    def requantified(self) -> list[tuple[ItemSnapshot, ItemSnapshot]]:
        return [(old, cur) for old, cur in self.kept if old.quantity != cur.quantity]

    @property
    def repriced(self) -> list[tuple[ItemSnapshot, ItemSnapshot]]:
        return [(old, cur) for old, cur in self.kept if old.unit_price_cents != cur.unit_price_cents]


def diff_items(previous: tuple[ItemSnapshot, ...], new: tuple[ItemSnapshot, ...]) -> ItemChanges:
    """Match lines as a multiset: the same item may sit on several lines.

    Identical lines (key and quantity) pair up first, then the remaining
    lines with a shared key pair in order as quantity changes.
    """
    unmatched = list(previous)
    pending: list[ItemSnapshot] = []
    kept: list[tuple[ItemSnapshot, ItemSnapshot]] = []
    for item in new:
        old = next((o for o in unmatched if o.key == item.key and o.quantity == item.quantity), None)
        if old is None:
            pending.append(item)
            continue
        unmatched.remove(old)
        kept.append((old, item))
    added = []
    for item in pending:
        old = next((o for o in unmatched if o.key == item.key), None)
        if old is None:
            added.append(item)
            continue
        unmatched.remove(old)
        kept.append((old, item))
    return ItemChanges(added=tuple(added), removed=tuple(unmatched), kept=tuple(kept))


def summarize_item_changes(previous: tuple[ItemSnapshot, ...], new: tuple[ItemSnapshot, ...]) -> str:
    changes = diff_items(previous, new)
    parts = []
    if changes.added:
        parts.append("added: " + ", ".join(f"{i.name} x{i.quantity}" for i in changes.added))
    if changes.removed:
        parts.append("removed: " + ", ".join(i.name for i in changes.removed))
    if changes.requantified:
        parts.append(
            "qty: " + ", ".join(f"{cur.name} {old.quantity}→{cur.quantity}" for old, cur in changes.requantified)
        )
    return "; ".join(parts) or "items updated"


def infer_modification_type(previous: tuple[ItemSnapshot, ...], new: tuple[ItemSnapshot, ...]) -> str:
    changes = diff_items(previous, new)
    kinds = [
        (changes.added, OrderModification.TYPE_ITEM_ADDED),
        (changes.removed, OrderModification.TYPE_ITEM_REMOVED),
        (changes.requantified, OrderModification.TYPE_ITEM_QUANTITY_CHANGED),
        (changes.repriced, OrderModification.TYPE_ITEM_PRICE_CHANGED),
    ]
    present = [kind for found, kind in kinds if found]
    return present[0] if len(present) == 1 else OrderModification.TYPE_ORDER_EDITED


def ensure_items_editable(state: OrderState) -> None:
    if state.is_final:
        raise OrderFinal()
    if state.status in ITEM_LOCKED_STATUSES:
        raise OrderNotEditable()


def _items_value(items: tuple[ItemSnapshot, ...], subtotal: int, total: int) -> dict[str, Any]:
    return {"items": [i.as_dict() for i in items], "subtotal_cents": subtotal, "total_cents": total}


def edit_items(
    state: OrderState,
    actor: Actor,
    new_items: tuple[ItemSnapshot, ...],
    ctx: Context,
    *,
    modification_type: str | None = None,
    note: str = "",
) -> Transition:
    """Replace the order's lines. Fees and discount are carried over unchanged."""
    if actor.role != ROLE_OWNER:
        raise Unauthorized()
    ensure_items_editable(state)
    if not new_items:
        raise InvalidRequest("Order must have at least one item.")
    if modification_type is None:
        modification_type = infer_modification_type(state.items, new_items)
    elif modification_type not in ITEM_MODIFICATION_TYPES:
        raise InvalidRequest(f"Unknown modification type '{modification_type}'.")

    subtotal = sum(i.line_total_cents for i in new_items)
    total = subtotal + state.platform_fee_cents + state.delivery_fee_cents - state.discount_cents
    summary = summarize_item_changes(state.items, new_items)
    return Transition(
        changes={"subtotal_cents": subtotal, "total_cents": total},
        events=(
            AuditEntry(
                modification_type=modification_type,
                previous_value=_items_value(state.items, state.subtotal_cents, state.total_cents),
                new_value=_items_value(new_items, subtotal, total),
                item_details=(note or "").strip()[:500] or summary,
                actor_id=actor.id,
                actor_name=actor.name,
            ),
            _owner_notice(actor, ctx, emitter.items_updated_message(summary, total)),
        ),
    )
