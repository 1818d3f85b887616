"""Server-side pricing of candidate orders.

Client payloads only say *what* was ordered. Every amount is recomputed from
the catalog and the restaurant config; the client's own figures are used
solely to detect a stale cart (``verify_claims``).
"""
from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any, Union

from django.conf import settings

from apps.catalog import selectors
from apps.catalog.models import ChoiceGroup, MenuItem, MenuItemVariant
from apps.common.errors import (
    AmountMismatch,
    BundleItemUnavailable,
    ChoiceUnavailable,
    InvalidQuantity,
    InvalidRequest,
    ItemUnavailable,
    VariantUnavailable,
)
from apps.restaurant.config import RestaurantConfig

from .delivery import DeliveryQuote
from .models import OrderItem


log = logging.getLogger(__name__)

MAX_LINES = 50
MAX_QUANTITY = 999


@dataclass(frozen=True, slots=True)
class SelectedChoice:
    group_id: str
    choice_id: str
    name: str
    price_cents: int


@dataclass(frozen=True, slots=True)
class BundleSubItem:
    menu_item_id: str
    variant_id: str | None
    name: str
    price_cents: int


@dataclass(frozen=True, slots=True)
class SimpleLine:
    menu_item: MenuItem
    quantity: int
    choices: tuple[SelectedChoice, ...] = ()


@dataclass(frozen=True, slots=True)
class VariantLine:
    menu_item: MenuItem
    variant: MenuItemVariant
    quantity: int
    choices: tuple[SelectedChoice, ...] = ()


@dataclass(frozen=True, slots=True)
class BundleLine:
    menu_item: MenuItem
    quantity: int
    variant: MenuItemVariant | None = None
    choices: tuple[SelectedChoice, ...] = ()
    sub_items: tuple[BundleSubItem, ...] = ()


Line = Union[SimpleLine, VariantLine, BundleLine]


def line_key(menu_item_id, variant_id, choice_ids=(), sub_items=()) -> str:
    """Identity of an order line: item, variant, chosen options and bundle parts.

    ``sub_items`` are ``(menu_item_id, variant_id)`` pairs in bundle order.
    """
    choices = ",".join(sorted(str(c) for c in choice_ids))
    parts = ",".join(f"{m}/{v or ''}" for m, v in sub_items)
    return f"{menu_item_id}:{variant_id or ''}:{choices}:{parts}"


@dataclass(frozen=True, slots=True)
class PricedLine:
    line: Line
    unit_price_cents: int
    line_total_cents: int

    @property
    def key(self) -> str:
        variant = getattr(self.line, "variant", None)
        return line_key(
            self.line.menu_item.pk,
            variant.pk if variant else None,
            [c.choice_id for c in self.line.choices],
            [(s.menu_item_id, s.variant_id) for s in getattr(self.line, "sub_items", ())],
        )

    def as_item_fields(self) -> dict[str, Any]:
        line = self.line
        if isinstance(line, SimpleLine):
            kind, variant, bundle = OrderItem.KIND_SIMPLE, None, []
        elif isinstance(line, VariantLine):
            kind, variant, bundle = OrderItem.KIND_VARIANT, line.variant, []
        elif isinstance(line, BundleLine):
            kind, variant = OrderItem.KIND_BUNDLE, line.variant
            bundle = [
                {
                    "menu_item_id": s.menu_item_id,
                    "variant_id": s.variant_id,
                    "name": s.name,
                    "price_cents": s.price_cents,
                }
                for s in line.sub_items
            ]
        else:  # pragma: no cover
            raise TypeError(f"unknown line kind: {type(line).__name__}")
        return {
            "kind": kind,
            "menu_item": line.menu_item,
            "variant": variant,
            "name": line.menu_item.name,
            "variant_name": variant.name if variant else "",
            "quantity": line.quantity,
            "unit_price_cents": self.unit_price_cents,
            "line_total_cents": self.line_total_cents,
            "selected_choices": {
                c.group_id: {"choice_id": c.choice_id, "name": c.name, "price_cents": c.price_cents}
                for c in line.choices
            },
            "bundle_items": bundle,
        }


@dataclass(frozen=True, slots=True)
class Quote:
    lines: tuple[PricedLine, ...]
    subtotal_cents: int
    platform_fee_cents: int
    delivery: DeliveryQuote
    discount_cents: int

    @property
    def delivery_fee_cents(self) -> int:
        return self.delivery.fee_cents

    @property
    def total_cents(self) -> int:
        return self.subtotal_cents + self.platform_fee_cents + self.delivery_fee_cents - self.discount_cents


@dataclass(frozen=True, slots=True)
class ClaimedAmounts:
    subtotal_cents: int | None = None
    platform_fee_cents: int | None = None
    delivery_fee_cents: int | None = None
    discount_cents: int | None = None
    total_cents: int | None = None


@dataclass
class _CatalogScope:
    """Choice groups for one menu item, loaded once per line."""

    groups: dict[str, ChoiceGroup] = field(default_factory=dict)

    @classmethod
    def for_item(cls, menu_item: MenuItem) -> "_CatalogScope":
        return cls(groups={str(g.pk): g for g in selectors.get_choice_groups(menu_item.pk)})


def _parse_quantity(raw: Any) -> int:
    if isinstance(raw, bool):
        raise InvalidQuantity()
    if isinstance(raw, float):
        if not raw.is_integer():
            raise InvalidQuantity()
        raw = int(raw)
    if isinstance(raw, str) and raw.strip().isdigit():
        raw = int(raw.strip())
    if not isinstance(raw, int) or raw <= 0 or raw > MAX_QUANTITY:
        raise InvalidQuantity()
    return raw


def _choice_id(raw: Any) -> str:
    if isinstance(raw, dict):
        raw = raw.get("choice_id")
    if raw is None or raw == "":
        raise ChoiceUnavailable()
    return str(raw)


def _resolve_choices(raw: Any, scope: _CatalogScope) -> tuple[SelectedChoice, ...]:
    if not raw:
        return ()
    if not isinstance(raw, dict):
        raise InvalidRequest("'selected_choices' must map group ids to choices.")
    resolved = []
    for group_id, selection in raw.items():
        group = scope.groups.get(str(group_id))
        if group is None:
            raise ChoiceUnavailable()
        wanted = _choice_id(selection)
        choice = next((c for c in group.choices.all() if str(c.pk) == wanted), None)
        if choice is None or not choice.available:
            raise ChoiceUnavailable()
        resolved.append(
            SelectedChoice(group_id=str(group.pk), choice_id=str(choice.pk), name=choice.name, price_cents=choice.price_cents)
        )
    return tuple(resolved)


def _resolve_variant(menu_item: MenuItem, variant_id: Any) -> MenuItemVariant:
    variant = selectors.get_variant(variant_id)
    if variant is None or variant.menu_item_id != menu_item.pk or not variant.available:
        raise VariantUnavailable()
    return variant


def _allowed_bundle_parts(bundle: MenuItem, scope: _CatalogScope) -> set[str]:
    allowed = {str(c.component_id) for c in selectors.get_bundle_components(bundle.pk)}
    for group in scope.groups.values():
        allowed.update(str(c.menu_item_id) for c in group.choices.all() if c.menu_item_id)
    return allowed


def _resolve_sub_item(raw: Any, allowed: set[str]) -> BundleSubItem:
    if not isinstance(raw, dict):
        raise BundleItemUnavailable()
    item = selectors.get_menu_item(raw.get("menu_item_id"))
    if item is None or not item.available or str(item.pk) not in allowed:
        raise BundleItemUnavailable()
    price = item.price_cents
    variant_id = None
    if raw.get("variant_id"):
        variant = selectors.get_variant(raw.get("variant_id"))
        if variant is None or variant.menu_item_id != item.pk or not variant.available:
            raise BundleItemUnavailable()
        price = variant.price_cents
        variant_id = str(variant.pk)
    return BundleSubItem(menu_item_id=str(item.pk), variant_id=variant_id, name=item.name, price_cents=price)


def _default_sub_items(bundle: MenuItem) -> tuple[BundleSubItem, ...]:
    parts = []
    for comp in selectors.get_bundle_components(bundle.pk):
        if not comp.component.available:
            raise BundleItemUnavailable()
        price = comp.variant.price_cents if comp.variant else comp.component.price_cents
        parts.append(
            BundleSubItem(
                menu_item_id=str(comp.component_id),
                variant_id=str(comp.variant_id) if comp.variant_id else None,
                name=comp.component.name,
                price_cents=price,
            )
        )
    return tuple(parts)


def resolve_line(raw: Any) -> Line:
    """Validate one cart entry against the catalog and classify it."""
    if not isinstance(raw, dict):
        raise InvalidRequest("Each item must be an object.")
    menu_item = selectors.get_menu_item(raw.get("menu_item_id"))
    if menu_item is None or not menu_item.available:
        raise ItemUnavailable()
    quantity = _parse_quantity(raw.get("quantity"))
    scope = _CatalogScope.for_item(menu_item)
    variant = _resolve_variant(menu_item, raw["variant_id"]) if raw.get("variant_id") else None
    choices = _resolve_choices(raw.get("selected_choices"), scope)

    if menu_item.is_bundle:
        raw_parts = raw.get("bundle_items")
        if raw_parts:
            if not isinstance(raw_parts, list):
                raise BundleItemUnavailable()
            allowed = _allowed_bundle_parts(menu_item, scope)
            sub_items = tuple(_resolve_sub_item(p, allowed) for p in raw_parts)
        else:
            sub_items = _default_sub_items(menu_item)
        return BundleLine(menu_item=menu_item, quantity=quantity, variant=variant, choices=choices, sub_items=sub_items)
    if variant is not None:
        return VariantLine(menu_item=menu_item, variant=variant, quantity=quantity, choices=choices)
    return SimpleLine(menu_item=menu_item, quantity=quantity, choices=choices)


def unit_price(line: Line) -> int:
    adjustments = sum(c.price_cents for c in line.choices)
    if isinstance(line, SimpleLine):
        base = line.menu_item.price_cents
    elif isinstance(line, VariantLine):
        base = line.variant.price_cents
    elif isinstance(line, BundleLine):
        base = line.variant.price_cents if line.variant else line.menu_item.price_cents
    else:  # pragma: no cover
        raise TypeError(f"unknown line kind: {type(line).__name__}")
    return base + adjustments


def price_line(line: Line) -> PricedLine:
    unit = unit_price(line)
    return PricedLine(line=line, unit_price_cents=unit, line_total_cents=unit * line.quantity)


def price_items(raw_items: Any) -> tuple[PricedLine, ...]:
    if not isinstance(raw_items, list) or not raw_items:
        raise InvalidRequest("Order must have at least one item.")
    if len(raw_items) > MAX_LINES:
        raise InvalidRequest("Too many items in one order.")
    return tuple(price_line(resolve_line(raw)) for raw in raw_items)


def subtotal_of(lines: tuple[PricedLine, ...]) -> int:
    return sum(p.line_total_cents for p in lines)


def build_quote(
    lines: tuple[PricedLine, ...],
    config: RestaurantConfig,
    delivery: DeliveryQuote,
    *,
    discount_cents: int = 0,
) -> Quote:
    return Quote(
        lines=lines,
        subtotal_cents=subtotal_of(lines),
        platform_fee_cents=config.effective_platform_fee_cents,
        delivery=delivery,
        discount_cents=discount_cents,
    )


def _tolerances() -> tuple[int, int]:
    return (
        int(getattr(settings, "ORDER_AMOUNT_TOLERANCE_CENTS", 1)),
        int(getattr(settings, "DELIVERY_FEE_TOLERANCE_CENTS", 500)),
    )


def verify_claims(claimed: ClaimedAmounts, quote: Quote) -> None:
    """Raise AmountMismatch when any client figure drifts past tolerance.

    The error never carries the server value. A fallback delivery fee is the
    client's own number and is not checked; a routed one gets the wider
    tolerance, which also widens the total.
    """
    tolerance, delivery_tolerance = _tolerances()
    total_tolerance = tolerance
    checks: list[tuple[str, int | None, int, int]] = [
        ("subtotal", claimed.subtotal_cents, quote.subtotal_cents, tolerance),
        ("platform_fee", claimed.platform_fee_cents, quote.platform_fee_cents, tolerance),
        ("discount", claimed.discount_cents, quote.discount_cents, tolerance),
    ]
    if quote.delivery.is_routed:
        checks.append(("delivery_fee", claimed.delivery_fee_cents, quote.delivery_fee_cents, delivery_tolerance))
        total_tolerance = tolerance + delivery_tolerance
    elif not quote.delivery.is_fallback:
        checks.append(("delivery_fee", claimed.delivery_fee_cents, quote.delivery_fee_cents, tolerance))
    checks.append(("total", claimed.total_cents, quote.total_cents, total_tolerance))

    for name, claimed_value, server_value, allowed in checks:
        if claimed_value is None:
            if name in ("subtotal", "total"):
                raise InvalidRequest(f"'{name}_cents' is required.")
            continue
        if abs(claimed_value - server_value) > allowed:
            log.warning("[orders] amount mismatch field=%s", name)
            raise AmountMismatch()
