from __future__ import annotations

from typing import Any

from .delivery import DeliveryQuote
from .models import DenialReason, Order, OrderItem, OrderModification


def _iso(value) -> str | None:
    return value.isoformat() if value else None


def item_to_dict(item: OrderItem) -> dict[str, Any]:
    return {
        "id": str(item.id),
        "kind": item.kind,
        "menu_item_id": str(item.menu_item_id) if item.menu_item_id else None,
        "variant_id": str(item.variant_id) if item.variant_id else None,
        "name": item.name,
        "variant_name": item.variant_name,
        "quantity": item.quantity,
        "unit_price_cents": item.unit_price_cents,
        "line_total_cents": item.line_total_cents,
        "selected_choices": item.selected_choices,
        "bundle_items": item.bundle_items,
    }


def order_to_dict(order: Order) -> dict[str, Any]:
    return {
        "id": str(order.id),
        "public_code": order.public_code,
        "customer_id": str(order.customer_id),
        "order_type": order.order_type,
        "status": order.status,
        "status_label": order.get_status_display(),
        "pre_order_fulfillment": order.pre_order_fulfillment or None,
        "pre_order_scheduled_at": _iso(order.pre_order_scheduled_at),
        "customer_name": order.customer_name,
        "customer_phone": order.customer_phone,
        "customer_address": order.customer_address,
        "customer_coordinates": (
            {"lat": order.customer_lat, "lng": order.customer_lng} if order.customer_lat is not None else None
        ),
        "items": [item_to_dict(i) for i in order.items.all()],
        "subtotal_cents": order.subtotal_cents,
        "platform_fee_cents": order.platform_fee_cents,
        "delivery_fee_cents": order.delivery_fee_cents,
        "discount_cents": order.discount_cents,
        "total_cents": order.total_cents,
        "voucher_code": order.voucher_code or None,
        "payment_plan": order.payment_plan,
        "downpayment_cents": order.downpayment_cents,
        "downpayment_proof_url": order.downpayment_proof_url or None,
        "remaining_payment_method": order.remaining_payment_method or None,
        "remaining_payment_proof_url": order.remaining_payment_proof_url or None,
        "payment_screenshot_url": order.payment_screenshot_url or None,
        "special_instructions": order.special_instructions,
        "denial_reason": order.denial_reason or None,
        "allow_chat": order.allow_chat,
        "allow_customer_images": order.allow_customer_images,
        "created_at": _iso(order.created_at),
        "updated_at": _iso(order.updated_at),
    }


def modification_to_dict(mod: OrderModification) -> dict[str, Any]:
    return {
        "id": str(mod.id),
        "order_id": str(mod.order_id),
        "modified_by": str(mod.modified_by_id) if mod.modified_by_id else None,
        "modified_by_name": mod.modified_by_name,
        "modification_type": mod.modification_type,
        "previous_value": mod.previous_value,
        "new_value": mod.new_value,
        "item_details": mod.item_details,
        "timestamp": _iso(mod.created_at),
    }


def denial_reason_to_dict(reason: DenialReason) -> dict[str, Any]:
    return {"id": str(reason.id), "reason": reason.reason}


def quote_to_dict(quote: DeliveryQuote) -> dict[str, Any]:
    return {
        "delivery_fee_cents": quote.fee_cents,
        "source": quote.source,
        "distance_meters": quote.distance_meters,
    }
