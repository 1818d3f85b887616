"""Wording of every automatic chat message.

Pure functions only: callers decide *when* a message is due, this module
decides *what* it says.
"""
from __future__ import annotations

import datetime as dt
from typing import Final

from apps.common.money import format_cents

STATUS_LABELS: Final[dict[str, str]] = {
    "pre-order-pending": "Awaiting Restaurant Confirmation",
    "pending": "Pending",
    "accepted": "Preparing",
    "ready": "Ready",
    "denied": "Denied",
    "completed": "Completed",
    "cancelled": "Cancelled",
    "in-transit": "In Transit",
    "delivered": "Delivered",
}

CUSTOMER_CANCELLED: Final[str] = "I have cancelled this order"
NO_DENIAL_REASON: Final[str] = "No reason provided"


def status_label(status: str) -> str:
    return STATUS_LABELS.get(status, status)


def welcome_message(public_code: str, *, is_preorder: bool) -> str:
    if is_preorder:
        return f"Pre-order placed. We'll review and confirm your order soon. Order #{public_code}"
    return f"Order placed. We'll review and confirm your order soon. Order #{public_code}"


def status_message(
    previous: str,
    new: str,
    *,
    first_acceptance: bool = False,
    denial_reason: str = "",
    prompt_remaining_balance: bool = False,
) -> str:
    if previous == "pre-order-pending" and new == "pending":
        text = "Pre-order acknowledged. We'll notify you when it's being prepared."
        if prompt_remaining_balance:
            text += " Please upload proof of your remaining balance payment."
        return text
    if new == "accepted" and first_acceptance:
        return "Order now being prepared."
    if new == "ready":
        return "Your order is ready for pickup!"
    if new == "in-transit":
        return "Your order is on the way!"
    if new == "delivered":
        return "Your order has been delivered! Thank you for your order."
    if new == "completed":
        return "Your order has been completed! Thank you for your order."
    if new == "denied":
        reason = (denial_reason or "").strip() or NO_DENIAL_REASON
        return (
            "Your order was not approved. Please wait while a representative reviews it "
            f"and assists with the resolution. Reason: {reason}"
        )
    return f"Order status updated to: {status_label(new)}."


def status_audit_summary(previous: str, new: str) -> str:
    return f'Status changed from "{status_label(previous)}" to "{status_label(new)}"'


def refund_notice(gcash_number: str) -> str:
    number = (gcash_number or "").strip()
    return (
        "Your refund is on the way! It will be processed within 1-3 business days. "
        f"We'll send it to the GCash number you provided (+63) {number} and share a screenshot once completed."
    )


def items_updated_message(summary: str, total_cents: int) -> str:
    return f"Order items updated ({summary}). New total: {format_cents(total_cents)}"


def schedule_message(local_when: dt.datetime | None) -> str:
    if local_when is None:
        return "The scheduled date for your pre-order has been removed. We'll reach out to confirm a new schedule."
    return f"Your pre-order has been rescheduled to {local_when:%b %d, %Y at %I:%M %p}."
