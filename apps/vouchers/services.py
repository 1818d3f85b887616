from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import datetime
from decimal import Decimal

from django.db.models import F
from django.utils import timezone

from apps.common.errors import InvalidVoucher, MinOrderNotMet, VoucherExhausted, VoucherExpired
from apps.common.money import round_cents

from .models import Voucher


log = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class VoucherPreview:
    code: str
    discount_cents: int


def normalize_code(code: str | None) -> str:
    return (code or "").strip().upper()


def get_voucher_by_code(code: str | None, *, for_update: bool = False) -> Voucher | None:
    normalized = normalize_code(code)
    if not normalized:
        return None
    qs = Voucher.objects.all()
    if for_update:
        qs = qs.select_for_update()
    return qs.filter(code=normalized).first()


def compute_discount(voucher: Voucher, subtotal_cents: int) -> int:
    if voucher.type == Voucher.TYPE_FIXED:
        return int(voucher.value)
    discount = round_cents(Decimal(subtotal_cents) * Decimal(voucher.value) / Decimal(100))
    if voucher.max_discount_cents is not None and discount > voucher.max_discount_cents:
        discount = int(voucher.max_discount_cents)
    return discount


def check_voucher(voucher: Voucher | None, subtotal_cents: int, *, now: datetime | None = None) -> Voucher:
    """Raise the matching voucher error, in lookup order, or return the voucher."""
    now = now or timezone.now()
    if voucher is None or not voucher.active:
        raise InvalidVoucher()
    if voucher.expires_at < now:
        raise VoucherExpired()
    if voucher.usage_count >= voucher.usage_limit:
        raise VoucherExhausted()
    if subtotal_cents < voucher.min_order_cents:
        raise MinOrderNotMet()
    return voucher


def increment_usage(voucher_id) -> None:
    """Take one use of the voucher, or raise VoucherExhausted if none is left.

    The guard lives in the UPDATE itself, so two orders racing for the last
    use cannot both succeed.
    """
    updated = Voucher.objects.filter(pk=voucher_id, usage_count__lt=F("usage_limit")).update(
        usage_count=F("usage_count") + 1, updated_at=timezone.now()
    )
    if not updated:
        log.info("[vouchers] exhausted on increment voucher=%s", voucher_id)
        raise VoucherExhausted()


def preview(code: str | None, subtotal_cents: int) -> VoucherPreview:
    voucher = check_voucher(get_voucher_by_code(code), subtotal_cents)
    return VoucherPreview(code=voucher.code, discount_cents=compute_discount(voucher, subtotal_cents))
