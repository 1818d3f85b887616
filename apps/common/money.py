from decimal import ROUND_HALF_UP, Decimal

from django.conf import settings


def round_cents(value: Decimal) -> int:
    return int(value.quantize(Decimal("1"), rounding=ROUND_HALF_UP))


def format_cents(value: int | None) -> str:
    symbol = getattr(settings, "CURRENCY_SYMBOL", "₱")
    cents = int(value or 0)
    sign = "-" if cents < 0 else ""
    amount = Decimal(abs(cents)) / Decimal(100)
    return f"{sign}{symbol}{amount:,.2f}"
