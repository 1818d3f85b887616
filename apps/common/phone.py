import phonenumbers
from django.conf import settings


def to_e164(raw: str, default_region: str | None = None) -> str:
    region = default_region or getattr(settings, "PHONE_DEFAULT_REGION", "PH")
    try:
        n = phonenumbers.parse(raw, region)
    except phonenumbers.NumberParseException:
        raise ValueError("Invalid phone number")
    if not phonenumbers.is_valid_number(n):
        raise ValueError("Invalid phone number")
    return phonenumbers.format_number(n, phonenumbers.PhoneNumberFormat.E164)


def normalize_or_blank(raw: str | None) -> str:
    """Best-effort E.164 for snapshots; keeps the raw text when it cannot be parsed."""
    raw = (raw or "").strip()
    if not raw:
        return ""
    try:
        return to_e164(raw)
    except ValueError:
        return raw


def last4_digits(phone: str) -> str:
    digits = "".join(ch for ch in (phone or "") if ch.isdigit())
    return digits[-4:] if digits else ""
