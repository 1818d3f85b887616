import datetime as dt

import pytest
from django.urls import reverse
from django.utils import timezone

from apps.common.errors import InvalidVoucher, MinOrderNotMet, VoucherExhausted, VoucherExpired
from apps.vouchers import services
from apps.vouchers.models import Voucher


@pytest.mark.django_db
def test_percentage_discount_is_capped(voucher):
    assert services.compute_discount(voucher, 100000) == 5000
    assert services.compute_discount(voucher, 1000) == 100


@pytest.mark.django_db
def test_percentage_discount_rounds_half_up(voucher):
    voucher.max_discount_cents = None
    assert services.compute_discount(voucher, 1005) == 101


@pytest.mark.django_db
def test_fixed_discount_is_the_value():
    v = Voucher(code="FLAT", type=Voucher.TYPE_FIXED, value=2500, usage_limit=1, expires_at=timezone.now())
    assert services.compute_discount(v, 1000) == 2500


@pytest.mark.django_db
def test_code_lookup_is_case_insensitive(voucher):
    assert services.get_voucher_by_code("  save10 ") == voucher


@pytest.mark.django_db
def test_check_order(voucher):
    now = timezone.now()
    with pytest.raises(InvalidVoucher):
        services.check_voucher(None, 1000, now=now)

    voucher.active = False
    with pytest.raises(InvalidVoucher):
        services.check_voucher(voucher, 1000, now=now)

    voucher.active = True
    voucher.expires_at = now - dt.timedelta(minutes=1)
    voucher.usage_count = voucher.usage_limit
    with pytest.raises(VoucherExpired):
        services.check_voucher(voucher, 1000, now=now)

    voucher.expires_at = now + dt.timedelta(days=1)
    with pytest.raises(VoucherExhausted):
        services.check_voucher(voucher, 1000, now=now)

    voucher.usage_count = 0
    voucher.min_order_cents = 50000
    with pytest.raises(MinOrderNotMet):
        services.check_voucher(voucher, 1000, now=now)


@pytest.mark.django_db
def test_voucher_is_valid_up_to_its_expiry_instant(voucher):
    now = timezone.now()
    voucher.expires_at = now
    assert services.check_voucher(voucher, 1000, now=now) is voucher
    with pytest.raises(VoucherExpired):
        services.check_voucher(voucher, 1000, now=now + dt.timedelta(microseconds=1))


@pytest.mark.django_db
def test_increment_stops_at_limit(voucher):
    for _ in range(voucher.usage_limit):
        services.increment_usage(voucher.pk)
    with pytest.raises(VoucherExhausted):
        services.increment_usage(voucher.pk)
    voucher.refresh_from_db()
    assert voucher.usage_count == voucher.usage_limit


@pytest.mark.django_db
def test_validate_endpoint_previews_without_using(client, customer, voucher):
    client.force_login(customer)
    resp = client.get(reverse("vouchers:validate"), {"code": "save10", "amount_cents": 1000})
    assert resp.status_code == 200
    assert resp.json() == {"valid": True, "code": "SAVE10", "discount_cents": 100}
    voucher.refresh_from_db()
    assert voucher.usage_count == 0


@pytest.mark.django_db
def test_validate_endpoint_reports_kind(client, customer):
    client.force_login(customer)
    resp = client.get(reverse("vouchers:validate"), {"code": "NOPE", "amount_cents": 1000})
    assert resp.status_code == 400
    assert resp.json()["error"] == "InvalidVoucher"
