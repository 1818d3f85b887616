import datetime as dt
from zoneinfo import ZoneInfo

import pytest
from django.utils import timezone

from apps.chat.models import ChatMessage
from apps.common.errors import (
    AmountMismatch,
    InvalidCoordinates,
    InvalidRequest,
    InvalidSchedule,
    OrderingUnavailable,
    Unauthorized,
    VoucherExhausted,
)
from apps.orders import services
from apps.orders.models import Order, OrderItem
from apps.restaurant.models import PreorderWindow
from apps.vouchers.models import Voucher

from conftest import line, order_payload

MANILA = ZoneInfo("Asia/Manila")
COORDS = {"lat": 14.6095, "lng": 120.9942}


@pytest.mark.django_db
def test_takeaway_order_is_priced_and_welcomed(place_order, pizza, soda, owner):
    order = place_order([line(pizza), line(soda, 2)], subtotal=45000)
    assert order.status == Order.STATUS_PENDING
    assert order.total_cents == 45000
    assert order.items.count() == 2
    assert len(order.public_code) == 6
    (welcome,) = ChatMessage.objects.filter(order=order)
    assert welcome.sender_role == "owner"
    assert welcome.sender_id == owner.pk
    assert welcome.message.endswith(f"Order #{order.public_code}")


@pytest.mark.django_db
def test_amount_mismatch_persists_nothing(place_order, pizza, voucher):
    with pytest.raises(AmountMismatch):
        place_order([line(pizza)], subtotal=30000, voucher_code="SAVE10", discount_cents=3000)
    assert Order.objects.count() == 0
    assert OrderItem.objects.count() == 0
    assert ChatMessage.objects.count() == 0
    voucher.refresh_from_db()
    assert voucher.usage_count == 0


@pytest.mark.django_db
def test_voucher_discount_and_usage(place_order, pizza, voucher):
    order = place_order(
        [line(pizza)], subtotal=35000, voucher_code="save10", discount_cents=3500, total=31500
    )
    assert order.discount_cents == 3500
    assert order.voucher_code == "SAVE10"
    voucher.refresh_from_db()
    assert voucher.usage_count == 1


@pytest.mark.django_db
def test_exhausted_voucher_rejects_order(place_order, pizza, voucher):
    Voucher.objects.filter(pk=voucher.pk).update(usage_count=voucher.usage_limit)
    with pytest.raises(VoucherExhausted):
        place_order([line(pizza)], subtotal=35000, voucher_code="SAVE10", discount_cents=3500, total=31500)
    assert Order.objects.count() == 0


@pytest.mark.django_db
def test_platform_fee_is_added(place_order, pizza, restaurant):
    restaurant.platform_fee_cents = 1000
    restaurant.platform_fee_enabled = True
    restaurant.save()
    order = place_order([line(pizza)], subtotal=35000, platform_fee_cents=1000, total=36000)
    assert order.platform_fee_cents == 1000
    assert order.total_cents == 36000


@pytest.mark.django_db
def test_delivery_uses_routed_fee(place_order, pizza, route):
    route(1500)
    order = place_order(
        [line(pizza)],
        subtotal=35000,
        order_type="delivery",
        customer_coordinates=COORDS,
        delivery_fee_cents=2750,
        total=37750,
    )
    assert order.delivery_fee_cents == 2750
    assert order.delivery_fee_source == "routed"
    assert order.customer_lat == COORDS["lat"]


@pytest.mark.django_db
def test_delivery_falls_back_to_client_fee(place_order, pizza):
    order = place_order(
        [line(pizza)],
        subtotal=35000,
        order_type="delivery",
        customer_coordinates=COORDS,
        delivery_fee_cents=4000,
        total=39000,
    )
    assert order.delivery_fee_cents == 4000
    assert order.delivery_fee_source == "fallback"


@pytest.mark.django_db
def test_delivery_needs_coordinates(place_order, pizza):
    with pytest.raises(InvalidCoordinates):
        place_order([line(pizza)], subtotal=35000, order_type="delivery", customer_coordinates={"lat": 0, "lng": 0})


@pytest.mark.django_db
def test_owner_cannot_order(owner, restaurant, pizza):
    with pytest.raises(Unauthorized):
        services.create_order(owner, order_payload([line(pizza)], subtotal=35000))


@pytest.mark.django_db
def test_closed_restaurant(place_order, pizza, restaurant):
    restaurant.allow_new_orders = False
    restaurant.save()
    with pytest.raises(OrderingUnavailable):
        place_order([line(pizza)], subtotal=35000)


@pytest.mark.django_db
def test_long_instructions_rejected(place_order, pizza):
    with pytest.raises(InvalidRequest):
        place_order([line(pizza)], subtotal=35000, special_instructions="x" * 101)


@pytest.mark.django_db
def test_downpayment_cannot_exceed_total(place_order, pizza):
    with pytest.raises(InvalidRequest):
        place_order(
            [line(pizza)],
            subtotal=35000,
            payment_plan="downpayment",
            remaining_payment_method="cash",
            downpayment_cents=40000,
        )


@pytest.mark.django_db
def test_preorder_in_the_past_is_rejected(place_order, pizza):
    now = timezone.now()
    with pytest.raises(InvalidSchedule):
        place_order(
            [line(pizza)],
            subtotal=35000,
            now=now,
            order_type="pre-order",
            pre_order_fulfillment="pickup",
            pre_order_scheduled_at=(now - dt.timedelta(hours=1)).isoformat(),
        )


@pytest.mark.django_db
def test_preorder_window_restrictions(place_order, pizza, restaurant):
    now = timezone.now()
    when = (now + dt.timedelta(days=3)).astimezone(MANILA).replace(hour=12, minute=0, second=0, microsecond=0)
    restaurant.preorder_restrictions_enabled = True
    restaurant.save()
    payload = dict(order_type="pre-order", pre_order_fulfillment="pickup", pre_order_scheduled_at=when.isoformat())
    with pytest.raises(InvalidSchedule):
        place_order([line(pizza)], subtotal=35000, now=now, **payload)

    PreorderWindow.objects.create(
        restaurant=restaurant, date=when.date(), start_time=dt.time(10, 0), end_time=dt.time(14, 0)
    )
    order = place_order([line(pizza)], subtotal=35000, now=now, **payload)
    assert order.status == Order.STATUS_PREORDER_PENDING
    assert order.pre_order_scheduled_at == when
