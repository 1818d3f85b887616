import datetime as dt

import pytest
from django.contrib.auth import get_user_model
from django.core.cache import cache
from django.utils import timezone

from apps.catalog.models import BundleComponent, Choice, ChoiceGroup, MenuItem, MenuItemVariant
from apps.restaurant.models import Restaurant
from apps.vouchers.models import Voucher


@pytest.fixture(autouse=True)
def _clear_cache():
    cache.clear()
    yield
    cache.clear()


@pytest.fixture(autouse=True)
def _no_routing(monkeypatch):
    # tests opt into a distance with the `route` fixture
    monkeypatch.setattr("apps.orders.routing.route_distance", lambda origin, dest: None)


@pytest.fixture
def route(monkeypatch):
    def _set(meters):
        monkeypatch.setattr("apps.orders.routing.route_distance", lambda origin, dest: meters)

    return _set


@pytest.fixture
def owner(db):
    User = get_user_model()
    return User.objects.create_user(
        username="owner", password="x", role=User.ROLE_OWNER, display_name="Maria"
    )


@pytest.fixture
def customer(db):
    User = get_user_model()
    return User.objects.create_user(
        username="juan",
        password="x",
        role=User.ROLE_CUSTOMER,
        display_name="Juan",
        phone="09171234567",
        gcash_number="9171234567",
    )


@pytest.fixture
def other_customer(db):
    User = get_user_model()
    return User.objects.create_user(username="ana", password="x", role=User.ROLE_CUSTOMER, display_name="Ana")


@pytest.fixture
def restaurant(db):
    return Restaurant.objects.create(
        name="Kusina",
        timezone="Asia/Manila",
        opening_time=dt.time(9, 0),
        closing_time=dt.time(21, 0),
        latitude=14.5995,
        longitude=120.9842,
        fee_per_km_cents=1500,
    )


@pytest.fixture
def pizza(db):
    return MenuItem.objects.create(name="Pizza", category="Mains", price_cents=35000)


@pytest.fixture
def soda(db):
    return MenuItem.objects.create(name="Soda", category="Drinks", price_cents=5000)


@pytest.fixture
def burger(db):
    item = MenuItem.objects.create(name="Burger", category="Mains", price_cents=15000)
    MenuItemVariant.objects.create(menu_item=item, name="Double", price_cents=22000)
    return item


@pytest.fixture
def sauce_group(pizza):
    group = ChoiceGroup.objects.create(menu_item=pizza, name="Extra", order=1)
    Choice.objects.create(group=group, name="Cheese", price_cents=2500)
    return group


@pytest.fixture
def combo(soda):
    fries = MenuItem.objects.create(name="Fries", category="Sides", price_cents=6000)
    bundle = MenuItem.objects.create(name="Combo", category="Bundles", price_cents=20000, is_bundle=True)
    BundleComponent.objects.create(bundle=bundle, component=fries)
    group = ChoiceGroup.objects.create(menu_item=bundle, name="Drink")
    Choice.objects.create(group=group, name="Soda", price_cents=0, menu_item=soda)
    return bundle


@pytest.fixture
def voucher(db):
    return Voucher.objects.create(
        code="SAVE10",
        type=Voucher.TYPE_PERCENTAGE,
        value=10,
        max_discount_cents=5000,
        min_order_cents=0,
        usage_limit=3,
        expires_at=timezone.now() + dt.timedelta(days=30),
    )


def line(item, quantity=1, **extra):
    return {"menu_item_id": str(item.pk), "quantity": quantity, **extra}


def order_payload(items, *, subtotal, total=None, **extra):
    payload = {
        "order_type": "takeaway",
        "items": items,
        "subtotal_cents": subtotal,
        "platform_fee_cents": 0,
        "delivery_fee_cents": 0,
        "discount_cents": 0,
        "total_cents": subtotal if total is None else total,
    }
    payload.update(extra)
    return payload


@pytest.fixture
def place_order(customer, restaurant):
    from apps.orders import services

    def _place(items, *, subtotal, user=None, now=None, **extra):
        return services.create_order(user or customer, order_payload(items, subtotal=subtotal, **extra), now=now)

    return _place
