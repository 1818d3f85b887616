import pytest
from django.urls import reverse

from apps.chat import services

from conftest import line


@pytest.fixture
def order(place_order, pizza, owner):
    return place_order([line(pizza)], subtotal=35000)


@pytest.mark.django_db
def test_unread_counts_messages_from_the_other_side(order, owner, customer):
    # the welcome message counts as unread for the customer
    assert services.total_unread(customer) == 1
    services.send_message(customer, order.pk, "hello")
    services.send_message(customer, order.pk, "anyone?")
    (summary,) = services.unread_summary(owner, [str(order.pk)])
    assert summary.unread_count == 2
    assert summary.last_message.message == "anyone?"
    assert services.total_unread(owner) == 2


@pytest.mark.django_db
def test_mark_read_uses_latest_message_timestamp(order, owner, customer):
    services.send_message(customer, order.pk, "hello")
    cursor = services.mark_as_read(owner, order.pk)
    latest = order.chat_messages.order_by("-timestamp").first()
    assert cursor.last_read_at == latest.timestamp
    assert services.total_unread(owner) == 0

    services.send_message(customer, order.pk, "again")
    assert services.total_unread(owner) == 1


@pytest.mark.django_db
def test_orders_the_caller_cannot_see_report_zero(order, other_customer):
    (summary,) = services.unread_summary(other_customer, [str(order.pk)])
    assert summary.unread_count == 0
    assert summary.last_message is None


@pytest.mark.django_db
def test_unread_endpoint(client, order, customer):
    client.force_login(customer)
    resp = client.get(reverse("chat:unread"), {"order_ids": f"{order.pk},not-an-id"})
    assert resp.status_code == 200
    data = resp.json()["orders"]
    assert data[0]["order_id"] == str(order.pk)
    assert data[0]["unread_count"] == 1
    assert data[1] == {"order_id": "not-an-id", "unread_count": 0, "last_message": None}

    client.post(reverse("chat:read", args=[order.pk]))
    assert client.get(reverse("chat:unread_total")).json() == {"unread": 0}
