import datetime as dt

import pytest
from django.core.files.base import ContentFile
from django.core.files.storage import default_storage
from django.utils import timezone

from apps.chat.models import ChatMessage
from apps.common.errors import InvalidPaymentProof, NotFound, OrderFinal, OrderNotEditable, Unauthorized
from apps.orders import pricing, services
from apps.orders.models import Order, OrderModification

from conftest import line


@pytest.fixture
def order(place_order, pizza, owner):
    return place_order([line(pizza)], subtotal=35000)


def _notices(order):
    return list(ChatMessage.objects.filter(order=order).order_by("timestamp").values_list("message", flat=True))


@pytest.mark.django_db
def test_owner_accepts_order(order, owner):
    services.update_order_status(owner, order.pk, {"status": "accepted"})
    order.refresh_from_db()
    assert order.status == "accepted"
    assert order.accepted_at is not None
    assert _notices(order)[-1] == "Order now being prepared."
    (mod,) = OrderModification.objects.filter(order=order)
    assert mod.modification_type == "status_changed"
    assert mod.modified_by_id == owner.pk


@pytest.mark.django_db
def test_completed_order_rejects_status_but_allows_toggle(order, owner):
    services.update_order_status(owner, order.pk, {"status": "completed"})
    with pytest.raises(OrderFinal):
        services.update_order_status(owner, order.pk, {"status": "completed"})
    services.update_order_status(owner, order.pk, {"allow_chat": False})
    order.refresh_from_db()
    assert order.status == "completed"
    assert order.allow_chat is False


@pytest.mark.django_db
def test_customer_cancels_own_order(order, customer):
    services.update_order_status(customer, order.pk, {"status": "cancelled"})
    order.refresh_from_db()
    assert order.status == "cancelled"
    messages = _notices(order)
    assert "I have cancelled this order" in messages
    assert messages[-1].startswith("Your refund is on the way!")
    assert OrderModification.objects.filter(order=order, modified_by=customer).count() == 1


@pytest.mark.django_db
def test_other_customer_is_refused(order, other_customer):
    with pytest.raises(Unauthorized):
        services.update_order_status(other_customer, order.pk, {"status": "cancelled"})
    with pytest.raises(Unauthorized):
        services.get_order(other_customer, order.pk)


@pytest.mark.django_db
def test_customer_cannot_send_owner_fields(order, customer):
    with pytest.raises(Unauthorized):
        services.update_order_status(customer, order.pk, {"allow_chat": False})


@pytest.mark.django_db
def test_unknown_order(owner):
    with pytest.raises(NotFound):
        services.update_order_status(owner, "not-an-id", {"status": "accepted"})


@pytest.mark.django_db
def test_remaining_proof_resolves_storage_key(order, customer):
    name = default_storage.save("proofs/balance.png", ContentFile(b"png"))
    services.update_order_status(customer, order.pk, {"remaining_payment_proof": name})
    order.refresh_from_db()
    assert order.remaining_payment_proof_url == default_storage.url(name)
    assert order.status == "pending"


@pytest.mark.django_db
def test_remaining_proof_must_exist(order, customer):
    with pytest.raises(InvalidPaymentProof):
        services.update_order_status(customer, order.pk, {"remaining_payment_proof": "missing.png"})


@pytest.mark.django_db
def test_item_edit_on_accepted_order_fails(order, owner, soda):
    services.update_order_status(owner, order.pk, {"status": "accepted"})
    with pytest.raises(OrderNotEditable):
        services.update_order_items(owner, order.pk, [line(soda)])


@pytest.mark.django_db
def test_item_edit_writes_one_audit_and_one_message(place_order, soda, pizza, owner):
    order = place_order([line(soda)], subtotal=5000)
    before = ChatMessage.objects.filter(order=order).count()
    services.update_order_items(owner, order.pk, [line(soda), line(pizza)])
    order.refresh_from_db()
    assert order.subtotal_cents == 40000
    assert order.total_cents == 40000
    assert order.items.count() == 2
    (mod,) = OrderModification.objects.filter(order=order)
    assert mod.modification_type == "item_added"
    assert "added: Pizza x1" in mod.item_details
    assert ChatMessage.objects.filter(order=order).count() == before + 1
    assert "added: Pizza x1" in _notices(order)[-1]


@pytest.mark.django_db
def test_removing_a_pizza_with_extras_keeps_the_plain_one(place_order, pizza, sauce_group, owner):
    cheese = {str(sauce_group.pk): {"choice_id": str(sauce_group.choices.get().pk)}}
    order = place_order([line(pizza), line(pizza, selected_choices=cheese)], subtotal=72500)
    services.update_order_items(owner, order.pk, [line(pizza)])
    order.refresh_from_db()
    assert order.subtotal_cents == 35000
    (mod,) = OrderModification.objects.filter(order=order)
    assert mod.modification_type == "item_removed"
    assert mod.item_details == "removed: Pizza"


@pytest.mark.django_db
def test_stored_line_keys_match_priced_keys(place_order, pizza, sauce_group, combo):
    cheese = {str(sauce_group.pk): {"choice_id": str(sauce_group.choices.get().pk)}}
    items = [line(pizza), line(pizza, selected_choices=cheese), line(combo)]
    order = place_order(items, subtotal=92500)
    keys = [s.key for s in services.snapshot_items(order)]
    assert keys == [p.key for p in pricing.price_items(items)]
    assert len(set(keys)) == 3


@pytest.mark.django_db
def test_items_can_ride_along_with_status_update(order, owner, soda):
    services.update_order_status(owner, order.pk, {"items": [line(soda, 3)]})
    order.refresh_from_db()
    assert order.subtotal_cents == 15000
    assert [i.name for i in order.items.all()] == ["Soda"]


@pytest.mark.django_db
def test_customer_cannot_edit_items(order, customer, soda):
    with pytest.raises(Unauthorized):
        services.update_order_items(customer, order.pk, [line(soda)])


@pytest.mark.django_db
def test_preorder_reschedule(place_order, pizza, owner):
    now = timezone.now()
    order = place_order(
        [line(pizza)],
        subtotal=35000,
        now=now,
        order_type="pre-order",
        pre_order_fulfillment="pickup",
        pre_order_scheduled_at=(now + dt.timedelta(days=2)).isoformat(),
    )
    new_when = now + dt.timedelta(days=4)
    services.update_order_status(owner, order.pk, {"scheduled_at": new_when.isoformat()}, now=now)
    order.refresh_from_db()
    assert order.pre_order_scheduled_at == new_when
    assert OrderModification.objects.get(order=order).modification_type == "order_edited"


@pytest.mark.django_db
def test_history_is_newest_first_and_owner_only(order, owner, customer):
    services.update_order_status(owner, order.pk, {"status": "accepted"})
    services.update_order_status(owner, order.pk, {"status": "ready"})
    history = list(services.order_history(owner, order.pk))
    assert [h.new_value["status"] for h in history] == ["ready", "accepted"]
    with pytest.raises(Unauthorized):
        services.order_history(customer, order.pk)


@pytest.mark.django_db
def test_modifications_are_append_only(order, owner):
    services.update_order_status(owner, order.pk, {"status": "accepted"})
    mod = OrderModification.objects.get(order=order)
    mod.item_details = "rewritten"
    with pytest.raises(ValueError):
        mod.save()
    with pytest.raises(ValueError):
        mod.delete()
    with pytest.raises(ValueError):
        OrderModification.objects.filter(order=order).delete()


@pytest.mark.django_db
def test_list_orders_by_role(order, owner, customer, other_customer):
    assert [o.pk for o in services.list_orders(customer)] == [order.pk]
    assert list(services.list_orders(other_customer)) == []
    assert [o.pk for o in services.list_orders(owner, status="pending,accepted")] == [order.pk]
    assert list(services.list_orders(owner, status="completed")) == []
    assert Order.objects.count() == 1
