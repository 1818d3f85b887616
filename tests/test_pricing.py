import pytest

from apps.common.errors import (
    AmountMismatch,
    BundleItemUnavailable,
    ChoiceUnavailable,
    InvalidQuantity,
    InvalidRequest,
    ItemUnavailable,
    VariantUnavailable,
)
from apps.orders import pricing
from apps.orders.delivery import DeliveryQuote, NO_DELIVERY, SOURCE_FALLBACK, SOURCE_ROUTED
from apps.restaurant.config import RestaurantConfig

from conftest import line


@pytest.mark.django_db
def test_simple_line_with_choice(pizza, sauce_group):
    cheese = sauce_group.choices.get()
    lines = pricing.price_items(
        [line(pizza, 2, selected_choices={str(sauce_group.pk): {"choice_id": str(cheese.pk)}})]
    )
    (priced,) = lines
    assert isinstance(priced.line, pricing.SimpleLine)
    assert priced.unit_price_cents == 35000 + 2500
    assert priced.line_total_cents == 2 * 37500
    fields = priced.as_item_fields()
    assert fields["kind"] == "simple"
    assert fields["selected_choices"][str(sauce_group.pk)]["name"] == "Cheese"


@pytest.mark.django_db
def test_variant_price_replaces_base_price(burger):
    variant = burger.variants.get()
    (priced,) = pricing.price_items([line(burger, 1, variant_id=str(variant.pk))])
    assert isinstance(priced.line, pricing.VariantLine)
    assert priced.unit_price_cents == 22000


@pytest.mark.django_db
def test_bundle_uses_bundle_price_and_default_components(combo):
    (priced,) = pricing.price_items([line(combo, 1)])
    assert isinstance(priced.line, pricing.BundleLine)
    assert priced.unit_price_cents == 20000
    assert [s.name for s in priced.line.sub_items] == ["Fries"]


@pytest.mark.django_db
def test_bundle_accepts_choice_linked_sub_item(combo, soda):
    (priced,) = pricing.price_items([line(combo, 1, bundle_items=[{"menu_item_id": str(soda.pk)}])])
    assert priced.as_item_fields()["bundle_items"][0]["name"] == "Soda"


@pytest.mark.django_db
def test_bundle_rejects_unrelated_sub_item(combo, pizza):
    with pytest.raises(BundleItemUnavailable):
        pricing.price_items([line(combo, 1, bundle_items=[{"menu_item_id": str(pizza.pk)}])])


@pytest.mark.django_db
def test_unavailable_item_is_rejected(pizza):
    pizza.available = False
    pizza.save()
    with pytest.raises(ItemUnavailable):
        pricing.price_items([line(pizza)])


@pytest.mark.django_db
def test_unknown_ids_are_rejected(pizza, burger):
    with pytest.raises(ItemUnavailable):
        pricing.price_items([{"menu_item_id": "not-a-uuid", "quantity": 1}])
    with pytest.raises(VariantUnavailable):
        pricing.price_items([line(pizza, 1, variant_id=str(burger.variants.get().pk))])
    with pytest.raises(ChoiceUnavailable):
        pricing.price_items([line(pizza, 1, selected_choices={"nope": "nope"})])


@pytest.mark.django_db
@pytest.mark.parametrize("quantity", [0, -1, 1.5, "abc", True, None])
def test_invalid_quantity(pizza, quantity):
    with pytest.raises(InvalidQuantity):
        pricing.price_items([line(pizza, quantity)])


@pytest.mark.django_db
def test_empty_cart_is_invalid():
    with pytest.raises(InvalidRequest):
        pricing.price_items([])


@pytest.mark.django_db
def test_total_formula(pizza, soda):
    lines = pricing.price_items([line(pizza, 1), line(soda, 2)])
    config = RestaurantConfig(platform_fee_cents=1000, platform_fee_enabled=True)
    quote = pricing.build_quote(lines, config, DeliveryQuote(2750, SOURCE_ROUTED), discount_cents=4500)
    assert quote.subtotal_cents == 45000
    assert quote.total_cents == 45000 + 1000 + 2750 - 4500


def _quote(subtotal=45000, delivery=NO_DELIVERY):
    return pricing.Quote(lines=(), subtotal_cents=subtotal, platform_fee_cents=0, delivery=delivery, discount_cents=0)


def test_claims_within_one_cent_pass():
    pricing.verify_claims(pricing.ClaimedAmounts(subtotal_cents=45001, total_cents=44999), _quote())


def test_claims_outside_tolerance_fail_without_leaking_amounts():
    with pytest.raises(AmountMismatch) as excinfo:
        pricing.verify_claims(pricing.ClaimedAmounts(subtotal_cents=45000, total_cents=44000), _quote())
    assert "45000" not in str(excinfo.value)
    assert "450" not in excinfo.value.message


def test_routed_delivery_fee_gets_wider_tolerance():
    quote = _quote(delivery=DeliveryQuote(2750, SOURCE_ROUTED))
    pricing.verify_claims(
        pricing.ClaimedAmounts(subtotal_cents=45000, delivery_fee_cents=3000, total_cents=48000), quote
    )
    with pytest.raises(AmountMismatch):
        pricing.verify_claims(
            pricing.ClaimedAmounts(subtotal_cents=45000, delivery_fee_cents=4000, total_cents=47750), quote
        )


def test_fallback_delivery_fee_is_not_checked():
    quote = _quote(delivery=DeliveryQuote(9000, SOURCE_FALLBACK))
    pricing.verify_claims(pricing.ClaimedAmounts(subtotal_cents=45000, total_cents=54000), quote)


def test_missing_total_is_invalid():
    with pytest.raises(InvalidRequest):
        pricing.verify_claims(pricing.ClaimedAmounts(subtotal_cents=45000), _quote())
