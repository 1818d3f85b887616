from __future__ import annotations

from typing import Any

from apps.common.ids import as_uuid as _as_uuid

from .models import BundleComponent, ChoiceGroup, MenuItem, MenuItemVariant


def get_menu_item(item_id: Any) -> MenuItem | None:
    pk = _as_uuid(item_id)
    if pk is None:
        return None
    return MenuItem.objects.filter(pk=pk).first()


def get_variant(variant_id: Any) -> MenuItemVariant | None:
    pk = _as_uuid(variant_id)
    if pk is None:
        return None
    return MenuItemVariant.objects.select_related("menu_item").filter(pk=pk).first()


def get_choice_groups(menu_item_id: Any) -> list[ChoiceGroup]:
    pk = _as_uuid(menu_item_id)
    if pk is None:
        return []
    return list(
        ChoiceGroup.objects.filter(menu_item_id=pk)
        .prefetch_related("choices")
        .order_by("order", "name")
    )


def get_bundle_components(bundle_id: Any) -> list[BundleComponent]:
    pk = _as_uuid(bundle_id)
    if pk is None:
        return []
    return list(BundleComponent.objects.filter(bundle_id=pk).select_related("component", "variant"))
