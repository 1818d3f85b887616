from django.core.validators import MinValueValidator
from django.db import models

from apps.common.models import BaseModel


class MenuItem(BaseModel):
    name = models.CharField(max_length=160)
    category = models.CharField(max_length=80, blank=True)
    description = models.TextField(blank=True)
    price_cents = models.IntegerField(validators=[MinValueValidator(0)])
    available = models.BooleanField(default=True)
    is_bundle = models.BooleanField(default=False)

    class Meta:
        indexes = [models.Index(fields=["category", "available"], name="catalog_item_cat_avail_idx")]

    def __str__(self) -> str:  # pragma: no cover
        return self.name


class MenuItemVariant(BaseModel):
    menu_item = models.ForeignKey(MenuItem, on_delete=models.CASCADE, related_name="variants")
    name = models.CharField(max_length=120)
    price_cents = models.IntegerField(validators=[MinValueValidator(0)])
    available = models.BooleanField(default=True)

    def __str__(self) -> str:  # pragma: no cover
        return f"{self.menu_item.name} ({self.name})"


class ChoiceGroup(BaseModel):
    menu_item = models.ForeignKey(MenuItem, on_delete=models.CASCADE, related_name="choice_groups")
    name = models.CharField(max_length=120)
    order = models.PositiveIntegerField(default=0, validators=[MinValueValidator(0)])

    class Meta:
        ordering = ["order", "name"]
        indexes = [models.Index(fields=["menu_item", "order"], name="catalog_group_item_order_idx")]


class Choice(BaseModel):
    """Option inside a group. When ``menu_item`` is set the choice is a bundle slot."""

    group = models.ForeignKey(ChoiceGroup, on_delete=models.CASCADE, related_name="choices")
    name = models.CharField(max_length=120)
    price_cents = models.IntegerField(default=0)
    available = models.BooleanField(default=True)
    menu_item = models.ForeignKey(MenuItem, on_delete=models.SET_NULL, null=True, blank=True, related_name="+")
    variant = models.ForeignKey(MenuItemVariant, on_delete=models.SET_NULL, null=True, blank=True, related_name="+")


class BundleComponent(BaseModel):
    bundle = models.ForeignKey(MenuItem, on_delete=models.CASCADE, related_name="components")
    component = models.ForeignKey(MenuItem, on_delete=models.CASCADE, related_name="part_of")
    variant = models.ForeignKey(MenuItemVariant, on_delete=models.SET_NULL, null=True, blank=True, related_name="+")
