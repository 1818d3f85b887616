from django.db import models

from apps.common.models import BaseModel


class Restaurant(BaseModel):
    """Single-row restaurant profile. Read through ``config.load_restaurant_config``."""

    name = models.CharField(max_length=160)
    phone = models.CharField(max_length=20, blank=True)
    opening_time = models.TimeField(null=True, blank=True)
    closing_time = models.TimeField(null=True, blank=True)
    timezone = models.CharField(max_length=64, blank=True)
    platform_fee_cents = models.PositiveIntegerField(default=0)
    platform_fee_enabled = models.BooleanField(default=False)
    fee_per_km_cents = models.PositiveIntegerField(default=1500)
    latitude = models.FloatField(null=True, blank=True)
    longitude = models.FloatField(null=True, blank=True)
    allow_delivery = models.BooleanField(default=True)
    allow_new_orders = models.BooleanField(default=True)
    preorder_restrictions_enabled = models.BooleanField(default=False)

    def __str__(self) -> str:  # pragma: no cover
        return self.name


class PreorderWindow(BaseModel):
    restaurant = models.ForeignKey(Restaurant, on_delete=models.CASCADE, related_name="preorder_windows")
    date = models.DateField()
    start_time = models.TimeField()
    end_time = models.TimeField()

    class Meta:
        ordering = ["date", "start_time"]
        indexes = [models.Index(fields=["restaurant", "date"], name="restaurant_window_date_idx")]

    def __str__(self) -> str:  # pragma: no cover
        return f"{self.date} {self.start_time:%H:%M}-{self.end_time:%H:%M}"
