from django.core.validators import MinValueValidator, RegexValidator
from django.db import models

from apps.common.models import BaseModel


code_validator = RegexValidator(
    r"^[A-Za-z0-9_-]{3,50}$",
    "Voucher code must be 3-50 letters, numbers, hyphens or underscores.",
)


class Voucher(BaseModel):
    TYPE_FIXED = "fixed"
    TYPE_PERCENTAGE = "percentage"
    TYPE_CHOICES = [
        (TYPE_FIXED, "Fixed amount"),
        (TYPE_PERCENTAGE, "Percentage"),
    ]

    code = models.CharField(max_length=50, unique=True, validators=[code_validator])
    type = models.CharField(max_length=10, choices=TYPE_CHOICES)
    # cents for fixed vouchers, whole percent for percentage vouchers
    value = models.PositiveIntegerField()
    max_discount_cents = models.PositiveIntegerField(null=True, blank=True)
    min_order_cents = models.PositiveIntegerField(default=0)
    usage_limit = models.PositiveIntegerField(validators=[MinValueValidator(1)])
    usage_count = models.PositiveIntegerField(default=0)
    expires_at = models.DateTimeField()
    active = models.BooleanField(default=True)

    def save(self, *args, **kwargs):
        if self.code:
            self.code = self.code.strip().upper()
        return super().save(*args, **kwargs)

    def __str__(self) -> str:  # pragma: no cover
        return self.code
