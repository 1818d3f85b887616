from django.conf import settings
from django.core.serializers.json import DjangoJSONEncoder
from django.core.validators import MinValueValidator
from django.db import models

from apps.common.models import BaseModel


class Order(BaseModel):
    STATUS_PREORDER_PENDING = "pre-order-pending"
    STATUS_PENDING = "pending"
    STATUS_ACCEPTED = "accepted"
    STATUS_READY = "ready"
    STATUS_IN_TRANSIT = "in-transit"
    STATUS_DELIVERED = "delivered"
    STATUS_DENIED = "denied"
    STATUS_COMPLETED = "completed"
    STATUS_CANCELLED = "cancelled"
    STATUS_CHOICES = [
        (STATUS_PREORDER_PENDING, "Awaiting Restaurant Confirmation"),
        (STATUS_PENDING, "Pending"),
        (STATUS_ACCEPTED, "Preparing"),
        (STATUS_READY, "Ready"),
        (STATUS_IN_TRANSIT, "In Transit"),
        (STATUS_DELIVERED, "Delivered"),
        (STATUS_DENIED, "Denied"),
        (STATUS_COMPLETED, "Completed"),
        (STATUS_CANCELLED, "Cancelled"),
    ]
    FINAL_STATUSES = frozenset({STATUS_CANCELLED, STATUS_COMPLETED, STATUS_DELIVERED})

    TYPE_DINE_IN = "dine-in"
    TYPE_TAKEAWAY = "takeaway"
    TYPE_DELIVERY = "delivery"
    TYPE_PREORDER = "pre-order"
    TYPE_CHOICES = [
        (TYPE_DINE_IN, "Dine-in"),
        (TYPE_TAKEAWAY, "Takeaway"),
        (TYPE_DELIVERY, "Delivery"),
        (TYPE_PREORDER, "Pre-order"),
    ]

    FULFILLMENT_PICKUP = "pickup"
    FULFILLMENT_DELIVERY = "delivery"
    FULFILLMENT_CHOICES = [(FULFILLMENT_PICKUP, "Pickup"), (FULFILLMENT_DELIVERY, "Delivery")]

    PLAN_FULL = "full"
    PLAN_DOWNPAYMENT = "downpayment"
    PLAN_CHOICES = [(PLAN_FULL, "Full"), (PLAN_DOWNPAYMENT, "Downpayment")]

    REMAINING_ONLINE = "online"
    REMAINING_CASH = "cash"
    REMAINING_CHOICES = [(REMAINING_ONLINE, "Online"), (REMAINING_CASH, "Cash")]

    customer = models.ForeignKey(settings.AUTH_USER_MODEL, on_delete=models.PROTECT, related_name="orders")
    public_code = models.CharField(max_length=12, unique=True)
    order_type = models.CharField(max_length=12, choices=TYPE_CHOICES)
    status = models.CharField(max_length=20, choices=STATUS_CHOICES, default=STATUS_PENDING)
    pre_order_fulfillment = models.CharField(max_length=10, choices=FULFILLMENT_CHOICES, blank=True)
    pre_order_scheduled_at = models.DateTimeField(null=True, blank=True)

    # snapshots taken at checkout; later profile edits do not touch them
    customer_name = models.CharField(max_length=160)
    customer_phone = models.CharField(max_length=40, blank=True)
    customer_address = models.CharField(max_length=255, blank=True)
    customer_lat = models.FloatField(null=True, blank=True)
    customer_lng = models.FloatField(null=True, blank=True)
    gcash_number = models.CharField(max_length=20, blank=True)

    subtotal_cents = models.IntegerField(validators=[MinValueValidator(0)])
    platform_fee_cents = models.IntegerField(default=0, validators=[MinValueValidator(0)])
    delivery_fee_cents = models.IntegerField(default=0, validators=[MinValueValidator(0)])
    delivery_fee_source = models.CharField(max_length=12, blank=True)
    discount_cents = models.IntegerField(default=0, validators=[MinValueValidator(0)])
    total_cents = models.IntegerField()
    voucher_code = models.CharField(max_length=50, blank=True)

    payment_plan = models.CharField(max_length=12, choices=PLAN_CHOICES, default=PLAN_FULL)
    downpayment_cents = models.IntegerField(null=True, blank=True)
    downpayment_proof_url = models.CharField(max_length=500, blank=True)
    remaining_payment_method = models.CharField(max_length=10, choices=REMAINING_CHOICES, blank=True)
    remaining_payment_proof_url = models.CharField(max_length=500, blank=True)
    payment_screenshot_url = models.CharField(max_length=500, blank=True)

    special_instructions = models.CharField(max_length=100, blank=True)
    denial_reason = models.CharField(max_length=255, blank=True)

    allow_chat = models.BooleanField(default=True)
    allow_customer_images = models.BooleanField(default=False)

    status_changed_at = models.DateTimeField(null=True, blank=True)
    accepted_at = models.DateTimeField(null=True, blank=True)

    class Meta:
        indexes = [
            models.Index(fields=["customer", "status"], name="orders_customer_status_idx"),
            models.Index(fields=["status", "created_at"], name="orders_status_created_idx"),
        ]

    def save(self, *args, **kwargs):
        from apps.common.codes import generate_unique_code

        if not self.public_code:
            def _exists(code: str) -> bool:
                qs = type(self).objects.filter(public_code=code)
                if self.pk:
                    qs = qs.exclude(pk=self.pk)
                return qs.exists()

            self.public_code = generate_unique_code(length=6, exists=_exists)
        super().save(*args, **kwargs)

    @property
    def is_final(self) -> bool:
        return self.status in self.FINAL_STATUSES

    @property
    def is_preorder(self) -> bool:
        return self.order_type == self.TYPE_PREORDER

    @property
    def is_delivery(self) -> bool:
        return self.order_type == self.TYPE_DELIVERY or (
            self.is_preorder and self.pre_order_fulfillment == self.FULFILLMENT_DELIVERY
        )

    def __str__(self) -> str:  # pragma: no cover
        return f"#{self.public_code}"


class OrderItem(BaseModel):
    KIND_SIMPLE = "simple"
    KIND_VARIANT = "variant"
    KIND_BUNDLE = "bundle"
    KIND_CHOICES = [(KIND_SIMPLE, "Simple"), (KIND_VARIANT, "Variant"), (KIND_BUNDLE, "Bundle")]

    order = models.ForeignKey(Order, on_delete=models.CASCADE, related_name="items")
    position = models.PositiveIntegerField(default=0)
    kind = models.CharField(max_length=10, choices=KIND_CHOICES, default=KIND_SIMPLE)
    menu_item = models.ForeignKey("catalog.MenuItem", on_delete=models.SET_NULL, null=True)
    variant = models.ForeignKey("catalog.MenuItemVariant", on_delete=models.SET_NULL, null=True, blank=True)
    name = models.CharField(max_length=160)
    variant_name = models.CharField(max_length=120, blank=True)
    quantity = models.PositiveIntegerField(default=1, validators=[MinValueValidator(1)])
    unit_price_cents = models.IntegerField(validators=[MinValueValidator(0)])
    line_total_cents = models.IntegerField(validators=[MinValueValidator(0)])
    selected_choices = models.JSONField(default=dict, blank=True)
    bundle_items = models.JSONField(default=list, blank=True)

    class Meta:
        ordering = ["position"]


class ModificationQuerySet(models.QuerySet):
    def update(self, **kwargs):
        raise ValueError("Order modifications are append-only")

    def delete(self):
        raise ValueError("Order modifications are append-only")


class OrderModification(BaseModel):
    """Append-only audit row. One per discrete owner or customer change."""

    TYPE_ITEM_ADDED = "item_added"
    TYPE_ITEM_REMOVED = "item_removed"
    TYPE_ITEM_QUANTITY_CHANGED = "item_quantity_changed"
    TYPE_ITEM_PRICE_CHANGED = "item_price_changed"
    TYPE_ORDER_EDITED = "order_edited"
    TYPE_STATUS_CHANGED = "status_changed"
    TYPE_CHOICES = [
        (TYPE_ITEM_ADDED, "Item added"),
        (TYPE_ITEM_REMOVED, "Item removed"),
        (TYPE_ITEM_QUANTITY_CHANGED, "Item quantity changed"),
        (TYPE_ITEM_PRICE_CHANGED, "Item price changed"),
        (TYPE_ORDER_EDITED, "Order edited"),
        (TYPE_STATUS_CHANGED, "Status changed"),
    ]

    order = models.ForeignKey(Order, on_delete=models.PROTECT, related_name="modifications")
    modified_by = models.ForeignKey(settings.AUTH_USER_MODEL, on_delete=models.SET_NULL, null=True, related_name="+")
    modified_by_name = models.CharField(max_length=160)
    modification_type = models.CharField(max_length=24, choices=TYPE_CHOICES)
    previous_value = models.JSONField(encoder=DjangoJSONEncoder, null=True, blank=True)
    new_value = models.JSONField(encoder=DjangoJSONEncoder, null=True, blank=True)
    item_details = models.CharField(max_length=500, blank=True)

    objects = ModificationQuerySet.as_manager()

    class Meta:
        ordering = ["-created_at"]
        indexes = [models.Index(fields=["order", "created_at"], name="orders_mod_order_created_idx")]

    def save(self, *args, **kwargs):
        if not self._state.adding:
            raise ValueError("Order modifications are append-only")
        super().save(*args, **kwargs)

    def delete(self, *args, **kwargs):
        raise ValueError("Order modifications are append-only")


class DenialReason(BaseModel):
    reason = models.CharField(max_length=255)
    is_preset = models.BooleanField(default=True)

    class Meta:
        ordering = ["reason"]

    def __str__(self) -> str:  # pragma: no cover
        return self.reason
