from django.conf import settings
from django.db import migrations, models
import django.core.serializers.json
import django.core.validators
import django.db.models.deletion
import uuid


class Migration(migrations.Migration):

    initial = True

    dependencies = [
        ("catalog", "0001_initial"),
        migrations.swappable_dependency(settings.AUTH_USER_MODEL),
    ]

    operations = [
        migrations.CreateModel(
            name="DenialReason",
            fields=[
                ("id", models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False, serialize=False)),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("updated_at", models.DateTimeField(auto_now=True)),
                ("reason", models.CharField(max_length=255)),
                ("is_preset", models.BooleanField(default=True)),
            ],
            options={"ordering": ["reason"]},
        ),
        migrations.CreateModel(
            name="Order",
            fields=[
                ("id", models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False, serialize=False)),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("updated_at", models.DateTimeField(auto_now=True)),
                ("public_code", models.CharField(max_length=12, unique=True)),
                ("order_type", models.CharField(choices=[("dine-in", "Dine-in"), ("takeaway", "Takeaway"), ("delivery", "Delivery"), ("pre-order", "Pre-order")], max_length=12)),
                ("status", models.CharField(choices=[("pre-order-pending", "Awaiting Restaurant Confirmation"), ("pending", "Pending"), ("accepted", "Preparing"), ("ready", "Ready"), ("in-transit", "In Transit"), ("delivered", "Delivered"), ("denied", "Denied"), ("completed", "Completed"), ("cancelled", "Cancelled")], default="pending", max_length=20)),
                ("pre_order_fulfillment", models.CharField(blank=True, choices=[("pickup", "Pickup"), ("delivery", "Delivery")], max_length=10)),
                ("pre_order_scheduled_at", models.DateTimeField(blank=True, null=True)),
                ("customer_name", models.CharField(max_length=160)),
                ("customer_phone", models.CharField(blank=True, max_length=40)),
                ("customer_address", models.CharField(blank=True, max_length=255)),
                ("customer_lat", models.FloatField(blank=True, null=True)),
                ("customer_lng", models.FloatField(blank=True, null=True)),
                ("gcash_number", models.CharField(blank=True, max_length=20)),
                ("subtotal_cents", models.IntegerField(validators=[django.core.validators.MinValueValidator(0)])),
                ("platform_fee_cents", models.IntegerField(default=0, validators=[django.core.validators.MinValueValidator(0)])),
                ("delivery_fee_cents", models.IntegerField(default=0, validators=[django.core.validators.MinValueValidator(0)])),
                ("delivery_fee_source", models.CharField(blank=True, max_length=12)),
                ("discount_cents", models.IntegerField(default=0, validators=[django.core.validators.MinValueValidator(0)])),
                ("total_cents", models.IntegerField()),
                ("voucher_code", models.CharField(blank=True, max_length=50)),
                ("payment_plan", models.CharField(choices=[("full", "Full"), ("downpayment", "Downpayment")], default="full", max_length=12)),
                ("downpayment_cents", models.IntegerField(blank=True, null=True)),
                ("downpayment_proof_url", models.CharField(blank=True, max_length=500)),
                ("remaining_payment_method", models.CharField(blank=True, choices=[("online", "Online"), ("cash", "Cash")], max_length=10)),
                ("remaining_payment_proof_url", models.CharField(blank=True, max_length=500)),
                ("payment_screenshot_url", models.CharField(blank=True, max_length=500)),
                ("special_instructions", models.CharField(blank=True, max_length=100)),
                ("denial_reason", models.CharField(blank=True, max_length=255)),
                ("allow_chat", models.BooleanField(default=True)),
                ("allow_customer_images", models.BooleanField(default=False)),
                ("status_changed_at", models.DateTimeField(blank=True, null=True)),
                ("accepted_at", models.DateTimeField(blank=True, null=True)),
                ("customer", models.ForeignKey(on_delete=django.db.models.deletion.PROTECT, related_name="orders", to=settings.AUTH_USER_MODEL)),
            ],
            options={
                "indexes": [
                    models.Index(fields=["customer", "status"], name="orders_customer_status_idx"),
                    models.Index(fields=["status", "created_at"], name="orders_status_created_idx"),
                ],
            },
        ),
        migrations.CreateModel(
            name="OrderItem",
            fields=[
                ("id", models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False, serialize=False)),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("updated_at", models.DateTimeField(auto_now=True)),
                ("position", models.PositiveIntegerField(default=0)),
                ("kind", models.CharField(choices=[("simple", "Simple"), ("variant", "Variant"), ("bundle", "Bundle")], default="simple", max_length=10)),
                ("name", models.CharField(max_length=160)),
                ("variant_name", models.CharField(blank=True, max_length=120)),
                ("quantity", models.PositiveIntegerField(default=1, validators=[django.core.validators.MinValueValidator(1)])),
                ("unit_price_cents", models.IntegerField(validators=[django.core.validators.MinValueValidator(0)])),
                ("line_total_cents", models.IntegerField(validators=[django.core.validators.MinValueValidator(0)])),
                ("selected_choices", models.JSONField(blank=True, default=dict)),
                ("bundle_items", models.JSONField(blank=True, default=list)),
                ("menu_item", models.ForeignKey(null=True, on_delete=django.db.models.deletion.SET_NULL, to="catalog.menuitem")),
                ("order", models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name="items", to="orders.order")),
                ("variant", models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, to="catalog.menuitemvariant")),
            ],
            options={"ordering": ["position"]},
        ),
        migrations.CreateModel(
            name="OrderModification",
            fields=[
                ("id", models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False, serialize=False)),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("updated_at", models.DateTimeField(auto_now=True)),
                ("modified_by_name", models.CharField(max_length=160)),
                ("modification_type", models.CharField(choices=[("item_added", "Item added"), ("item_removed", "Item removed"), ("item_quantity_changed", "Item quantity changed"), ("item_price_changed", "Item price changed"), ("order_edited", "Order edited"), ("status_changed", "Status changed")], max_length=24)),
                ("previous_value", models.JSONField(blank=True, encoder=django.core.serializers.json.DjangoJSONEncoder, null=True)),
                ("new_value", models.JSONField(blank=True, encoder=django.core.serializers.json.DjangoJSONEncoder, null=True)),
                ("item_details", models.CharField(blank=True, max_length=500)),
                ("modified_by", models.ForeignKey(null=True, on_delete=django.db.models.deletion.SET_NULL, related_name="+", to=settings.AUTH_USER_MODEL)),
                ("order", models.ForeignKey(on_delete=django.db.models.deletion.PROTECT, related_name="modifications", to="orders.order")),
            ],
            options={
                "ordering": ["-created_at"],
                "indexes": [
                    models.Index(fields=["order", "created_at"], name="orders_mod_order_created_idx"),
                ],
            },
        ),
    ]
