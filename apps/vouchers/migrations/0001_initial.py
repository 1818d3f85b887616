from django.db import migrations, models
import django.core.validators
import uuid


class Migration(migrations.Migration):

    initial = True

    dependencies = []

    operations = [
        migrations.CreateModel(
            name="Voucher",
            fields=[
                ("id", models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False, serialize=False)),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("updated_at", models.DateTimeField(auto_now=True)),
                ("code", models.CharField(max_length=50, unique=True, validators=[django.core.validators.RegexValidator("^[A-Za-z0-9_-]{3,50}$", "Voucher code must be 3-50 letters, numbers, hyphens or underscores.")])),
                ("type", models.CharField(choices=[("fixed", "Fixed amount"), ("percentage", "Percentage")], max_length=10)),
                ("value", models.PositiveIntegerField()),
                ("max_discount_cents", models.PositiveIntegerField(blank=True, null=True)),
                ("min_order_cents", models.PositiveIntegerField(default=0)),
                ("usage_limit", models.PositiveIntegerField(validators=[django.core.validators.MinValueValidator(1)])),
                ("usage_count", models.PositiveIntegerField(default=0)),
                ("expires_at", models.DateTimeField()),
                ("active", models.BooleanField(default=True)),
            ],
        ),
    ]
