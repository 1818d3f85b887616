from django.db import migrations, models
import django.db.models.deletion
import uuid


class Migration(migrations.Migration):

    initial = True

    dependencies = []

    operations = [
        migrations.CreateModel(
            name="Restaurant",
            fields=[
                ("id", models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False, serialize=False)),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("updated_at", models.DateTimeField(auto_now=True)),
                ("name", models.CharField(max_length=160)),
                ("phone", models.CharField(blank=True, max_length=20)),
                ("opening_time", models.TimeField(blank=True, null=True)),
                ("closing_time", models.TimeField(blank=True, null=True)),
                ("timezone", models.CharField(blank=True, max_length=64)),
                ("platform_fee_cents", models.PositiveIntegerField(default=0)),
                ("platform_fee_enabled", models.BooleanField(default=False)),
                ("fee_per_km_cents", models.PositiveIntegerField(default=1500)),
                ("latitude", models.FloatField(blank=True, null=True)),
                ("longitude", models.FloatField(blank=True, null=True)),
                ("allow_delivery", models.BooleanField(default=True)),
                ("allow_new_orders", models.BooleanField(default=True)),
                ("preorder_restrictions_enabled", models.BooleanField(default=False)),
            ],
        ),
        migrations.CreateModel(
            name="PreorderWindow",
            fields=[
                ("id", models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False, serialize=False)),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("updated_at", models.DateTimeField(auto_now=True)),
                ("date", models.DateField()),
                ("start_time", models.TimeField()),
                ("end_time", models.TimeField()),
                ("restaurant", models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name="preorder_windows", to="restaurant.restaurant")),
            ],
            options={
                "ordering": ["date", "start_time"],
                "indexes": [
                    models.Index(fields=["restaurant", "date"], name="restaurant_window_date_idx"),
                ],
            },
        ),
    ]
