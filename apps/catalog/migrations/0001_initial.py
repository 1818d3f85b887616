from django.db import migrations, models
import django.core.validators
import django.db.models.deletion
import uuid


class Migration(migrations.Migration):

    initial = True

    dependencies = []

    operations = [
        migrations.CreateModel(
            name="MenuItem",
            fields=[
                ("id", models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False, serialize=False)),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("updated_at", models.DateTimeField(auto_now=True)),
                ("name", models.CharField(max_length=160)),
                ("category", models.CharField(blank=True, max_length=80)),
                ("description", models.TextField(blank=True)),
                ("price_cents", models.IntegerField(validators=[django.core.validators.MinValueValidator(0)])),
                ("available", models.BooleanField(default=True)),
                ("is_bundle", models.BooleanField(default=False)),
            ],
            options={
                "indexes": [
                    models.Index(fields=["category", "available"], name="catalog_item_cat_avail_idx"),
                ],
            },
        ),
        migrations.CreateModel(
            name="MenuItemVariant",
            fields=[
                ("id", models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False, serialize=False)),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("updated_at", models.DateTimeField(auto_now=True)),
                ("name", models.CharField(max_length=120)),
                ("price_cents", models.IntegerField(validators=[django.core.validators.MinValueValidator(0)])),
                ("available", models.BooleanField(default=True)),
                ("menu_item", models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name="variants", to="catalog.menuitem")),
            ],
        ),
        migrations.CreateModel(
            name="ChoiceGroup",
            fields=[
                ("id", models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False, serialize=False)),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("updated_at", models.DateTimeField(auto_now=True)),
                ("name", models.CharField(max_length=120)),
                ("order", models.PositiveIntegerField(default=0, validators=[django.core.validators.MinValueValidator(0)])),
                ("menu_item", models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name="choice_groups", to="catalog.menuitem")),
            ],
            options={
                "ordering": ["order", "name"],
                "indexes": [
                    models.Index(fields=["menu_item", "order"], name="catalog_group_item_order_idx"),
                ],
            },
        ),
        migrations.CreateModel(
            name="Choice",
            fields=[
                ("id", models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False, serialize=False)),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("updated_at", models.DateTimeField(auto_now=True)),
                ("name", models.CharField(max_length=120)),
                ("price_cents", models.IntegerField(default=0)),
                ("available", models.BooleanField(default=True)),
                ("group", models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name="choices", to="catalog.choicegroup")),
                ("menu_item", models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name="+", to="catalog.menuitem")),
                ("variant", models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name="+", to="catalog.menuitemvariant")),
            ],
        ),
        migrations.CreateModel(
            name="BundleComponent",
            fields=[
                ("id", models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False, serialize=False)),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("updated_at", models.DateTimeField(auto_now=True)),
                ("bundle", models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name="components", to="catalog.menuitem")),
                ("component", models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name="part_of", to="catalog.menuitem")),
                ("variant", models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name="+", to="catalog.menuitemvariant")),
            ],
        ),
    ]
