import uuid
from decimal import Decimal

import django.db.models.deletion
from django.db import migrations, models


class Migration(migrations.Migration):

    initial = True

    dependencies = []

    operations = [
        migrations.CreateModel(
            name="Product",
            fields=[
                ("id", models.UUIDField(default=uuid.uuid4, editable=False, primary_key=True, serialize=False)),
                ("product_code", models.CharField(db_index=True, max_length=64, unique=True)),
                ("product_name", models.CharField(db_index=True, max_length=255)),
                ("description", models.TextField(blank=True)),
                ("is_active", models.BooleanField(default=True)),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("updated_at", models.DateTimeField(auto_now=True)),
            ],
            options={
                "ordering": ["product_name"],
            },
        ),
        migrations.CreateModel(
            name="RawMaterial",
            fields=[
                ("id", models.UUIDField(default=uuid.uuid4, editable=False, primary_key=True, serialize=False)),
                ("material_code", models.CharField(db_index=True, max_length=64, unique=True)),
                ("material_name", models.CharField(max_length=255)),
                ("material_type", models.CharField(blank=True, help_text="Free-form category, e.g. FILM, ADHESIVE, PRIMER", max_length=64)),
                ("unit", models.CharField(default="m2", max_length=16)),
                ("current_stock", models.DecimalField(decimal_places=3, default=Decimal("0"), help_text="Warehouse aggregate (service-managed only)", max_digits=14)),
                ("is_active", models.BooleanField(default=True)),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("updated_at", models.DateTimeField(auto_now=True)),
            ],
            options={
                "ordering": ["material_code"],
                "constraints": [
                    models.CheckConstraint(condition=models.Q(("current_stock__gte", 0)), name="chk_rawmaterial_stock_gte_zero"),
                ],
            },
        ),
        migrations.CreateModel(
            name="ProductRecipe",
            fields=[
                ("id", models.UUIDField(default=uuid.uuid4, editable=False, primary_key=True, serialize=False)),
                ("recipe_name", models.CharField(blank=True, max_length=255)),
                ("calculation_unit", models.CharField(choices=[("PER_SQM", "Per square metre"), ("PER_UNIT", "Per unit")], default="PER_SQM", max_length=16)),
                ("is_active", models.BooleanField(default=True)),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("updated_at", models.DateTimeField(auto_now=True)),
                ("product", models.OneToOneField(on_delete=django.db.models.deletion.CASCADE, related_name="recipe", to="products.product")),
            ],
            options={
                "ordering": ["product__product_name"],
            },
        ),
        migrations.CreateModel(
            name="RecipeItem",
            fields=[
                ("id", models.UUIDField(default=uuid.uuid4, editable=False, primary_key=True, serialize=False)),
                ("quantity_per_unit", models.DecimalField(decimal_places=4, max_digits=12)),
                ("unit", models.CharField(blank=True, max_length=16)),
                ("recipe", models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name="items", to="products.productrecipe")),
                ("raw_material", models.ForeignKey(on_delete=django.db.models.deletion.PROTECT, related_name="recipe_items", to="products.rawmaterial")),
            ],
            options={
                "ordering": ["raw_material__material_code"],
                "constraints": [
                    models.UniqueConstraint(fields=("recipe", "raw_material"), name="unique_material_per_recipe"),
                    models.CheckConstraint(condition=models.Q(("quantity_per_unit__gt", 0)), name="chk_recipeitem_qty_gt_zero"),
                ],
            },
        ),
    ]
