import uuid
from decimal import Decimal

import django.db.models.deletion
from django.conf import settings
from django.db import migrations, models


class Migration(migrations.Migration):

    initial = True

    dependencies = [
        migrations.swappable_dependency(settings.AUTH_USER_MODEL),
        ("dealers", "0001_initial"),
        ("products", "0001_initial"),
    ]

    operations = [
        migrations.CreateModel(
            name="Warranty",
            fields=[
                ("id", models.UUIDField(default=uuid.uuid4, editable=False, primary_key=True, serialize=False)),
                ("warranty_number", models.CharField(max_length=64, unique=True)),
                ("customer_name", models.CharField(max_length=255)),
                ("customer_phone", models.CharField(blank=True, max_length=50)),
                ("customer_address", models.TextField(blank=True)),
                ("installation_area", models.DecimalField(decimal_places=3, default=Decimal("0"), help_text="Installed area in square metres", max_digits=12)),
                ("warranty_date", models.DateField()),
                ("warranty_period_months", models.PositiveIntegerField(default=12)),
                ("expiry_date", models.DateField()),
                ("material_usage", models.JSONField(blank=True, default=dict)),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("updated_at", models.DateTimeField(auto_now=True)),
                ("created_by", models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name="warranties", to=settings.AUTH_USER_MODEL)),
                ("dealer", models.ForeignKey(on_delete=django.db.models.deletion.PROTECT, related_name="warranties", to="dealers.dealer")),
                ("product", models.ForeignKey(on_delete=django.db.models.deletion.PROTECT, related_name="warranties", to="products.product")),
            ],
            options={
                "ordering": ["-warranty_date", "-created_at"],
                "constraints": [
                    models.CheckConstraint(condition=models.Q(("installation_area__gte", 0)), name="chk_warranty_area_gte_zero"),
                ],
            },
        ),
    ]
