import uuid
from decimal import Decimal

import django.db.models.deletion
import django.utils.timezone
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
            name="StockBatch",
            fields=[
                ("id", models.UUIDField(default=uuid.uuid4, editable=False, primary_key=True, serialize=False)),
                ("batch_number", models.CharField(help_text="Supplier / delivery batch reference", max_length=128)),
                ("current_stock", models.DecimalField(decimal_places=3, default=Decimal("0"), help_text="Remaining quantity (service-managed only)", max_digits=14)),
                ("received_at", models.DateTimeField(default=django.utils.timezone.now)),
                ("expiry_date", models.DateField(blank=True, null=True)),
                ("supplier", models.CharField(blank=True, max_length=255)),
                ("status", models.CharField(choices=[("AVAILABLE", "Available"), ("OUT_OF_STOCK", "Out of stock"), ("EXPIRED", "Expired")], default="AVAILABLE", max_length=16)),
                ("is_recertified", models.BooleanField(default=False)),
                ("recertification_count", models.PositiveIntegerField(default=0)),
                ("last_recertified_at", models.DateTimeField(blank=True, null=True)),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("updated_at", models.DateTimeField(auto_now=True)),
                ("dealer", models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.PROTECT, related_name="stock_batches", to="dealers.dealer")),
                ("last_recertified_by", models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name="recertified_batches", to=settings.AUTH_USER_MODEL)),
                ("raw_material", models.ForeignKey(on_delete=django.db.models.deletion.PROTECT, related_name="stock_batches", to="products.rawmaterial")),
            ],
            options={
                "ordering": ["received_at", "created_at"],
                "indexes": [
                    models.Index(fields=["dealer", "raw_material", "received_at"], name="batches_sto_dealer__5b7f2e_idx"),
                    models.Index(fields=["expiry_date"], name="batches_sto_expiry__c41d08_idx"),
                    models.Index(fields=["status"], name="batches_sto_status_9e6a1b_idx"),
                ],
                "constraints": [
                    models.UniqueConstraint(condition=models.Q(("dealer__isnull", True)), fields=("batch_number",), name="unique_warehouse_batch_number"),
                    models.UniqueConstraint(condition=models.Q(("dealer__isnull", False)), fields=("dealer", "raw_material", "batch_number"), name="unique_dealer_material_batch"),
                    models.CheckConstraint(condition=models.Q(("current_stock__gte", 0)), name="chk_stockbatch_stock_gte_zero"),
                ],
            },
        ),
        migrations.CreateModel(
            name="RecertificationHistory",
            fields=[
                ("id", models.UUIDField(default=uuid.uuid4, editable=False, primary_key=True, serialize=False)),
                ("batch_number", models.CharField(max_length=128)),
                ("material_code", models.CharField(max_length=64)),
                ("old_expiry_date", models.DateField()),
                ("new_expiry_date", models.DateField()),
                ("extended_days", models.PositiveIntegerField()),
                ("recertified_by_name", models.CharField(blank=True, max_length=255)),
                ("reason", models.TextField(blank=True)),
                ("note", models.TextField(blank=True)),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("batch", models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name="recertifications", to="batches.stockbatch")),
                ("dealer", models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name="recertifications", to="dealers.dealer")),
                ("recertified_by", models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name="recertifications", to=settings.AUTH_USER_MODEL)),
            ],
            options={
                "ordering": ["-created_at"],
                "indexes": [
                    models.Index(fields=["batch", "created_at"], name="batches_rec_batch_i_7a2c3d_idx"),
                ],
            },
        ),
    ]
