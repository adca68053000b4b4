import uuid

import django.db.models.deletion
from django.conf import settings
from django.db import migrations, models


class Migration(migrations.Migration):

    initial = True

    dependencies = [
        migrations.swappable_dependency(settings.AUTH_USER_MODEL),
        ("batches", "0001_initial"),
        ("dealers", "0001_initial"),
        ("products", "0001_initial"),
    ]

    operations = [
        migrations.CreateModel(
            name="MaterialDelivery",
            fields=[
                ("id", models.UUIDField(default=uuid.uuid4, editable=False, primary_key=True, serialize=False)),
                ("delivery_number", models.CharField(max_length=32, unique=True)),
                ("delivery_date", models.DateField()),
                ("status", models.CharField(choices=[("PENDING_RECEIPT", "Pending receipt"), ("RECEIVED", "Received")], default="PENDING_RECEIPT", max_length=32)),
                ("notes", models.TextField(blank=True)),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("updated_at", models.DateTimeField(auto_now=True)),
                ("created_by", models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name="material_deliveries", to=settings.AUTH_USER_MODEL)),
                ("dealer", models.ForeignKey(on_delete=django.db.models.deletion.PROTECT, related_name="deliveries", to="dealers.dealer")),
            ],
            options={
                "ordering": ["-delivery_date", "-created_at"],
            },
        ),
        migrations.CreateModel(
            name="MaterialDeliveryItem",
            fields=[
                ("id", models.UUIDField(default=uuid.uuid4, editable=False, primary_key=True, serialize=False)),
                ("batch_number", models.CharField(max_length=128)),
                ("quantity", models.DecimalField(decimal_places=3, max_digits=14)),
                ("unit", models.CharField(blank=True, max_length=16)),
                ("expiry_date", models.DateField(blank=True, null=True)),
                ("delivery", models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name="items", to="deliveries.materialdelivery")),
                ("raw_material", models.ForeignKey(on_delete=django.db.models.deletion.PROTECT, related_name="delivery_items", to="products.rawmaterial")),
                ("source_batch", models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name="delivery_items", to="batches.stockbatch")),
            ],
            options={
                "ordering": ["batch_number"],
                "constraints": [
                    models.CheckConstraint(condition=models.Q(("quantity__gt", 0)), name="chk_deliveryitem_qty_gt_zero"),
                ],
            },
        ),
        migrations.CreateModel(
            name="DealerReceipt",
            fields=[
                ("id", models.UUIDField(default=uuid.uuid4, editable=False, primary_key=True, serialize=False)),
                ("receipt_number", models.CharField(max_length=64, unique=True)),
                ("receipt_date", models.DateField()),
                ("received_by", models.CharField(blank=True, max_length=255)),
                ("notes", models.TextField(blank=True)),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("updated_at", models.DateTimeField(auto_now=True)),
                ("dealer", models.ForeignKey(on_delete=django.db.models.deletion.PROTECT, related_name="receipts", to="dealers.dealer")),
                ("delivery", models.OneToOneField(on_delete=django.db.models.deletion.PROTECT, related_name="receipt", to="deliveries.materialdelivery")),
            ],
            options={
                "ordering": ["-receipt_date", "-created_at"],
            },
        ),
        migrations.CreateModel(
            name="DealerReceiptItem",
            fields=[
                ("id", models.UUIDField(default=uuid.uuid4, editable=False, primary_key=True, serialize=False)),
                ("batch_number", models.CharField(max_length=128)),
                ("quantity", models.DecimalField(decimal_places=3, max_digits=14)),
                ("received_quantity", models.DecimalField(decimal_places=3, max_digits=14)),
                ("expiry_date", models.DateField(blank=True, null=True)),
                ("dealer_batch", models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name="receipt_items", to="batches.stockbatch")),
                ("raw_material", models.ForeignKey(on_delete=django.db.models.deletion.PROTECT, related_name="receipt_items", to="products.rawmaterial")),
                ("receipt", models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name="items", to="deliveries.dealerreceipt")),
            ],
            options={
                "ordering": ["batch_number"],
                "constraints": [
                    models.CheckConstraint(condition=models.Q(("received_quantity__gte", 0)), name="chk_receiptitem_received_gte_zero"),
                ],
            },
        ),
    ]
