# deliveries/models/delivery.py

"""
MATERIAL DELIVERY (WAREHOUSE -> DEALER)

- A delivery names explicit warehouse batches and quantities.
- Creating it deducts those warehouse batches (same transaction).
- Deleting it (while still PENDING_RECEIPT) restores them.
- Item rows snapshot batch_number / expiry_date so the receiving dealer batch
  can be keyed and dated even if the warehouse row changes later.
"""

import uuid

from django.conf import settings
from django.db import models
from django.db.models import Q

from dealers.models import Dealer
from products.models import RawMaterial


class MaterialDelivery(models.Model):
    class Status(models.TextChoices):
        PENDING_RECEIPT = "PENDING_RECEIPT", "Pending receipt"
        RECEIVED = "RECEIVED", "Received"

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)

    delivery_number = models.CharField(max_length=32, unique=True)
    delivery_date = models.DateField()

    dealer = models.ForeignKey(
        Dealer,
        on_delete=models.PROTECT,
        related_name="deliveries",
    )

    status = models.CharField(
        max_length=32,
        choices=Status.choices,
        default=Status.PENDING_RECEIPT,
    )

    notes = models.TextField(blank=True)

    created_by = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="material_deliveries",
    )

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ["-delivery_date", "-created_at"]

    def __str__(self):
        return f"{self.delivery_number} -> {self.dealer.dealer_code}"


class MaterialDeliveryItem(models.Model):
    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)

    delivery = models.ForeignKey(
        MaterialDelivery,
        on_delete=models.CASCADE,
        related_name="items",
    )
    raw_material = models.ForeignKey(
        RawMaterial,
        on_delete=models.PROTECT,
        related_name="delivery_items",
    )
    source_batch = models.ForeignKey(
        "batches.StockBatch",
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="delivery_items",
    )

    batch_number = models.CharField(max_length=128)
    quantity = models.DecimalField(max_digits=14, decimal_places=3)
    unit = models.CharField(max_length=16, blank=True)
    expiry_date = models.DateField(null=True, blank=True)

    class Meta:
        ordering = ["batch_number"]
        constraints = [
            models.CheckConstraint(
                condition=Q(quantity__gt=0),
                name="chk_deliveryitem_qty_gt_zero",
            ),
        ]

    def __str__(self):
        return f"{self.delivery.delivery_number} | {self.batch_number} x {self.quantity}"
