# deliveries/models/receipt.py

"""
DEALER RECEIPT

- One receipt per delivery.
- Receiving adds stock to the dealer's pool (create or top-up by batch_number).
- Deleting a receipt withdraws that stock again (clamped at zero; emptied
  dealer batches are removed) and reopens the delivery.
"""

import uuid

from django.db import models
from django.db.models import Q

from dealers.models import Dealer
from products.models import RawMaterial

from .delivery import MaterialDelivery


class DealerReceipt(models.Model):
    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)

    receipt_number = models.CharField(max_length=64, unique=True)
    receipt_date = models.DateField()

    delivery = models.OneToOneField(
        MaterialDelivery,
        on_delete=models.PROTECT,
        related_name="receipt",
    )
    dealer = models.ForeignKey(
        Dealer,
        on_delete=models.PROTECT,
        related_name="receipts",
    )

    received_by = models.CharField(max_length=255, blank=True)
    notes = models.TextField(blank=True)

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ["-receipt_date", "-created_at"]

    def __str__(self):
        return self.receipt_number


class DealerReceiptItem(models.Model):
    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)

    receipt = models.ForeignKey(
        DealerReceipt,
        on_delete=models.CASCADE,
        related_name="items",
    )
    raw_material = models.ForeignKey(
        RawMaterial,
        on_delete=models.PROTECT,
        related_name="receipt_items",
    )
    dealer_batch = models.ForeignKey(
        "batches.StockBatch",
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="receipt_items",
    )

    batch_number = models.CharField(max_length=128)
    quantity = models.DecimalField(max_digits=14, decimal_places=3)
    received_quantity = models.DecimalField(max_digits=14, decimal_places=3)
    expiry_date = models.DateField(null=True, blank=True)

    class Meta:
        ordering = ["batch_number"]
        constraints = [
            models.CheckConstraint(
                condition=Q(received_quantity__gte=0),
                name="chk_receiptitem_received_gte_zero",
            ),
        ]

    def __str__(self):
        return f"{self.receipt.receipt_number} | {self.batch_number} x {self.received_quantity}"
