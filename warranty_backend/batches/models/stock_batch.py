# batches/models/stock_batch.py

"""
STOCK BATCH (WAREHOUSE + DEALER POOLS)

Represents ONE physically distinct lot of a raw material.

CANONICAL MODEL:
- dealer IS NULL  -> warehouse pool batch
- dealer IS SET   -> that dealer's pool batch
- current_stock is mutated ONLY via batch services (commit / reversal / intake)
- status is ALWAYS derived on save (never user-controlled):
    current_stock == 0                         -> OUT_OF_STOCK
    expiry_date < today and current_stock > 0  -> EXPIRED
      (unless recertified after that expiry date had passed)
    otherwise                                  -> AVAILABLE
- received_at is the FIFO key (oldest received is consumed first)

Pool asymmetry:
- Warehouse batches persist at zero stock (OUT_OF_STOCK).
- Dealer batches are deleted when a receipt withdrawal empties them.
"""

import uuid
from decimal import Decimal

from django.conf import settings
from django.core.exceptions import ValidationError
from django.db import models
from django.db.models import Q
from django.utils import timezone

from dealers.models import Dealer
from products.models import RawMaterial


class StockBatch(models.Model):
    class Status(models.TextChoices):
        AVAILABLE = "AVAILABLE", "Available"
        OUT_OF_STOCK = "OUT_OF_STOCK", "Out of stock"
        EXPIRED = "EXPIRED", "Expired"

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)

    # Pool scope: NULL = warehouse
    dealer = models.ForeignKey(
        Dealer,
        on_delete=models.PROTECT,
        null=True,
        blank=True,
        related_name="stock_batches",
    )

    raw_material = models.ForeignKey(
        RawMaterial,
        on_delete=models.PROTECT,
        related_name="stock_batches",
    )

    batch_number = models.CharField(
        max_length=128,
        help_text="Supplier / delivery batch reference",
    )

    current_stock = models.DecimalField(
        max_digits=14,
        decimal_places=3,
        default=Decimal("0"),
        help_text="Remaining quantity (service-managed only)",
    )

    received_quantity = models.DecimalField(
        max_digits=14,
        decimal_places=3,
        default=Decimal("0"),
        help_text="Total quantity taken in by intake / receipts (service-managed only)",
    )

    received_at = models.DateTimeField(default=timezone.now)
    expiry_date = models.DateField(null=True, blank=True)

    supplier = models.CharField(max_length=255, blank=True)

    # Derived field: NEVER edited directly
    status = models.CharField(
        max_length=16,
        choices=Status.choices,
        default=Status.AVAILABLE,
    )

    # Recertification counters
    is_recertified = models.BooleanField(default=False)
    recertification_count = models.PositiveIntegerField(default=0)
    last_recertified_at = models.DateTimeField(null=True, blank=True)
    last_recertified_by = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="recertified_batches",
    )

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ["received_at", "created_at"]
        indexes = [
            models.Index(fields=["dealer", "raw_material", "received_at"], name="batches_sto_dealer__5b7f2e_idx"),
            models.Index(fields=["expiry_date"], name="batches_sto_expiry__c41d08_idx"),
            models.Index(fields=["status"], name="batches_sto_status_9e6a1b_idx"),
        ]
        constraints = [
            # Warehouse: batch_number is unique among warehouse rows.
            models.UniqueConstraint(
                fields=["batch_number"],
                condition=Q(dealer__isnull=True),
                name="unique_warehouse_batch_number",
            ),
            # Dealer: same batch_number may be held by many dealers,
            # but only once per (dealer, material).
            models.UniqueConstraint(
                fields=["dealer", "raw_material", "batch_number"],
                condition=Q(dealer__isnull=False),
                name="unique_dealer_material_batch",
            ),
            models.CheckConstraint(
                condition=Q(current_stock__gte=0),
                name="chk_stockbatch_stock_gte_zero",
            ),
        ]

    # -------------------------------------------------
    # VALIDATION
    # -------------------------------------------------

    def clean(self):
        if self.current_stock is None or self.current_stock < 0:
            raise ValidationError({"current_stock": "current_stock cannot be negative"})

        if not (self.batch_number or "").strip():
            raise ValidationError({"batch_number": "batch_number is required"})

    # -------------------------------------------------
    # DERIVED STATE
    # -------------------------------------------------

    def derive_status(self, today=None) -> str:
        today = today or timezone.localdate()

        if (self.current_stock or Decimal("0")) <= 0:
            return self.Status.OUT_OF_STOCK

        if self.expiry_date and self.expiry_date < today and not self.cleared_by_recertification:
            return self.Status.EXPIRED

        return self.Status.AVAILABLE

    def save(self, *args, **kwargs):
        self.batch_number = (self.batch_number or "").strip()
        self.status = self.derive_status()

        update_fields = kwargs.get("update_fields")
        if update_fields is not None:
            kwargs["update_fields"] = set(update_fields) | {"status", "updated_at"}

        self.clean()
        super().save(*args, **kwargs)

    # -------------------------------------------------
    # READ-ONLY HELPERS
    # -------------------------------------------------

    @property
    def is_warehouse(self) -> bool:
        return self.dealer_id is None

    @property
    def cleared_by_recertification(self) -> bool:
        """
        True when the last recertification happened after the current expiry
        date had already passed: an operator released the batch explicitly,
        so it is not treated as expired again.
        """
        if not (self.last_recertified_at and self.expiry_date):
            return False
        return timezone.localdate(self.last_recertified_at) > self.expiry_date

    @property
    def is_expired(self) -> bool:
        return bool(
            self.expiry_date
            and self.expiry_date < timezone.localdate()
            and not self.cleared_by_recertification
        )

    def __str__(self):
        owner = getattr(self.dealer, "dealer_code", None) or "WAREHOUSE"
        code = getattr(self.raw_material, "material_code", "MATERIAL")
        return f"{owner} | {code} | Batch {self.batch_number}"
