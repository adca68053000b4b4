# products/models/raw_material.py

"""
RAW MATERIAL (CATALOGUE + WAREHOUSE AGGREGATE)

- material_code is the stable key used in persisted allocation records.
- current_stock is a derived warehouse counter kept alongside the warehouse
  batches. It is mutated ONLY by batch services (intake / commit / reversal),
  inside the same transaction as the batch rows.
- Dealer stock is never counted here.
"""

import uuid
from decimal import Decimal

from django.db import models
from django.db.models import Q


class RawMaterial(models.Model):
    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)

    material_code = models.CharField(max_length=64, unique=True, db_index=True)
    material_name = models.CharField(max_length=255)
    material_type = models.CharField(
        max_length=64,
        blank=True,
        help_text="Free-form category, e.g. FILM, ADHESIVE, PRIMER",
    )
    unit = models.CharField(max_length=16, default="m2")

    current_stock = models.DecimalField(
        max_digits=14,
        decimal_places=3,
        default=Decimal("0"),
        help_text="Warehouse aggregate (service-managed only)",
    )

    is_active = models.BooleanField(default=True)

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ["material_code"]
        constraints = [
            models.CheckConstraint(
                condition=Q(current_stock__gte=0),
                name="chk_rawmaterial_stock_gte_zero",
            ),
        ]

    def __str__(self):
        return f"{self.material_code} - {self.material_name}"
