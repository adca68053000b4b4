# warranties/models/warranty.py

"""
WARRANTY

- Issued by a dealer for an installed product over an installation area.
- Issuing consumes the dealer's material stock through the product recipe.
- material_usage stores the allocation record (per material, per batch) so
  the deduction can be reversed exactly on edit or deletion.
- material_usage is written ONLY by the warranty service.
"""

import uuid
from decimal import Decimal

from django.conf import settings
from django.db import models
from django.db.models import Q

from dealers.models import Dealer
from products.models import Product


class Warranty(models.Model):
    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)

    warranty_number = models.CharField(max_length=64, unique=True)

    dealer = models.ForeignKey(
        Dealer,
        on_delete=models.PROTECT,
        related_name="warranties",
    )
    product = models.ForeignKey(
        Product,
        on_delete=models.PROTECT,
        related_name="warranties",
    )

    customer_name = models.CharField(max_length=255)
    customer_phone = models.CharField(max_length=50, blank=True)
    customer_address = models.TextField(blank=True)

    installation_area = models.DecimalField(
        max_digits=12,
        decimal_places=3,
        default=Decimal("0"),
        help_text="Installed area in square metres",
    )

    warranty_date = models.DateField()
    warranty_period_months = models.PositiveIntegerField(default=12)
    expiry_date = models.DateField()

    material_usage = models.JSONField(default=dict, blank=True)

    created_by = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="warranties",
    )

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ["-warranty_date", "-created_at"]
        constraints = [
            models.CheckConstraint(
                condition=Q(installation_area__gte=0),
                name="chk_warranty_area_gte_zero",
            ),
        ]

    def __str__(self):
        return f"{self.warranty_number} | {self.customer_name}"
