# dealers/models/dealer.py

import uuid

from django.db import models


class Dealer(models.Model):
    """
    A dealer / installer that holds its own material stock.

    Guarantees:
    - Dealers are stable master-data
    - dealer_code is unique and is used in receipt numbers
    - Each dealer owns exactly one dealer batch pool
    """

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)

    dealer_code = models.CharField(max_length=50, unique=True)
    dealer_name = models.CharField(max_length=255)

    region = models.CharField(max_length=120, blank=True)
    address = models.TextField(blank=True)
    phone = models.CharField(max_length=50, blank=True)

    is_active = models.BooleanField(default=True)

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ["dealer_name"]

    def __str__(self):
        return f"{self.dealer_name} ({self.dealer_code})"
