# products/models/product.py

import uuid

from django.db import models


class Product(models.Model):
    """
    Represents an installable product (the thing a warranty is issued for).

    STOCK MODEL (IMPORTANT):
    - Product itself does NOT consume stock
    - Material consumption is defined by its ProductRecipe
    - Stock lives in StockBatch (warehouse or dealer pool)
    """

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)

    product_code = models.CharField(max_length=64, unique=True, db_index=True)
    product_name = models.CharField(max_length=255, db_index=True)
    description = models.TextField(blank=True)

    is_active = models.BooleanField(default=True)

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ["product_name"]

    def __str__(self):
        return f"{self.product_name} ({self.product_code})"
