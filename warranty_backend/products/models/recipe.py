# products/models/recipe.py

"""
PRODUCT RECIPE (BILL OF MATERIALS)

- One recipe per product.
- Each RecipeItem states how much of a raw material one calculation unit
  consumes (e.g. 1.1 m2 of film per m2 installed).
- Only PER_SQM recipes are expanded against an installation area.
"""

import uuid

from django.core.exceptions import ValidationError
from django.db import models
from django.db.models import Q

from .product import Product
from .raw_material import RawMaterial


class ProductRecipe(models.Model):
    class CalculationUnit(models.TextChoices):
        PER_SQM = "PER_SQM", "Per square metre"
        PER_UNIT = "PER_UNIT", "Per unit"

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)

    product = models.OneToOneField(
        Product,
        on_delete=models.CASCADE,
        related_name="recipe",
    )

    recipe_name = models.CharField(max_length=255, blank=True)
    calculation_unit = models.CharField(
        max_length=16,
        choices=CalculationUnit.choices,
        default=CalculationUnit.PER_SQM,
    )

    is_active = models.BooleanField(default=True)

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ["product__product_name"]

    def __str__(self):
        return self.recipe_name or f"Recipe for {self.product}"


class RecipeItem(models.Model):
    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)

    recipe = models.ForeignKey(
        ProductRecipe,
        on_delete=models.CASCADE,
        related_name="items",
    )
    raw_material = models.ForeignKey(
        RawMaterial,
        on_delete=models.PROTECT,
        related_name="recipe_items",
    )

    quantity_per_unit = models.DecimalField(max_digits=12, decimal_places=4)
    unit = models.CharField(max_length=16, blank=True)

    class Meta:
        ordering = ["raw_material__material_code"]
        constraints = [
            models.UniqueConstraint(
                fields=["recipe", "raw_material"],
                name="unique_material_per_recipe",
            ),
            models.CheckConstraint(
                condition=Q(quantity_per_unit__gt=0),
                name="chk_recipeitem_qty_gt_zero",
            ),
        ]

    def clean(self):
        if self.quantity_per_unit is not None and self.quantity_per_unit <= 0:
            raise ValidationError(
                {"quantity_per_unit": "quantity_per_unit must be greater than zero"}
            )

    def __str__(self):
        return f"{self.recipe} | {self.raw_material.material_code} x {self.quantity_per_unit}"
