# products/services/recipe_calculator.py

"""
RECIPE EXPANDER

Purpose:
- Turn (recipe, installation area) into per-material required quantities.

Rules:
- Only PER_SQM recipes are expanded. Any other calculation unit yields [].
- area <= 0 (or missing) yields [].
- total_quantity = quantity_per_unit x area, quantized to 3dp.

This module is read-only: it never touches stock.
"""

from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal
from typing import List, Optional
from uuid import UUID

from products.models import ProductRecipe
from products.services.quantities import to_quantity


@dataclass(frozen=True)
class MaterialRequirement:
    raw_material_id: UUID
    material_code: str
    material_name: str
    material_type: str
    unit: str
    quantity_per_unit: Decimal
    total_quantity: Decimal


def _to_area(value) -> Decimal:
    try:
        return to_quantity(value)
    except ValueError:
        return Decimal("0")


def expand_recipe(recipe: Optional[ProductRecipe], area) -> List[MaterialRequirement]:
    """
    Expand a recipe against an installation area.

    The recipe's items are read with their raw materials in one query and
    returned in material_code order.
    """
    if recipe is None:
        return []

    if recipe.calculation_unit != ProductRecipe.CalculationUnit.PER_SQM:
        return []

    area_value = _to_area(area)
    if area_value <= 0:
        return []

    items = recipe.items.select_related("raw_material").order_by("raw_material__material_code")

    requirements: List[MaterialRequirement] = []
    for item in items:
        material = item.raw_material
        requirements.append(
            MaterialRequirement(
                raw_material_id=material.id,
                material_code=material.material_code,
                material_name=material.material_name,
                material_type=material.material_type,
                unit=item.unit or material.unit,
                quantity_per_unit=item.quantity_per_unit,
                total_quantity=to_quantity(item.quantity_per_unit * area_value),
            )
        )

    return requirements
