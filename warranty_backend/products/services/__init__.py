from .quantities import to_quantity
from .recipe_calculator import MaterialRequirement, expand_recipe

__all__ = [
    "to_quantity",
    "MaterialRequirement",
    "expand_recipe",
]
