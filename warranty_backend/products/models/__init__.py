"""
PATH: products/models/__init__.py

Products models export surface.
"""

from .product import Product
from .raw_material import RawMaterial
from .recipe import ProductRecipe, RecipeItem

__all__ = [
    "Product",
    "RawMaterial",
    "ProductRecipe",
    "RecipeItem",
]
