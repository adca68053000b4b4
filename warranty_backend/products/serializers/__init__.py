from .product import (
    MaterialRequirementSerializer,
    ProductRecipeSerializer,
    ProductSerializer,
    RawMaterialSerializer,
    RecipeExpandSerializer,
    RecipeItemSerializer,
)

__all__ = [
    "MaterialRequirementSerializer",
    "ProductRecipeSerializer",
    "ProductSerializer",
    "RawMaterialSerializer",
    "RecipeExpandSerializer",
    "RecipeItemSerializer",
]
