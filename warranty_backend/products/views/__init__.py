from .product import ProductRecipeViewSet, ProductViewSet, RawMaterialViewSet

__all__ = [
    "ProductRecipeViewSet",
    "ProductViewSet",
    "RawMaterialViewSet",
]
