# products/urls.py

"""
PRODUCTS URLS

Purpose:
- Register catalogue routes under /api/products/
"""

from django.urls import include, path
from rest_framework.routers import DefaultRouter

from products.views import ProductRecipeViewSet, ProductViewSet, RawMaterialViewSet

router = DefaultRouter()

router.register(r"products", ProductViewSet, basename="products")
router.register(r"raw-materials", RawMaterialViewSet, basename="raw-materials")
router.register(r"recipes", ProductRecipeViewSet, basename="recipes")

urlpatterns = [
    path("", include(router.urls)),
]
