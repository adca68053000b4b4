# products/views/product.py

"""
PRODUCT CATALOGUE VIEWSETS

Purpose:
- Products, raw materials and recipes (BOM) endpoints.
- Recipe preview: POST /api/products/recipes/{id}/expand/ returns the
  per-material requirement for an installation area (read-only, no stock touched).

Key rule alignment:
- RawMaterial.current_stock is never writable through the API.
"""

from django.db.models import Q
from drf_spectacular.utils import extend_schema
from rest_framework import status, viewsets
from rest_framework.decorators import action
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response

from products.models import Product, ProductRecipe, RawMaterial
from products.serializers import (
    MaterialRequirementSerializer,
    ProductRecipeSerializer,
    ProductSerializer,
    RawMaterialSerializer,
    RecipeExpandSerializer,
)
from products.services.recipe_calculator import expand_recipe


class ProductViewSet(viewsets.ModelViewSet):
    serializer_class = ProductSerializer
    permission_classes = [IsAuthenticated]
    filterset_fields = ["is_active"]

    def get_queryset(self):
        qs = Product.objects.select_related("recipe").order_by("product_name")

        q = (self.request.query_params.get("q") or "").strip()
        if q:
            qs = qs.filter(Q(product_name__icontains=q) | Q(product_code__icontains=q))

        return qs


class RawMaterialViewSet(viewsets.ModelViewSet):
    serializer_class = RawMaterialSerializer
    permission_classes = [IsAuthenticated]
    filterset_fields = ["material_type", "is_active"]

    def get_queryset(self):
        qs = RawMaterial.objects.all().order_by("material_code")

        q = (self.request.query_params.get("q") or "").strip()
        if q:
            qs = qs.filter(Q(material_name__icontains=q) | Q(material_code__icontains=q))

        return qs


class ProductRecipeViewSet(viewsets.ModelViewSet):
    serializer_class = ProductRecipeSerializer
    permission_classes = [IsAuthenticated]
    filterset_fields = ["calculation_unit", "is_active"]

    def get_queryset(self):
        return (
            ProductRecipe.objects.select_related("product")
            .prefetch_related("items__raw_material")
            .order_by("product__product_name")
        )

    @extend_schema(
        request=RecipeExpandSerializer,
        responses={200: MaterialRequirementSerializer(many=True)},
    )
    @action(detail=True, methods=["post"], url_path="expand")
    def expand(self, request, pk=None):
        """
        POST /api/products/recipes/{id}/expand/

        Body: {"area": "12.5"}
        """
        recipe = self.get_object()

        serializer = RecipeExpandSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        requirements = expand_recipe(recipe, serializer.validated_data["area"])
        return Response(
            MaterialRequirementSerializer(requirements, many=True).data,
            status=status.HTTP_200_OK,
        )
