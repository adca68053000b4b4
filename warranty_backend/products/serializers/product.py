# products/serializers/product.py

"""
PRODUCT / MATERIAL / RECIPE SERIALIZERS

Purpose:
- Catalogue serializers for products, raw materials and recipes.
- RawMaterial.current_stock is read-only (service-managed warehouse aggregate).
- Recipes are written together with their items (nested create/replace).
"""

from django.db import transaction
from rest_framework import serializers

from products.models import Product, ProductRecipe, RawMaterial, RecipeItem


class RawMaterialSerializer(serializers.ModelSerializer):
    class Meta:
        model = RawMaterial
        fields = [
            "id",
            "material_code",
            "material_name",
            "material_type",
            "unit",
            "current_stock",
            "is_active",
            "created_at",
            "updated_at",
        ]
        read_only_fields = [
            "id",
            "current_stock",
            "created_at",
            "updated_at",
        ]


class ProductSerializer(serializers.ModelSerializer):
    has_recipe = serializers.SerializerMethodField(read_only=True)

    class Meta:
        model = Product
        fields = [
            "id",
            "product_code",
            "product_name",
            "description",
            "has_recipe",
            "is_active",
            "created_at",
            "updated_at",
        ]
        read_only_fields = [
            "id",
            "has_recipe",
            "created_at",
            "updated_at",
        ]

    def get_has_recipe(self, obj) -> bool:
        return hasattr(obj, "recipe")


class RecipeItemSerializer(serializers.ModelSerializer):
    raw_material_id = serializers.PrimaryKeyRelatedField(
        source="raw_material",
        queryset=RawMaterial.objects.filter(is_active=True),
    )
    material_code = serializers.CharField(source="raw_material.material_code", read_only=True)
    material_name = serializers.CharField(source="raw_material.material_name", read_only=True)

    class Meta:
        model = RecipeItem
        fields = [
            "id",
            "raw_material_id",
            "material_code",
            "material_name",
            "quantity_per_unit",
            "unit",
        ]
        read_only_fields = ["id", "material_code", "material_name"]

    def validate_quantity_per_unit(self, value):
        if value is None or value <= 0:
            raise serializers.ValidationError("quantity_per_unit must be greater than zero")
        return value


class ProductRecipeSerializer(serializers.ModelSerializer):
    product_id = serializers.PrimaryKeyRelatedField(
        source="product",
        queryset=Product.objects.all(),
    )
    product_name = serializers.CharField(source="product.product_name", read_only=True)
    items = RecipeItemSerializer(many=True)

    class Meta:
        model = ProductRecipe
        fields = [
            "id",
            "product_id",
            "product_name",
            "recipe_name",
            "calculation_unit",
            "is_active",
            "items",
            "created_at",
            "updated_at",
        ]
        read_only_fields = ["id", "product_name", "created_at", "updated_at"]

    def validate_items(self, value):
        seen = set()
        for row in value:
            material_id = row["raw_material"].id
            if material_id in seen:
                raise serializers.ValidationError("Each raw material may appear only once per recipe")
            seen.add(material_id)
        return value

    @transaction.atomic
    def create(self, validated_data):
        items = validated_data.pop("items", [])
        recipe = ProductRecipe.objects.create(**validated_data)
        self._write_items(recipe, items)
        return recipe

    @transaction.atomic
    def update(self, instance, validated_data):
        items = validated_data.pop("items", None)
        for field, value in validated_data.items():
            setattr(instance, field, value)
        instance.save()

        if items is not None:
            instance.items.all().delete()
            self._write_items(instance, items)

        return instance

    def _write_items(self, recipe, items):
        RecipeItem.objects.bulk_create(
            [RecipeItem(recipe=recipe, **row) for row in items]
        )


class RecipeExpandSerializer(serializers.Serializer):
    area = serializers.DecimalField(max_digits=12, decimal_places=3)


class MaterialRequirementSerializer(serializers.Serializer):
    raw_material_id = serializers.UUIDField()
    material_code = serializers.CharField()
    material_name = serializers.CharField()
    material_type = serializers.CharField(allow_blank=True)
    unit = serializers.CharField()
    quantity_per_unit = serializers.DecimalField(max_digits=12, decimal_places=4)
    total_quantity = serializers.DecimalField(max_digits=14, decimal_places=3)
