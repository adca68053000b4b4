# products/admin.py
"""
Admin rules:

- Products, raw materials and recipes are plain master-data.
- RawMaterial.current_stock is read-only here; warehouse stock only moves
  through batch intake / delivery services.
"""

from django.contrib import admin

from products.models import Product, ProductRecipe, RawMaterial, RecipeItem


@admin.register(Product)
class ProductAdmin(admin.ModelAdmin):
    list_display = ("product_code", "product_name", "is_active")
    search_fields = ("product_code", "product_name")
    list_filter = ("is_active",)


@admin.register(RawMaterial)
class RawMaterialAdmin(admin.ModelAdmin):
    list_display = ("material_code", "material_name", "material_type", "unit", "current_stock", "is_active")
    search_fields = ("material_code", "material_name")
    list_filter = ("material_type", "is_active")
    readonly_fields = ("current_stock",)


class RecipeItemInline(admin.TabularInline):
    model = RecipeItem
    extra = 1
    autocomplete_fields = ("raw_material",)


@admin.register(ProductRecipe)
class ProductRecipeAdmin(admin.ModelAdmin):
    list_display = ("product", "recipe_name", "calculation_unit", "is_active")
    list_filter = ("calculation_unit", "is_active")
    inlines = [RecipeItemInline]
