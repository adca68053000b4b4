# products/tests/test_catalogue_api.py

from decimal import Decimal

from django.contrib.auth import get_user_model
from django.test import TestCase
from rest_framework.test import APIClient

from products.models import Product, ProductRecipe, RawMaterial

User = get_user_model()


class CatalogueApiTests(TestCase):
    """
    GUARANTEES:
    - Raw material stock is never writable through the API
    - Recipes are written with their items in one request
    - Recipe expansion is read-only
    """

    def setUp(self):
        self.client = APIClient()
        self.user = User.objects.create_user(username="planner", password="pass")
        self.client.force_authenticate(user=self.user)

        self.film = RawMaterial.objects.create(material_code="FILM-01", material_name="Clear film")
        self.product = Product.objects.create(product_code="PPF", product_name="Paint protection")

    def test_material_stock_is_read_only(self):
        response = self.client.post(
            "/api/products/raw-materials/",
            {"material_code": "ADH-01", "material_name": "Adhesive", "current_stock": "50"},
            format="json",
        )

        self.assertEqual(response.status_code, 201, response.data)
        self.assertEqual(RawMaterial.objects.get(material_code="ADH-01").current_stock, Decimal("0"))

    def test_recipe_with_items_and_expand(self):
        response = self.client.post(
            "/api/products/recipes/",
            {
                "product_id": str(self.product.id),
                "recipe_name": "PPF per m2",
                "calculation_unit": "PER_SQM",
                "items": [{"raw_material_id": str(self.film.id), "quantity_per_unit": "1.1"}],
            },
            format="json",
        )
        self.assertEqual(response.status_code, 201, response.data)

        recipe = ProductRecipe.objects.get(product=self.product)
        self.assertEqual(recipe.items.count(), 1)

        expanded = self.client.post(
            f"/api/products/recipes/{recipe.id}/expand/",
            {"area": "12"},
            format="json",
        )
        self.assertEqual(expanded.status_code, 200)
        self.assertEqual(expanded.data[0]["material_code"], "FILM-01")
        self.assertEqual(expanded.data[0]["total_quantity"], "13.200")

    def test_duplicate_recipe_material_is_rejected(self):
        response = self.client.post(
            "/api/products/recipes/",
            {
                "product_id": str(self.product.id),
                "items": [
                    {"raw_material_id": str(self.film.id), "quantity_per_unit": "1"},
                    {"raw_material_id": str(self.film.id), "quantity_per_unit": "2"},
                ],
            },
            format="json",
        )

        self.assertEqual(response.status_code, 400)
        self.assertFalse(ProductRecipe.objects.exists())

    def test_product_lists_recipe_flag(self):
        response = self.client.get("/api/products/products/")

        self.assertEqual(response.status_code, 200)
        self.assertFalse(response.data["results"][0]["has_recipe"])
