# products/tests/test_recipe_calculator.py

from decimal import Decimal

from django.test import TestCase

from products.models import Product, ProductRecipe, RawMaterial, RecipeItem
from products.services.recipe_calculator import expand_recipe


class RecipeExpanderTests(TestCase):
    """
    GUARANTEES:
    - PER_SQM recipes expand to quantity_per_unit x area per material
    - Non per-area recipes expand to nothing
    - Zero / negative / missing area expands to nothing
    """

    def setUp(self):
        self.film = RawMaterial.objects.create(
            material_code="FILM-01",
            material_name="Clear film",
            material_type="FILM",
            unit="m2",
        )
        self.glue = RawMaterial.objects.create(
            material_code="ADH-01",
            material_name="Adhesive",
            material_type="ADHESIVE",
            unit="l",
        )
        self.product = Product.objects.create(product_code="PPF", product_name="Paint protection")
        self.recipe = ProductRecipe.objects.create(
            product=self.product,
            recipe_name="PPF per m2",
            calculation_unit=ProductRecipe.CalculationUnit.PER_SQM,
        )
        RecipeItem.objects.create(recipe=self.recipe, raw_material=self.film, quantity_per_unit=Decimal("1.1"))
        RecipeItem.objects.create(recipe=self.recipe, raw_material=self.glue, quantity_per_unit=Decimal("0.05"))

    def test_expands_each_item_by_area(self):
        requirements = expand_recipe(self.recipe, Decimal("12"))

        by_code = {r.material_code: r for r in requirements}
        self.assertEqual(set(by_code), {"FILM-01", "ADH-01"})
        self.assertEqual(by_code["FILM-01"].total_quantity, Decimal("13.200"))
        self.assertEqual(by_code["ADH-01"].total_quantity, Decimal("0.600"))
        self.assertEqual(by_code["FILM-01"].raw_material_id, self.film.id)
        self.assertEqual(by_code["ADH-01"].unit, "l")

    def test_requirements_are_ordered_by_material_code(self):
        codes = [r.material_code for r in expand_recipe(self.recipe, "3")]
        self.assertEqual(codes, ["ADH-01", "FILM-01"])

    def test_string_area_is_accepted(self):
        requirements = expand_recipe(self.recipe, "2.5")
        film = next(r for r in requirements if r.material_code == "FILM-01")
        self.assertEqual(film.total_quantity, Decimal("2.750"))

    def test_zero_area_expands_to_nothing(self):
        self.assertEqual(expand_recipe(self.recipe, 0), [])

    def test_negative_area_expands_to_nothing(self):
        self.assertEqual(expand_recipe(self.recipe, Decimal("-4")), [])

    def test_missing_area_expands_to_nothing(self):
        self.assertEqual(expand_recipe(self.recipe, None), [])
        self.assertEqual(expand_recipe(self.recipe, "not-a-number"), [])
        self.assertEqual(expand_recipe(self.recipe, "NaN"), [])
        self.assertEqual(expand_recipe(self.recipe, "Infinity"), [])

    def test_non_per_area_recipe_expands_to_nothing(self):
        self.recipe.calculation_unit = ProductRecipe.CalculationUnit.PER_UNIT
        self.recipe.save()

        self.assertEqual(expand_recipe(self.recipe, Decimal("10")), [])

    def test_missing_recipe_expands_to_nothing(self):
        self.assertEqual(expand_recipe(None, Decimal("10")), [])
