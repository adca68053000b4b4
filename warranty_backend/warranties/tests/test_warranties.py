# warranties/tests/test_warranties.py

from datetime import date, timedelta
from decimal import Decimal
from unittest.mock import patch

from django.contrib.auth import get_user_model
from django.test import SimpleTestCase, TestCase
from django.utils import timezone
from rest_framework.test import APIClient

from batches.models import StockBatch
from batches.services.exceptions import ShortfallError
from dealers.models import Dealer
from products.models import Product, ProductRecipe, RawMaterial, RecipeItem
from warranties.models import Warranty
from warranties.services import delete_warranty, issue_warranty, reallocate_warranty
from warranties.services.exceptions import WarrantyError
from warranties.services.warranty_service import add_months

User = get_user_model()


class AddMonthsTests(SimpleTestCase):
    def test_plain_month_step(self):
        self.assertEqual(add_months(date(2026, 1, 15), 12), date(2027, 1, 15))

    def test_clamps_to_month_end(self):
        self.assertEqual(add_months(date(2026, 1, 31), 1), date(2026, 2, 28))
        self.assertEqual(add_months(date(2027, 12, 31), 2), date(2028, 2, 29))


class WarrantyMaterialTests(TestCase):
    """
    Tests for warranty-driven material consumption.

    GUARANTEES:
    - Issuing a warranty consumes the issuing dealer's batches FIFO
    - material_usage records exactly what was deducted
    - A shortfall creates nothing and deducts nothing
    - A duplicate warranty number deducts nothing, even when it slips past the pre-check
    - Re-allocation is all-or-nothing (old allocation kept on failure)
    - Deleting a warranty restores the dealer's batches
    """

    def setUp(self):
        self.user = User.objects.create_user(username="installer", password="pass")
        now = timezone.now()

        self.film = RawMaterial.objects.create(material_code="FILM-01", material_name="Clear film")
        self.glue = RawMaterial.objects.create(material_code="ADH-01", material_name="Adhesive", unit="l")

        self.product = Product.objects.create(product_code="PPF", product_name="Paint protection")
        recipe = ProductRecipe.objects.create(product=self.product)
        RecipeItem.objects.create(recipe=recipe, raw_material=self.film, quantity_per_unit=Decimal("1"))
        RecipeItem.objects.create(recipe=recipe, raw_material=self.glue, quantity_per_unit=Decimal("0.1"))

        self.dealer = Dealer.objects.create(dealer_code="DLR-001", dealer_name="North Dealer")
        self.other_dealer = Dealer.objects.create(dealer_code="DLR-002", dealer_name="South Dealer")

        # ----------------------------------
        # Dealer pool (older first)
        # ----------------------------------
        self.f1 = self._dealer_batch(self.film, "F-1", "5", now - timedelta(days=3))
        self.f2 = self._dealer_batch(self.film, "F-2", "10", now - timedelta(days=1))
        self.g1 = self._dealer_batch(self.glue, "G-1", "2", now - timedelta(days=2))

        # Warehouse + other dealer stock must never be touched.
        self.warehouse_film = StockBatch.objects.create(
            raw_material=self.film, batch_number="W-1", current_stock=Decimal("100")
        )
        self.other_film = self._dealer_batch(self.film, "F-1", "50", now - timedelta(days=9), dealer=self.other_dealer)

    def _dealer_batch(self, material, number, stock, received_at, dealer=None):
        return StockBatch.objects.create(
            dealer=dealer or self.dealer,
            raw_material=material,
            batch_number=number,
            current_stock=Decimal(stock),
            received_at=received_at,
        )

    def _issue(self, area, number="W-0001"):
        return issue_warranty(
            dealer=self.dealer,
            product=self.product,
            warranty_number=number,
            customer_name="A. Customer",
            installation_area=area,
            warranty_date=date(2026, 1, 31),
            user=self.user,
        )

    def _stock(self, batch):
        batch.refresh_from_db()
        return batch.current_stock

    # ======================================================
    # ISSUE
    # ======================================================

    def test_issue_consumes_dealer_pool_fifo(self):
        warranty = self._issue("12")

        self.assertEqual(self._stock(self.f1), Decimal("0"))
        self.assertEqual(self._stock(self.f2), Decimal("3"))
        self.assertEqual(self._stock(self.g1), Decimal("0.8"))
        self.assertEqual(self._stock(self.warehouse_film), Decimal("100"))
        self.assertEqual(self._stock(self.other_film), Decimal("50"))

        usage = warranty.material_usage
        self.assertEqual(set(usage), {"FILM-01", "ADH-01"})
        self.assertEqual(usage["FILM-01"]["batch_number"], "F-1, F-2")
        self.assertEqual(usage["ADH-01"]["total_quantity"], "1.200")

    def test_issue_sets_expiry_from_period(self):
        warranty = self._issue("1")
        self.assertEqual(warranty.expiry_date, date(2027, 1, 31))
        self.assertEqual(warranty.created_by, self.user)

    def test_shortfall_creates_nothing(self):
        with self.assertRaises(ShortfallError) as ctx:
            self._issue("16")

        self.assertEqual({s.material_code for s in ctx.exception.shortfalls}, {"FILM-01"})
        self.assertFalse(Warranty.objects.exists())
        self.assertEqual(self._stock(self.f1), Decimal("5"))
        self.assertEqual(self._stock(self.f2), Decimal("10"))
        self.assertEqual(self._stock(self.g1), Decimal("2"))

    def test_duplicate_number_is_rejected(self):
        self._issue("1")
        with self.assertRaises(WarrantyError):
            self._issue("1")

        self.assertEqual(self._stock(self.f1), Decimal("4"))

    def test_number_taken_concurrently_rolls_back_deduction(self):
        self._issue("1")

        # Pre-check misses the row, as it would when another request commits it first.
        with patch("warranties.services.warranty_service._number_taken", return_value=False):
            with self.assertRaises(WarrantyError):
                self._issue("1")

        self.assertEqual(Warranty.objects.count(), 1)
        self.assertEqual(self._stock(self.f1), Decimal("4"))
        self.assertEqual(self._stock(self.g1), Decimal("1.9"))

    def test_non_finite_area_is_rejected(self):
        with self.assertRaises(WarrantyError):
            self._issue("NaN")

        self.assertFalse(Warranty.objects.exists())
        self.assertEqual(self._stock(self.f1), Decimal("5"))

    def test_product_without_recipe_consumes_nothing(self):
        bare = Product.objects.create(product_code="CARE", product_name="Care kit")

        warranty = issue_warranty(
            dealer=self.dealer,
            product=bare,
            warranty_number="W-0100",
            customer_name="B. Customer",
            installation_area="10",
        )

        self.assertEqual(warranty.material_usage, {})
        self.assertEqual(self._stock(self.f1), Decimal("5"))

    # ======================================================
    # RE-ALLOCATION
    # ======================================================

    def test_reallocate_replaces_allocation(self):
        warranty = self._issue("4")

        warranty = reallocate_warranty(warranty=warranty, installation_area="7")

        self.assertEqual(warranty.installation_area, Decimal("7"))
        self.assertEqual(self._stock(self.f1), Decimal("0"))
        self.assertEqual(self._stock(self.f2), Decimal("8"))
        self.assertEqual(warranty.material_usage["FILM-01"]["total_quantity"], "7.000")

    def test_reallocate_shortfall_keeps_original(self):
        warranty = self._issue("4")
        original_usage = warranty.material_usage

        with self.assertRaises(ShortfallError):
            reallocate_warranty(warranty=warranty, installation_area="30")

        warranty.refresh_from_db()
        self.assertEqual(warranty.installation_area, Decimal("4"))
        self.assertEqual(warranty.material_usage, original_usage)
        self.assertEqual(self._stock(self.f1), Decimal("1"))
        self.assertEqual(self._stock(self.f2), Decimal("10"))

    # ======================================================
    # DELETE
    # ======================================================

    def test_delete_restores_dealer_batches(self):
        warranty = self._issue("12")

        delete_warranty(warranty=warranty)

        self.assertFalse(Warranty.objects.exists())
        self.assertEqual(self._stock(self.f1), Decimal("5"))
        self.assertEqual(self._stock(self.f2), Decimal("10"))
        self.assertEqual(self._stock(self.g1), Decimal("2"))
        self.assertEqual(self.f1.status, StockBatch.Status.AVAILABLE)


class WarrantyApiTests(TestCase):
    """
    GUARANTEES:
    - Issue answers 201 with the allocation record
    - Insufficient dealer stock answers 400 with shortfalls
    """

    def setUp(self):
        self.client = APIClient()
        self.user = User.objects.create_user(username="installer", password="pass")
        self.client.force_authenticate(user=self.user)

        film = RawMaterial.objects.create(material_code="FILM-01", material_name="Clear film")
        self.product = Product.objects.create(product_code="PPF", product_name="Paint protection")
        recipe = ProductRecipe.objects.create(product=self.product)
        RecipeItem.objects.create(recipe=recipe, raw_material=film, quantity_per_unit=Decimal("1"))

        self.dealer = Dealer.objects.create(dealer_code="DLR-001", dealer_name="North Dealer")
        StockBatch.objects.create(
            dealer=self.dealer, raw_material=film, batch_number="F-1", current_stock=Decimal("5")
        )

    def _payload(self, area):
        return {
            "warranty_number": "W-9000",
            "dealer_id": str(self.dealer.id),
            "product_id": str(self.product.id),
            "customer_name": "C. Customer",
            "installation_area": area,
        }

    def test_issue(self):
        response = self.client.post("/api/warranties/warranties/", self._payload("3"), format="json")

        self.assertEqual(response.status_code, 201, response.data)
        self.assertEqual(response.data["material_usage"]["FILM-01"]["total_quantity"], "3.000")

    def test_issue_shortfall(self):
        response = self.client.post("/api/warranties/warranties/", self._payload("6"), format="json")

        self.assertEqual(response.status_code, 400)
        self.assertEqual(response.data["shortfalls"][0]["material_code"], "FILM-01")
        self.assertFalse(Warranty.objects.exists())
