# batches/tests/test_stock_commit.py

import json
from datetime import timedelta
from decimal import Decimal

from django.test import TestCase
from django.utils import timezone

from batches.models import StockBatch
from batches.services.allocation import commit, expand_and_allocate, reverse
from batches.services.allocation_record import StockLine
from batches.services.exceptions import (
    ConcurrencyAbortError,
    MissingBatchError,
    ShortfallError,
)
from batches.services.intake import receive_into_pool, receive_warehouse_batch
from batches.services.pools import BatchPool
from batches.services.stock_commit import commit_movements, withdraw_from_pool
from dealers.models import Dealer
from products.models import Product, ProductRecipe, RawMaterial, RecipeItem


class StockCommitTests(TestCase):
    """
    Tests for atomic deduction and exact reversal.

    GUARANTEES:
    - Commit draws oldest-received batches first
    - Stock never goes negative
    - A failed commit leaves every batch untouched
    - Reversal restores every batch to its pre-commit stock
    - Warehouse commits move the material aggregate, dealer commits do not
    """

    def setUp(self):
        self.now = timezone.now()

        self.film = RawMaterial.objects.create(
            material_code="FILM-01",
            material_name="Clear film",
            material_type="FILM",
        )
        product = Product.objects.create(product_code="PPF", product_name="Paint protection")
        self.recipe = ProductRecipe.objects.create(product=product)
        RecipeItem.objects.create(recipe=self.recipe, raw_material=self.film, quantity_per_unit=Decimal("1"))

        # ----------------------------------
        # Warehouse batches (older first)
        # ----------------------------------
        self.b1 = receive_warehouse_batch(
            raw_material=self.film,
            batch_number="B1",
            quantity=5,
            received_at=self.now - timedelta(days=2),
        )
        self.b2 = receive_warehouse_batch(
            raw_material=self.film,
            batch_number="B2",
            quantity=10,
            received_at=self.now - timedelta(days=1),
        )

        self.dealer = Dealer.objects.create(dealer_code="DLR-001", dealer_name="North Dealer")

    def _stock(self, batch):
        batch.refresh_from_db()
        return batch.current_stock

    def _aggregate(self):
        self.film.refresh_from_db()
        return self.film.current_stock

    # ======================================================
    # DEDUCTION
    # ======================================================

    def test_intake_builds_warehouse_aggregate(self):
        self.assertEqual(self._aggregate(), Decimal("15"))

    def test_commit_draws_fifo_and_moves_aggregate(self):
        plan = expand_and_allocate(recipe=self.recipe, area=12)
        record = commit(plan, reference="TEST-1")

        self.assertEqual(self._stock(self.b1), Decimal("0"))
        self.assertEqual(self._stock(self.b2), Decimal("3"))
        self.assertEqual(self.b1.status, StockBatch.Status.OUT_OF_STOCK)
        self.assertEqual(self.b2.status, StockBatch.Status.AVAILABLE)
        self.assertEqual(self._aggregate(), Decimal("3"))

        entry = record["FILM-01"]
        self.assertEqual(entry["batch_number"], "B1, B2")
        self.assertEqual([b["quantity_used"] for b in entry["batches"]], ["5.000", "7.000"])

    def test_emptied_warehouse_batch_is_kept(self):
        commit(expand_and_allocate(recipe=self.recipe, area=5))

        self.assertTrue(StockBatch.objects.filter(pk=self.b1.pk).exists())
        self.assertEqual(self._stock(self.b1), Decimal("0"))

    def test_shortfall_plan_is_refused_untouched(self):
        plan = expand_and_allocate(recipe=self.recipe, area=16)

        self.assertFalse(plan.is_sufficient)
        with self.assertRaises(ShortfallError):
            commit(plan)

        self.assertEqual(self._stock(self.b1), Decimal("5"))
        self.assertEqual(self._stock(self.b2), Decimal("10"))
        self.assertEqual(self._aggregate(), Decimal("15"))

    def test_concurrent_change_aborts_whole_commit(self):
        plan = expand_and_allocate(recipe=self.recipe, area=12)

        # Another transaction consumed part of B2 after planning.
        self.b2.refresh_from_db()
        self.b2.current_stock = Decimal("4")
        self.b2.save(update_fields=["current_stock"])

        with self.assertRaises(ConcurrencyAbortError) as ctx:
            commit(plan)

        self.assertEqual(ctx.exception.batch_id, self.b2.id)
        self.assertEqual(self._stock(self.b1), Decimal("5"))
        self.assertEqual(self._stock(self.b2), Decimal("4"))
        self.assertEqual(self._aggregate(), Decimal("15"))

    def test_missing_batch_aborts_whole_commit(self):
        plan = expand_and_allocate(recipe=self.recipe, area=12)
        StockBatch.objects.filter(pk=self.b2.pk).delete()

        with self.assertRaises(MissingBatchError):
            commit(plan)

        self.assertEqual(self._stock(self.b1), Decimal("5"))
        self.assertEqual(self._aggregate(), Decimal("15"))

    def test_commit_movements_rejects_overdraw(self):
        with self.assertRaises(ConcurrencyAbortError):
            commit_movements(BatchPool.warehouse(), [StockLine(batch_id=self.b1.id, quantity=Decimal("6"))])

        self.assertEqual(self._stock(self.b1), Decimal("5"))

    # ======================================================
    # REVERSAL
    # ======================================================

    def test_reverse_restores_exactly(self):
        record = commit(expand_and_allocate(recipe=self.recipe, area=12))

        reverse(record)

        self.assertEqual(self._stock(self.b1), Decimal("5"))
        self.assertEqual(self._stock(self.b2), Decimal("10"))
        self.assertEqual(self.b1.status, StockBatch.Status.AVAILABLE)
        self.assertEqual(self._aggregate(), Decimal("15"))

    def test_reverse_accepts_serialized_record(self):
        record = commit(expand_and_allocate(recipe=self.recipe, area=3))
        reverse(json.dumps(record))

        self.assertEqual(self._stock(self.b1), Decimal("5"))

    def test_reverse_empty_record_is_noop(self):
        self.assertEqual(reverse({}), [])
        self.assertEqual(self._aggregate(), Decimal("15"))

    # ======================================================
    # DEALER POOL
    # ======================================================

    def test_dealer_commit_leaves_warehouse_aggregate_alone(self):
        pool = BatchPool.for_dealer(self.dealer)
        dealer_batch = receive_into_pool(pool, raw_material=self.film, batch_number="B1", quantity=4)

        record = commit(expand_and_allocate(recipe=self.recipe, area=3, dealer=self.dealer))

        self.assertEqual(self._stock(dealer_batch), Decimal("1"))
        self.assertEqual(self._stock(self.b1), Decimal("5"))
        self.assertEqual(self._aggregate(), Decimal("15"))
        self.assertEqual(record["FILM-01"]["batches"][0]["batch_id"], str(dealer_batch.id))

    def test_dealer_plan_ignores_warehouse_stock(self):
        plan = expand_and_allocate(recipe=self.recipe, area=1, dealer=self.dealer)

        self.assertFalse(plan.is_sufficient)
        self.assertEqual(plan.shortfalls[0].total_available, Decimal("0"))

    def test_reverse_recreates_deleted_dealer_batch(self):
        pool = BatchPool.for_dealer(self.dealer)
        expiry = timezone.localdate() + timedelta(days=100)
        dealer_batch = receive_into_pool(
            pool, raw_material=self.film, batch_number="D-7", quantity=2, expiry_date=expiry
        )
        original_id = dealer_batch.id

        record = commit(expand_and_allocate(recipe=self.recipe, area=2, dealer=self.dealer))
        self.assertEqual(record["FILM-01"]["batches"][0]["expiry_date"], expiry.isoformat())

        # Empty row is pruned by a withdrawal (receipt deletion).
        withdraw_from_pool(pool, [StockLine(batch_id=original_id, quantity=Decimal("2"))])
        self.assertFalse(StockBatch.objects.filter(pk=original_id).exists())

        reverse(json.loads(json.dumps(record)), dealer=self.dealer)

        recreated = StockBatch.objects.get(pk=original_id)
        self.assertEqual(recreated.dealer_id, self.dealer.id)
        self.assertEqual(recreated.batch_number, "D-7")
        self.assertEqual(recreated.current_stock, Decimal("2"))
        self.assertEqual(recreated.expiry_date, expiry)
        self.assertEqual(recreated.status, StockBatch.Status.AVAILABLE)

    def test_receive_into_pool_tops_up_existing_batch(self):
        pool = BatchPool.for_dealer(self.dealer)
        first = receive_into_pool(pool, raw_material=self.film, batch_number="B1", quantity=2)
        second = receive_into_pool(pool, raw_material=self.film, batch_number="B1", quantity=3)

        self.assertEqual(first.id, second.id)
        self.assertEqual(self._stock(first), Decimal("5"))

    # ======================================================
    # WITHDRAWAL
    # ======================================================

    def test_withdraw_deletes_emptied_dealer_batch(self):
        pool = BatchPool.for_dealer(self.dealer)
        batch = receive_into_pool(pool, raw_material=self.film, batch_number="B1", quantity=5)

        withdrawn = withdraw_from_pool(pool, [StockLine(batch_id=batch.id, quantity=Decimal("5"))])

        self.assertEqual(withdrawn, Decimal("5"))
        self.assertFalse(StockBatch.objects.filter(pk=batch.pk).exists())

    def test_withdraw_is_clamped_at_zero(self):
        pool = BatchPool.for_dealer(self.dealer)
        batch = receive_into_pool(pool, raw_material=self.film, batch_number="B1", quantity=5)
        commit_movements(pool, [StockLine(batch_id=batch.id, quantity=Decimal("3"))])

        withdrawn = withdraw_from_pool(pool, [StockLine(batch_id=batch.id, quantity=Decimal("5"))])

        self.assertEqual(withdrawn, Decimal("2"))
        self.assertFalse(StockBatch.objects.filter(pk=batch.pk).exists())

    def test_warehouse_withdrawal_keeps_zero_row(self):
        pool = BatchPool.warehouse()

        withdraw_from_pool(pool, [StockLine(batch_id=self.b1.id, quantity=Decimal("5"))])

        self.assertEqual(self._stock(self.b1), Decimal("0"))
        self.assertEqual(self._aggregate(), Decimal("10"))
