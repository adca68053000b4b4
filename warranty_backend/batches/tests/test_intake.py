# batches/tests/test_intake.py

from decimal import Decimal

from django.core.exceptions import ValidationError
from django.test import TestCase

from batches.models import StockBatch
from batches.services.allocation_record import StockLine
from batches.services.exceptions import IntakeError
from batches.services.intake import (
    adjust_warehouse_intake,
    cancel_warehouse_intake,
    receive_into_pool,
    receive_warehouse_batch,
)
from batches.services.pools import BatchPool
from batches.services.stock_commit import commit_movements, restore_movements
from dealers.models import Dealer
from products.models import RawMaterial


class WarehouseIntakeCorrectionTests(TestCase):
    """
    GUARANTEES:
    - Intake records the received quantity on the batch
    - An untouched intake can be cancelled or corrected, moving the aggregate
    - An intake that has been drawn from is locked
    - Dealer batches are not warehouse intakes
    """

    def setUp(self):
        self.film = RawMaterial.objects.create(material_code="FILM-01", material_name="Clear film")
        self.batch = receive_warehouse_batch(raw_material=self.film, batch_number="B1", quantity=10)

    def _aggregate(self):
        self.film.refresh_from_db()
        return self.film.current_stock

    def test_intake_records_received_quantity(self):
        self.assertEqual(self.batch.received_quantity, Decimal("10"))
        self.assertEqual(self._aggregate(), Decimal("10"))

    # ======================================================
    # CANCEL
    # ======================================================

    def test_cancel_removes_batch_and_aggregate(self):
        cancel_warehouse_intake(batch=self.batch)

        self.assertFalse(StockBatch.objects.filter(pk=self.batch.pk).exists())
        self.assertEqual(self._aggregate(), Decimal("0"))

    def test_cancel_refused_once_batch_was_used(self):
        commit_movements(BatchPool.warehouse(), [StockLine(batch_id=self.batch.id, quantity=Decimal("3"))])

        with self.assertRaises(IntakeError):
            cancel_warehouse_intake(batch=self.batch)

        self.batch.refresh_from_db()
        self.assertEqual(self.batch.current_stock, Decimal("7"))
        self.assertEqual(self._aggregate(), Decimal("7"))

    def test_cancel_allowed_after_full_restore(self):
        pool = BatchPool.warehouse()
        commit_movements(pool, [StockLine(batch_id=self.batch.id, quantity=Decimal("3"))])
        restore_movements(pool, [StockLine(batch_id=self.batch.id, quantity=Decimal("3"))])

        cancel_warehouse_intake(batch=self.batch)

        self.assertEqual(self._aggregate(), Decimal("0"))

    def test_dealer_batch_cannot_be_cancelled(self):
        dealer = Dealer.objects.create(dealer_code="DLR-001", dealer_name="North Dealer")
        dealer_batch = receive_into_pool(
            BatchPool.for_dealer(dealer), raw_material=self.film, batch_number="B1", quantity=2
        )

        with self.assertRaises(IntakeError):
            cancel_warehouse_intake(batch=dealer_batch)

        self.assertTrue(StockBatch.objects.filter(pk=dealer_batch.pk).exists())

    # ======================================================
    # ADJUST
    # ======================================================

    def test_adjust_up_moves_batch_and_aggregate(self):
        batch = adjust_warehouse_intake(batch=self.batch, quantity="12.5")

        self.assertEqual(batch.current_stock, Decimal("12.5"))
        self.assertEqual(batch.received_quantity, Decimal("12.5"))
        self.assertEqual(self._aggregate(), Decimal("12.5"))

    def test_adjust_down_moves_batch_and_aggregate(self):
        batch = adjust_warehouse_intake(batch=self.batch, quantity=4)

        self.assertEqual(batch.current_stock, Decimal("4"))
        self.assertEqual(batch.received_quantity, Decimal("4"))
        self.assertEqual(self._aggregate(), Decimal("4"))

    def test_adjust_refused_once_batch_was_used(self):
        commit_movements(BatchPool.warehouse(), [StockLine(batch_id=self.batch.id, quantity=Decimal("1"))])

        with self.assertRaises(IntakeError):
            adjust_warehouse_intake(batch=self.batch, quantity=20)

        self.batch.refresh_from_db()
        self.assertEqual(self.batch.current_stock, Decimal("9"))
        self.assertEqual(self.batch.received_quantity, Decimal("10"))

    def test_adjust_rejects_non_positive_quantity(self):
        with self.assertRaises(ValidationError):
            adjust_warehouse_intake(batch=self.batch, quantity=0)

        self.assertEqual(self._aggregate(), Decimal("10"))
