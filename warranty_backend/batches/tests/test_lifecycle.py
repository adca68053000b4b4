# batches/tests/test_lifecycle.py

from datetime import timedelta
from decimal import Decimal

from django.contrib.auth import get_user_model
from django.core.exceptions import ValidationError
from django.test import TestCase, override_settings
from django.utils import timezone

from batches.models import RecertificationHistory, StockBatch
from batches.services.exceptions import LifecycleViolation
from batches.services.lifecycle import (
    expiring_batches,
    recertify_batch,
    refresh_expired_batches,
)
from dealers.models import Dealer
from products.models import RawMaterial

User = get_user_model()


class RecertificationTests(TestCase):
    """
    GUARANTEES:
    - Only expired batches with stock and an expiry date can be recertified
    - Each recertification adds the configured window to the OLD expiry
    - Exactly one history row per recertification
    - Rejected recertifications leave the batch untouched
    - A recertified batch may be recertified again
    - A successful recertification always leaves the batch AVAILABLE
    """

    def setUp(self):
        self.today = timezone.localdate()
        self.user = User.objects.create_user(username="qa", password="pass")
        self.material = RawMaterial.objects.create(material_code="FILM-01", material_name="Clear film")

        self.expired = StockBatch.objects.create(
            raw_material=self.material,
            batch_number="EXP-1",
            current_stock=Decimal("4"),
            expiry_date=self.today - timedelta(days=10),
        )

    def test_expired_batch_status_is_derived_on_save(self):
        self.assertEqual(self.expired.status, StockBatch.Status.EXPIRED)

    def test_recertify_extends_expiry_and_writes_history(self):
        old_expiry = self.expired.expiry_date

        result = recertify_batch(batch=self.expired, user=self.user, reason="Lab retest passed")

        batch = StockBatch.objects.get(pk=self.expired.pk)
        self.assertEqual(batch.expiry_date, old_expiry + timedelta(days=60))
        self.assertTrue(batch.is_recertified)
        self.assertEqual(batch.recertification_count, 1)
        self.assertEqual(batch.last_recertified_by, self.user)
        self.assertEqual(batch.status, StockBatch.Status.AVAILABLE)
        self.assertEqual(result.extended_days, 60)

        history = RecertificationHistory.objects.get(batch=batch)
        self.assertEqual(history.old_expiry_date, old_expiry)
        self.assertEqual(history.new_expiry_date, old_expiry + timedelta(days=60))
        self.assertEqual(history.material_code, "FILM-01")
        self.assertEqual(history.recertified_by_name, "qa")
        self.assertEqual(history.reason, "Lab retest passed")

    def test_recertified_batch_can_be_recertified_again(self):
        old_expiry = self.expired.expiry_date

        recertify_batch(batch=self.expired, user=self.user)
        recertify_batch(batch=self.expired, user=self.user)

        batch = StockBatch.objects.get(pk=self.expired.pk)
        self.assertEqual(batch.recertification_count, 2)
        self.assertEqual(batch.expiry_date, old_expiry + timedelta(days=120))
        self.assertEqual(RecertificationHistory.objects.filter(batch=batch).count(), 2)

    @override_settings(RECERTIFICATION_EXTENSION_DAYS=30)
    def test_extension_window_is_configurable(self):
        old_expiry = self.expired.expiry_date

        recertify_batch(batch=self.expired, user=self.user)

        self.expired.refresh_from_db()
        self.assertEqual(self.expired.expiry_date, old_expiry + timedelta(days=30))

    def test_long_expired_batch_is_available_after_recertification(self):
        batch = StockBatch.objects.create(
            raw_material=self.material,
            batch_number="EXP-OLD",
            current_stock=Decimal("1"),
            expiry_date=self.today - timedelta(days=90),
        )

        recertify_batch(batch=batch, user=self.user)

        batch.refresh_from_db()
        self.assertEqual(batch.expiry_date, self.today - timedelta(days=30))
        self.assertEqual(batch.status, StockBatch.Status.AVAILABLE)
        self.assertEqual(batch.recertification_count, 1)
        self.assertEqual(RecertificationHistory.objects.filter(batch=batch).count(), 1)

        # Lazy expiry must not undo the release.
        self.assertEqual(refresh_expired_batches(), 0)
        batch.refresh_from_db()
        self.assertEqual(batch.status, StockBatch.Status.AVAILABLE)
        self.assertFalse(batch.is_expired)

    # ======================================================
    # REJECTIONS
    # ======================================================

    def _assert_rejected(self, batch, reason):
        before = StockBatch.objects.get(pk=batch.pk)

        with self.assertRaises(LifecycleViolation) as ctx:
            recertify_batch(batch=batch, user=self.user)

        self.assertEqual(ctx.exception.reason, reason)
        after = StockBatch.objects.get(pk=batch.pk)
        self.assertEqual(after.expiry_date, before.expiry_date)
        self.assertEqual(after.recertification_count, before.recertification_count)
        self.assertFalse(RecertificationHistory.objects.filter(batch=batch).exists())

    def test_zero_stock_is_rejected(self):
        batch = StockBatch.objects.create(
            raw_material=self.material,
            batch_number="EMPTY",
            current_stock=Decimal("0"),
            expiry_date=self.today - timedelta(days=1),
        )
        self._assert_rejected(batch, "zero_stock")

    def test_missing_expiry_is_rejected(self):
        batch = StockBatch.objects.create(
            raw_material=self.material,
            batch_number="NO-EXP",
            current_stock=Decimal("3"),
        )
        self._assert_rejected(batch, "no_expiry_date")

    def test_not_expired_is_rejected(self):
        batch = StockBatch.objects.create(
            raw_material=self.material,
            batch_number="FRESH",
            current_stock=Decimal("3"),
            expiry_date=self.today + timedelta(days=5),
        )
        self._assert_rejected(batch, "not_expired")

    # ======================================================
    # HISTORY IMMUTABILITY
    # ======================================================

    def test_history_rows_cannot_be_edited(self):
        history = recertify_batch(batch=self.expired, user=self.user).history

        history.note = "rewritten"
        with self.assertRaises(ValidationError):
            history.save()

    def test_history_rows_cannot_be_deleted(self):
        history = recertify_batch(batch=self.expired, user=self.user).history

        with self.assertRaises(ValidationError):
            history.delete()

        self.assertTrue(RecertificationHistory.objects.filter(pk=history.pk).exists())


class ExpiryTrackingTests(TestCase):
    """
    GUARANTEES:
    - Batches past expiry that still hold stock are flipped to EXPIRED lazily
    - Empty batches keep OUT_OF_STOCK
    - Expiring-soon only lists batches with stock inside the window
    """

    def setUp(self):
        self.today = timezone.localdate()
        self.material = RawMaterial.objects.create(material_code="FILM-01", material_name="Clear film")
        self.dealer = Dealer.objects.create(dealer_code="DLR-001", dealer_name="North Dealer")

    def _batch(self, number, stock, expiry, dealer=None):
        return StockBatch.objects.create(
            dealer=dealer,
            raw_material=self.material,
            batch_number=number,
            current_stock=Decimal(stock),
            expiry_date=expiry,
        )

    def test_refresh_flips_passed_batches(self):
        batch = self._batch("B1", "2", self.today + timedelta(days=3))
        # Time passes without a save.
        StockBatch.objects.filter(pk=batch.pk).update(expiry_date=self.today - timedelta(days=1))

        flipped = refresh_expired_batches()

        batch.refresh_from_db()
        self.assertEqual(flipped, 1)
        self.assertEqual(batch.status, StockBatch.Status.EXPIRED)

    def test_refresh_ignores_empty_batches(self):
        batch = self._batch("B1", "0", self.today - timedelta(days=1))

        self.assertEqual(refresh_expired_batches(), 0)
        batch.refresh_from_db()
        self.assertEqual(batch.status, StockBatch.Status.OUT_OF_STOCK)

    def test_expiring_soon_window(self):
        inside = self._batch("IN", "1", self.today + timedelta(days=10))
        self._batch("OUT", "1", self.today + timedelta(days=40))
        self._batch("EMPTY", "0", self.today + timedelta(days=5))
        self._batch("PAST", "1", self.today - timedelta(days=1))

        self.assertEqual(list(expiring_batches(days=30)), [inside])

    def test_expiring_soon_scoped_to_pool(self):
        warehouse = self._batch("W", "1", self.today + timedelta(days=2))
        dealer_batch = self._batch("D", "1", self.today + timedelta(days=2), dealer=self.dealer)

        self.assertEqual(list(expiring_batches(days=7, warehouse=True)), [warehouse])
        self.assertEqual(list(expiring_batches(days=7, dealer=self.dealer)), [dealer_batch])
