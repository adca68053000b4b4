# batches/services/lifecycle.py

"""
BATCH LIFECYCLE MANAGER

Status transitions:
- AVAILABLE    -> OUT_OF_STOCK   (stock reaches 0; derived on save)
- OUT_OF_STOCK -> AVAILABLE      (stock restored; derived on save)
- AVAILABLE    -> EXPIRED        (expiry_date passed; flipped lazily on read)
- EXPIRED      -> AVAILABLE      (explicit recertification only; always AVAILABLE
                                  afterwards, even if old expiry + window is still past)

Recertification rules:
- batch must hold stock (current_stock > 0)
- batch must carry an expiry_date
- batch must be expired, or have been recertified before
- new expiry = old expiry + RECERTIFICATION_EXTENSION_DAYS (default 60)
- exactly one RecertificationHistory row per successful recertification
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import timedelta

from django.conf import settings
from django.db import transaction
from django.db.models import F, Q
from django.utils import timezone

from batches.models import RecertificationHistory, StockBatch
from batches.services.exceptions import LifecycleViolation

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class RecertificationResult:
    batch: StockBatch
    history: RecertificationHistory
    extended_days: int


def extension_days() -> int:
    return int(getattr(settings, "RECERTIFICATION_EXTENSION_DAYS", 60))


def refresh_expired_batches(queryset=None, *, today=None) -> int:
    """
    Lazy expiry: flip batches whose expiry_date has passed and that still hold
    stock to EXPIRED. Returns the number of rows flipped.

    Batches released by a recertification made after their expiry date are
    left alone (see StockBatch.cleared_by_recertification).
    """
    today = today or timezone.localdate()
    qs = queryset if queryset is not None else StockBatch.objects.all()

    flipped = (
        qs.filter(
            expiry_date__lt=today,
            current_stock__gt=0,
        )
        .exclude(status=StockBatch.Status.EXPIRED)
        .exclude(Q(last_recertified_at__isnull=False) & Q(last_recertified_at__date__gt=F("expiry_date")))
        .update(status=StockBatch.Status.EXPIRED, updated_at=timezone.now())
    )

    if flipped:
        logger.info("Batches marked expired", extra={"count": flipped, "as_of": str(today)})

    return flipped


def _user_display_name(user) -> str:
    if user is None:
        return ""
    full_name = (user.get_full_name() or "").strip() if hasattr(user, "get_full_name") else ""
    return full_name or getattr(user, "username", "") or str(user)


@transaction.atomic
def recertify_batch(*, batch: StockBatch, user=None, reason: str = "", note: str = "", today=None) -> RecertificationResult:
    """
    Extend an expired batch's shelf life by the configured window.

    Rejections raise LifecycleViolation and leave the batch untouched.
    """
    today = today or timezone.localdate()

    locked = StockBatch.objects.select_for_update().select_related("raw_material").get(pk=batch.pk)

    if locked.current_stock <= 0:
        raise LifecycleViolation("zero_stock", "Cannot recertify a batch with no remaining stock")

    if locked.expiry_date is None:
        raise LifecycleViolation("no_expiry_date", "Cannot recertify a batch without an expiry date")

    is_expired = locked.expiry_date < today
    if not is_expired and not locked.is_recertified:
        raise LifecycleViolation("not_expired", "Only expired batches can be recertified")

    days = extension_days()
    old_expiry = locked.expiry_date
    new_expiry = old_expiry + timedelta(days=days)

    locked.expiry_date = new_expiry
    locked.is_recertified = True
    locked.recertification_count = (locked.recertification_count or 0) + 1
    locked.last_recertified_at = timezone.now()
    locked.last_recertified_by = user if getattr(user, "is_authenticated", False) else None
    locked.save(
        update_fields=[
            "expiry_date",
            "is_recertified",
            "recertification_count",
            "last_recertified_at",
            "last_recertified_by",
        ]
    )

    history = RecertificationHistory.objects.create(
        batch=locked,
        batch_number=locked.batch_number,
        material_code=locked.raw_material.material_code,
        dealer_id=locked.dealer_id,
        old_expiry_date=old_expiry,
        new_expiry_date=new_expiry,
        extended_days=days,
        recertified_by=locked.last_recertified_by,
        recertified_by_name=_user_display_name(locked.last_recertified_by),
        reason=(reason or "").strip(),
        note=(note or "").strip(),
    )

    logger.info(
        "Batch recertified",
        extra={
            "batch_id": str(locked.id),
            "old_expiry": str(old_expiry),
            "new_expiry": str(new_expiry),
            "recertification_count": locked.recertification_count,
        },
    )

    return RecertificationResult(batch=locked, history=history, extended_days=days)


def recertification_history(batch: StockBatch):
    return RecertificationHistory.objects.filter(batch=batch).order_by("-created_at")


def expiring_batches(*, days=None, dealer=None, warehouse=False, today=None):
    """
    Batches with stock whose expiry falls within the next N days (default
    EXPIRY_ALERT_DAYS).
    """
    today = today or timezone.localdate()
    window = int(days if days is not None else getattr(settings, "EXPIRY_ALERT_DAYS", 30))

    qs = StockBatch.objects.select_related("raw_material", "dealer").filter(
        current_stock__gt=0,
        expiry_date__isnull=False,
        expiry_date__gte=today,
        expiry_date__lte=today + timedelta(days=window),
    )

    if warehouse:
        qs = qs.filter(dealer__isnull=True)
    elif dealer is not None:
        qs = qs.filter(dealer_id=getattr(dealer, "id", dealer))

    return qs.order_by("expiry_date", "received_at")
