# batches/services/intake.py

"""
STOCK INTAKE

Purpose:
- Warehouse intake: one supplier delivery becomes one warehouse batch, and the
  material's warehouse aggregate grows by the same quantity (same transaction).
- Dealer intake: a dealer receipt creates the dealer batch lazily on first
  receipt, or tops up the existing (dealer, material, batch_number) row.
- Intake correction / cancellation: only while the warehouse batch is still
  untouched (current_stock == received_quantity). The aggregate moves with it.
"""

from __future__ import annotations

import logging

from django.core.exceptions import ValidationError
from django.db import IntegrityError, transaction
from django.utils import timezone

from batches.models import StockBatch
from batches.services.allocation_record import StockLine
from batches.services.exceptions import IntakeError
from batches.services.pools import BatchPool
from batches.services.stock_commit import restore_movements, shift_material_stock, withdraw_from_pool
from products.services.quantities import to_positive_quantity, to_quantity

logger = logging.getLogger(__name__)


@transaction.atomic
def receive_warehouse_batch(
    *,
    raw_material,
    batch_number,
    quantity,
    expiry_date=None,
    received_at=None,
    supplier: str = "",
) -> StockBatch:
    """
    Create a warehouse batch + increment RawMaterial.current_stock.

    A batch_number already used by another warehouse batch is rejected.
    """
    if raw_material is None:
        raise ValidationError({"raw_material": "raw_material is required"})

    number = (batch_number or "").strip()
    if not number:
        raise ValidationError({"batch_number": "batch_number is required"})

    try:
        qty = to_positive_quantity(quantity)
    except ValueError as exc:
        raise ValidationError({"quantity": str(exc)}) from exc

    pool = BatchPool.warehouse()
    if pool.queryset().filter(batch_number=number).exists():
        raise ValidationError({"batch_number": f"Warehouse batch {number} already exists"})

    try:
        with transaction.atomic():
            batch = StockBatch.objects.create(
                dealer=None,
                raw_material=raw_material,
                batch_number=number,
                current_stock=qty,
                received_quantity=qty,
                received_at=received_at or timezone.now(),
                expiry_date=expiry_date,
                supplier=(supplier or "").strip(),
            )
    except IntegrityError as exc:
        raise ValidationError({"batch_number": f"Warehouse batch {number} already exists"}) from exc

    shift_material_stock({raw_material.id: qty}, sign=1)

    logger.info(
        "Warehouse batch received",
        extra={
            "batch_id": str(batch.id),
            "material_code": raw_material.material_code,
            "quantity": str(qty),
        },
    )
    return batch


@transaction.atomic
def receive_into_pool(
    pool: BatchPool,
    *,
    raw_material,
    batch_number,
    quantity,
    expiry_date=None,
    received_at=None,
) -> StockBatch:
    """
    Add received stock to a pool keyed by (material, batch_number).

    Existing row: current_stock += quantity (expiry kept unless missing).
    New row: created with received_at = receipt time.
    """
    number = (batch_number or "").strip()
    if not number:
        raise ValidationError({"batch_number": "batch_number is required"})

    qty = to_quantity(quantity)
    if qty <= 0:
        raise ValidationError({"quantity": "quantity must be greater than zero"})

    batch = pool.find_by_natural_key(raw_material_id=raw_material.id, batch_number=number)

    if batch is None:
        batch = StockBatch.objects.create(
            dealer_id=pool.dealer_id,
            raw_material=raw_material,
            batch_number=number,
            current_stock=qty,
            received_quantity=qty,
            received_at=received_at or timezone.now(),
            expiry_date=expiry_date,
        )
    else:
        batch.current_stock = to_quantity(batch.current_stock + qty)
        batch.received_quantity = to_quantity(batch.received_quantity + qty)
        fields = ["current_stock", "received_quantity"]
        if batch.expiry_date is None and expiry_date is not None:
            batch.expiry_date = expiry_date
            fields.append("expiry_date")
        batch.save(update_fields=fields)

    if pool.maintains_material_aggregate:
        shift_material_stock({raw_material.id: qty}, sign=1)

    logger.info(
        "Stock received into pool",
        extra={
            "pool": pool.label,
            "batch_id": str(batch.id),
            "material_code": raw_material.material_code,
            "quantity": str(qty),
        },
    )
    return batch


# ============================================================
# INTAKE CORRECTION / CANCELLATION (warehouse only)
# ============================================================

def _lock_untouched_intake(batch: StockBatch) -> StockBatch:
    pool = BatchPool.warehouse()
    locked = pool.lock([batch.pk]).get(batch.pk)

    if locked is None:
        raise IntakeError("Only warehouse intakes can be corrected or cancelled")

    if locked.received_quantity <= 0:
        raise IntakeError(f"Batch {locked.batch_number} has no recorded intake quantity")

    if locked.current_stock < locked.received_quantity:
        raise IntakeError(
            f"Batch {locked.batch_number} has already been used "
            f"({locked.current_stock} of {locked.received_quantity} left)"
        )

    return locked


@transaction.atomic
def cancel_warehouse_intake(*, batch: StockBatch) -> None:
    """
    Undo a warehouse intake: the batch disappears and the material aggregate
    drops by the received quantity.
    """
    locked = _lock_untouched_intake(batch)
    quantity = locked.received_quantity

    withdraw_from_pool(
        BatchPool.warehouse(),
        [StockLine(batch_id=locked.id, quantity=quantity)],
        reference=f"intake-cancel:{locked.batch_number}",
    )
    StockBatch.objects.filter(pk=locked.pk).delete()

    logger.info(
        "Warehouse intake cancelled",
        extra={
            "batch_id": str(locked.id),
            "batch_number": locked.batch_number,
            "quantity": str(quantity),
        },
    )


@transaction.atomic
def adjust_warehouse_intake(*, batch: StockBatch, quantity) -> StockBatch:
    """
    Correct the received quantity of an untouched warehouse intake. The batch
    and the material aggregate move by the difference.
    """
    try:
        new_qty = to_positive_quantity(quantity)
    except ValueError as exc:
        raise ValidationError({"quantity": str(exc)}) from exc

    locked = _lock_untouched_intake(batch)
    old_qty = locked.received_quantity
    delta = new_qty - old_qty
    reference = f"intake-adjust:{locked.batch_number}"
    pool = BatchPool.warehouse()

    if delta > 0:
        restore_movements(pool, [StockLine(batch_id=locked.id, quantity=delta)], reference=reference)
    elif delta < 0:
        withdraw_from_pool(pool, [StockLine(batch_id=locked.id, quantity=-delta)], reference=reference)

    StockBatch.objects.filter(pk=locked.pk).update(received_quantity=new_qty)
    locked.refresh_from_db()

    logger.info(
        "Warehouse intake adjusted",
        extra={
            "batch_id": str(locked.id),
            "old_quantity": str(old_qty),
            "new_quantity": str(new_qty),
        },
    )
    return locked
