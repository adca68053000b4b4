# batches/services/stock_commit.py

"""
ATOMIC DEDUCTION + REVERSAL COMMITTER

Purpose:
- Apply an AllocationPlan (or an explicit list of batch movements) to a pool
  all-or-nothing.
- Reverse a previously committed allocation exactly, batch by batch.
- Withdraw received stock (receipt deletion), clamped at zero.

HARD RULES:
- Everything runs inside transaction.atomic(); any failure rolls back every
  row touched so far.
- Batches are re-read with SELECT ... FOR UPDATE and decremented ONLY if they
  still hold the planned quantity (conditional update). Otherwise the whole
  commit aborts with ConcurrencyAbortError.
- A planned batch that vanished aborts with MissingBatchError.
- Warehouse movements also move RawMaterial.current_stock in the same commit.
- Reversal re-creates a missing batch under its original id / natural key, so
  reversing twice never loses stock.
"""

from __future__ import annotations

import logging
from collections import OrderedDict, defaultdict
from dataclasses import replace
from decimal import Decimal
from typing import Dict, Iterable, List

from django.db import transaction
from django.utils import timezone

from batches.models import StockBatch
from batches.services.allocation_record import (
    StockLine,
    build_allocation_record,
    parse_allocation_record,
)
from batches.services.exceptions import ConcurrencyAbortError, MissingBatchError
from batches.services.fifo import AllocationPlan, require_sufficient
from batches.services.pools import BatchPool
from products.models import RawMaterial
from products.services.quantities import ZERO, to_quantity

logger = logging.getLogger(__name__)


# ============================================================
# HELPERS
# ============================================================

def _line_key(line: StockLine):
    if line.batch_id is not None:
        return line.batch_id
    return ("natural", line.raw_material_id, line.batch_number)


def _group_lines(lines: Iterable[StockLine]) -> "OrderedDict[object, StockLine]":
    """
    Merge lines that target the same batch, summing quantities.
    """
    grouped: "OrderedDict[object, StockLine]" = OrderedDict()

    for line in lines:
        qty = to_quantity(line.quantity)
        if qty <= 0:
            continue

        key = _line_key(line)
        if key in grouped:
            grouped[key] = replace(grouped[key], quantity=grouped[key].quantity + qty)
        else:
            grouped[key] = replace(line, quantity=qty)

    return grouped


def shift_material_stock(material_totals: Dict[object, Decimal], *, sign: int) -> None:
    """
    Move the warehouse aggregate by +/- the given per-material totals.
    """
    if not material_totals:
        return

    materials = (
        RawMaterial.objects.select_for_update()
        .filter(id__in=list(material_totals.keys()))
        .order_by("id")
    )

    for material in materials:
        delta = material_totals[material.id] * sign
        new_stock = to_quantity(material.current_stock + delta)

        if new_stock < 0:
            logger.warning(
                "Warehouse aggregate would go negative; clamped to zero",
                extra={
                    "material_code": material.material_code,
                    "current_stock": str(material.current_stock),
                    "delta": str(delta),
                },
            )
            new_stock = ZERO

        material.current_stock = new_stock
        material.save(update_fields=["current_stock", "updated_at"])


def _resolve_batch(pool: BatchPool, locked: Dict, line: StockLine):
    batch = locked.get(line.batch_id) if line.batch_id is not None else None
    if batch is None and line.raw_material_id and line.batch_number:
        batch = pool.find_by_natural_key(
            raw_material_id=line.raw_material_id,
            batch_number=line.batch_number,
        )
    return batch


# ============================================================
# DEDUCTION
# ============================================================

@transaction.atomic
def commit_movements(pool: BatchPool, lines: Iterable[StockLine], *, reference: str = "") -> List[StockBatch]:
    """
    Deduct explicit batch movements from a pool, all-or-nothing.
    """
    grouped = _group_lines(lines)
    if not grouped:
        return []

    locked = pool.lock(line.batch_id for line in grouped.values() if line.batch_id is not None)

    # Verify every row before mutating any of them.
    targets = []
    for line in grouped.values():
        batch = locked.get(line.batch_id)
        if batch is None:
            logger.warning(
                "Stock commit aborted: batch missing",
                extra={"pool": pool.label, "batch_id": str(line.batch_id), "reference": reference},
            )
            raise MissingBatchError(line.batch_id)

        if batch.current_stock < line.quantity:
            logger.warning(
                "Stock commit aborted: batch changed since planning",
                extra={
                    "pool": pool.label,
                    "batch_id": str(batch.id),
                    "requested": str(line.quantity),
                    "available": str(batch.current_stock),
                    "reference": reference,
                },
            )
            raise ConcurrencyAbortError(batch.id, line.quantity, batch.current_stock)

        targets.append((batch, line.quantity))

    material_totals: Dict[object, Decimal] = defaultdict(lambda: ZERO)
    for batch, qty in targets:
        batch.current_stock = to_quantity(batch.current_stock - qty)
        batch.save(update_fields=["current_stock"])
        material_totals[batch.raw_material_id] += qty

    if pool.maintains_material_aggregate:
        shift_material_stock(material_totals, sign=-1)

    logger.info(
        "Stock committed",
        extra={
            "pool": pool.label,
            "batches": len(targets),
            "reference": reference,
        },
    )
    return [batch for batch, _ in targets]


@transaction.atomic
def commit_plan(plan: AllocationPlan, *, reference: str = "") -> dict:
    """
    Commit a sufficient AllocationPlan and return its allocation record.

    A plan carrying any shortfall is refused before a single row is touched.
    """
    require_sufficient(plan)

    pool = BatchPool(plan.dealer_id)
    lines = [
        StockLine(
            batch_id=d.batch_id,
            quantity=d.quantity_used,
            batch_number=d.batch_number,
            received_at=d.received_at,
            expiry_date=d.expiry_date,
        )
        for d in plan.draws()
    ]

    commit_movements(pool, lines, reference=reference)
    return build_allocation_record(plan)


# ============================================================
# REVERSAL
# ============================================================

def _recreate_batch(pool: BatchPool, line: StockLine) -> StockBatch:
    if not line.raw_material_id or not line.batch_number:
        raise MissingBatchError(line.batch_id)

    batch = StockBatch(
        dealer_id=pool.dealer_id,
        raw_material_id=line.raw_material_id,
        batch_number=line.batch_number,
        current_stock=line.quantity,
        received_quantity=line.quantity,
        received_at=line.received_at or timezone.now(),
        expiry_date=line.expiry_date,
    )
    if line.batch_id is not None:
        batch.id = line.batch_id
    batch.save()

    logger.info(
        "Batch re-created during reversal",
        extra={"pool": pool.label, "batch_id": str(batch.id), "batch_number": batch.batch_number},
    )
    return batch


@transaction.atomic
def restore_movements(pool: BatchPool, lines: Iterable[StockLine], *, reference: str = "") -> List[StockBatch]:
    """
    Add quantities back to the named batches (inverse of commit_movements).
    """
    grouped = _group_lines(lines)
    if not grouped:
        return []

    locked = pool.lock(line.batch_id for line in grouped.values() if line.batch_id is not None)

    restored = []
    material_totals: Dict[object, Decimal] = defaultdict(lambda: ZERO)

    for line in grouped.values():
        batch = _resolve_batch(pool, locked, line)

        if batch is None:
            batch = _recreate_batch(pool, line)
        else:
            batch.current_stock = to_quantity(batch.current_stock + line.quantity)
            batch.save(update_fields=["current_stock"])

        material_totals[batch.raw_material_id] += line.quantity
        restored.append(batch)

    if pool.maintains_material_aggregate:
        shift_material_stock(material_totals, sign=1)

    logger.info(
        "Stock restored",
        extra={"pool": pool.label, "batches": len(restored), "reference": reference},
    )
    return restored


@transaction.atomic
def reverse_allocation(record, *, dealer=None, reference: str = "") -> List[StockBatch]:
    """
    Reverse a persisted allocation record against the pool it was drawn from.
    """
    if isinstance(record, (list, tuple)) and record and isinstance(record[0], StockLine):
        lines = list(record)
    else:
        lines = parse_allocation_record(record)

    pool = BatchPool.warehouse() if dealer is None else BatchPool.for_dealer(dealer)
    return restore_movements(pool, lines, reference=reference)


# ============================================================
# WITHDRAWAL (receipt deletion)
# ============================================================

@transaction.atomic
def withdraw_from_pool(pool: BatchPool, lines: Iterable[StockLine], *, reference: str = "") -> Decimal:
    """
    Remove previously received quantities from a pool.

    - Clamped at zero (stock may already have been consumed).
    - Emptied batches are deleted where the pool prunes, kept OUT_OF_STOCK otherwise.

    Returns the quantity actually withdrawn.
    """
    grouped = _group_lines(lines)
    if not grouped:
        return ZERO

    locked = pool.lock(line.batch_id for line in grouped.values() if line.batch_id is not None)

    withdrawn_total = ZERO
    material_totals: Dict[object, Decimal] = defaultdict(lambda: ZERO)

    for line in grouped.values():
        batch = _resolve_batch(pool, locked, line)
        if batch is None:
            logger.warning(
                "Withdrawal skipped: batch no longer exists",
                extra={"pool": pool.label, "batch_number": line.batch_number, "reference": reference},
            )
            continue

        available = to_quantity(batch.current_stock)
        withdrawn = line.quantity if line.quantity <= available else available

        if withdrawn < line.quantity:
            logger.warning(
                "Withdrawal clamped at zero",
                extra={
                    "pool": pool.label,
                    "batch_id": str(batch.id),
                    "requested": str(line.quantity),
                    "available": str(available),
                    "reference": reference,
                },
            )

        remaining = available - withdrawn
        if remaining <= 0 and pool.prunes_empty_batches:
            batch.delete()
        else:
            batch.current_stock = remaining
            batch.received_quantity = max(ZERO, to_quantity(batch.received_quantity - line.quantity))
            batch.save(update_fields=["current_stock", "received_quantity"])

        material_totals[batch.raw_material_id] += withdrawn
        withdrawn_total += withdrawn

    if pool.maintains_material_aggregate:
        shift_material_stock(material_totals, sign=-1)

    return withdrawn_total
