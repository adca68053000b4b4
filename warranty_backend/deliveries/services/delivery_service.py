# deliveries/services/delivery_service.py

"""
DELIVERY SERVICE (WAREHOUSE -> DEALER)

Rules:
- Items name explicit warehouse batches; no FIFO is applied here.
- Every item is validated before anything is written; a batch asked for more
  than it holds is reported as a shortfall and nothing is deducted.
- Delivery rows + warehouse deduction commit together.
- Only a PENDING_RECEIPT delivery can be edited or deleted.
- Editing the items returns the old quantities to the warehouse batches and
  deducts the new ones in the same commit; a shortfall rolls the whole edit back.
- Deletion restores the warehouse batches in the same commit.
"""

from __future__ import annotations

import logging
from collections import OrderedDict
from typing import Iterable

from django.db import transaction
from django.utils import timezone

from batches.services.allocation_record import StockLine
from batches.services.exceptions import ShortfallError
from batches.services.fifo import Shortfall
from batches.services.pools import BatchPool
from batches.services.stock_commit import commit_movements, restore_movements
from deliveries.models import MaterialDelivery, MaterialDeliveryItem
from deliveries.services.exceptions import DeliveryError
from deliveries.services.numbering import delivery_prefix, next_document_number
from products.services.quantities import ZERO, to_quantity

logger = logging.getLogger(__name__)


def _normalize_items(items: Iterable[dict]) -> "OrderedDict[str, object]":
    """
    [{"batch_id": "...", "quantity": "5"}, ...] -> {batch_id: Decimal}
    Duplicate batch ids are summed.
    """
    requested: "OrderedDict[str, object]" = OrderedDict()

    for row in items or []:
        if not isinstance(row, dict):
            raise DeliveryError("Delivery items must be objects")

        batch_id = row.get("batch_id") or getattr(row.get("batch"), "id", None)
        if not batch_id:
            raise DeliveryError("Each delivery item must reference a warehouse batch")

        try:
            qty = to_quantity(row.get("quantity"))
        except ValueError as exc:
            raise DeliveryError(str(exc)) from exc

        if qty <= 0:
            raise DeliveryError("Delivery quantity must be greater than zero")

        key = str(batch_id)
        requested[key] = requested.get(key, ZERO) + qty

    if not requested:
        raise DeliveryError("A delivery needs at least one item")

    return requested


def _checked_batches(pool: BatchPool, requested) -> dict:
    """
    Load the requested warehouse batches and fail closed: unknown batches
    raise DeliveryError, every short batch is reported in one ShortfallError.
    """
    batches = {
        str(b.id): b
        for b in pool.queryset().select_related("raw_material").filter(id__in=list(requested.keys()))
    }

    missing = [batch_id for batch_id in requested if batch_id not in batches]
    if missing:
        raise DeliveryError(f"Warehouse batch not found: {', '.join(missing)}")

    shortfalls = []
    for batch_id, qty in requested.items():
        batch = batches[batch_id]
        if batch.current_stock < qty:
            shortfalls.append(
                Shortfall(
                    raw_material_id=batch.raw_material_id,
                    material_code=batch.raw_material.material_code,
                    material_name=f"{batch.raw_material.material_name} (batch {batch.batch_number})",
                    total_required=qty,
                    total_available=to_quantity(batch.current_stock),
                )
            )
    if shortfalls:
        raise ShortfallError(shortfalls)

    return batches


def _write_items(delivery: MaterialDelivery, requested, batches) -> list:
    lines = []
    for batch_id, qty in requested.items():
        batch = batches[batch_id]
        MaterialDeliveryItem.objects.create(
            delivery=delivery,
            raw_material=batch.raw_material,
            source_batch=batch,
            batch_number=batch.batch_number,
            quantity=qty,
            unit=batch.raw_material.unit,
            expiry_date=batch.expiry_date,
        )
        lines.append(StockLine(batch_id=batch.id, quantity=qty))
    return lines


@transaction.atomic
def create_delivery(*, dealer, items, delivery_date=None, notes: str = "", user=None) -> MaterialDelivery:
    if dealer is None:
        raise DeliveryError("dealer is required")

    delivery_date = delivery_date or timezone.localdate()
    requested = _normalize_items(items)

    pool = BatchPool.warehouse()
    batches = _checked_batches(pool, requested)

    delivery = MaterialDelivery.objects.create(
        delivery_number=next_document_number(
            model=MaterialDelivery,
            field="delivery_number",
            prefix=delivery_prefix(delivery_date),
        ),
        delivery_date=delivery_date,
        dealer=dealer,
        notes=(notes or "").strip(),
        created_by=user if getattr(user, "is_authenticated", False) else None,
    )

    lines = _write_items(delivery, requested, batches)
    commit_movements(pool, lines, reference=delivery.delivery_number)

    logger.info(
        "Delivery created",
        extra={
            "delivery_number": delivery.delivery_number,
            "dealer_code": dealer.dealer_code,
            "items": len(lines),
        },
    )
    return delivery


def _delivery_lines(delivery: MaterialDelivery):
    return [
        StockLine(
            batch_id=item.source_batch_id,
            quantity=item.quantity,
            raw_material_id=item.raw_material_id,
            batch_number=item.batch_number,
            expiry_date=item.expiry_date,
        )
        for item in delivery.items.all()
    ]


def _lock_pending(delivery: MaterialDelivery, verb: str) -> MaterialDelivery:
    locked = MaterialDelivery.objects.select_for_update().get(pk=delivery.pk)

    if locked.status != MaterialDelivery.Status.PENDING_RECEIPT:
        raise DeliveryError(f"Cannot {verb} a delivery that has already been received")

    return locked


@transaction.atomic
def update_delivery(*, delivery: MaterialDelivery, items=None, delivery_date=None, notes=None) -> MaterialDelivery:
    """
    Edit a pending delivery.

    items=None keeps the current items; otherwise they are replaced: the old
    quantities go back to their warehouse batches, the new ones are validated
    against the restored stock and deducted.
    """
    locked = _lock_pending(delivery, "edit")

    fields = []
    if delivery_date is not None:
        locked.delivery_date = delivery_date
        fields.append("delivery_date")
    if notes is not None:
        locked.notes = (notes or "").strip()
        fields.append("notes")

    if items is not None:
        requested = _normalize_items(items)
        pool = BatchPool.warehouse()
        reference = locked.delivery_number

        restore_movements(pool, _delivery_lines(locked), reference=reference)
        batches = _checked_batches(pool, requested)

        locked.items.all().delete()
        lines = _write_items(locked, requested, batches)
        commit_movements(pool, lines, reference=reference)

        logger.info(
            "Delivery items replaced",
            extra={"delivery_number": reference, "items": len(lines)},
        )

    if fields:
        locked.save(update_fields=fields + ["updated_at"])

    return locked


@transaction.atomic
def delete_delivery(*, delivery: MaterialDelivery) -> None:
    locked = _lock_pending(delivery, "delete")

    restore_movements(BatchPool.warehouse(), _delivery_lines(locked), reference=locked.delivery_number)

    number = locked.delivery_number
    locked.delete()

    logger.info("Delivery deleted and warehouse stock restored", extra={"delivery_number": number})
