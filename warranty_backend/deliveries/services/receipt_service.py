# deliveries/services/receipt_service.py

"""
DEALER RECEIPT SERVICE

Rules:
- A delivery is received at most once (PENDING_RECEIPT -> RECEIVED).
- Each received line tops up (or lazily creates) the dealer batch keyed by
  (dealer, material, batch_number), carrying the warehouse expiry date.
- received quantity defaults to the delivered quantity and may not exceed it.
- Editing a receipt moves the dealer pool by the difference per item: more
  received tops the dealer batch up, less received withdraws (clamped).
- Deleting a receipt withdraws the received quantities from the dealer pool
  (clamped at zero, emptied dealer batches removed) and reopens the delivery.
"""

from __future__ import annotations

import logging

from django.db import transaction
from django.utils import timezone

from batches.models import StockBatch
from batches.services.allocation_record import StockLine
from batches.services.intake import receive_into_pool
from batches.services.pools import BatchPool
from batches.services.stock_commit import withdraw_from_pool
from deliveries.models import DealerReceipt, DealerReceiptItem, MaterialDelivery
from deliveries.services.exceptions import DeliveryError
from deliveries.services.numbering import next_document_number, receipt_prefix
from products.services.quantities import to_quantity

logger = logging.getLogger(__name__)


def _received_quantity(item, overrides):
    raw = overrides.get(str(item.id)) if overrides else None
    if raw is None:
        return item.quantity

    try:
        qty = to_quantity(raw)
    except ValueError as exc:
        raise DeliveryError(str(exc)) from exc

    if qty < 0:
        raise DeliveryError("Received quantity cannot be negative")
    if qty > item.quantity:
        raise DeliveryError(
            f"Received quantity for batch {item.batch_number} exceeds delivered quantity "
            f"({qty} > {item.quantity})"
        )
    return qty


@transaction.atomic
def receive_delivery(
    *,
    delivery: MaterialDelivery,
    receipt_date=None,
    received_by: str = "",
    notes: str = "",
    received_quantities=None,
) -> DealerReceipt:
    """
    received_quantities: optional {delivery_item_id: quantity} overrides.
    """
    locked = (
        MaterialDelivery.objects.select_for_update()
        .select_related("dealer")
        .get(pk=delivery.pk)
    )

    if locked.status != MaterialDelivery.Status.PENDING_RECEIPT:
        raise DeliveryError("Delivery has already been received")

    if DealerReceipt.objects.filter(delivery=locked).exists():
        raise DeliveryError("A receipt already exists for this delivery")

    receipt_date = receipt_date or timezone.localdate()
    dealer = locked.dealer
    pool = BatchPool.for_dealer(dealer)

    receipt = DealerReceipt.objects.create(
        receipt_number=next_document_number(
            model=DealerReceipt,
            field="receipt_number",
            prefix=receipt_prefix(dealer.dealer_code, receipt_date),
        ),
        receipt_date=receipt_date,
        delivery=locked,
        dealer=dealer,
        received_by=(received_by or "").strip(),
        notes=(notes or "").strip(),
    )

    for item in locked.items.select_related("raw_material"):
        qty = _received_quantity(item, received_quantities)

        dealer_batch = None
        if qty > 0:
            dealer_batch = receive_into_pool(
                pool,
                raw_material=item.raw_material,
                batch_number=item.batch_number,
                quantity=qty,
                expiry_date=item.expiry_date,
            )

        DealerReceiptItem.objects.create(
            receipt=receipt,
            raw_material=item.raw_material,
            dealer_batch=dealer_batch,
            batch_number=item.batch_number,
            quantity=item.quantity,
            received_quantity=qty,
            expiry_date=item.expiry_date,
        )

    locked.status = MaterialDelivery.Status.RECEIVED
    locked.save(update_fields=["status", "updated_at"])

    logger.info(
        "Delivery received",
        extra={
            "receipt_number": receipt.receipt_number,
            "delivery_number": locked.delivery_number,
            "dealer_code": dealer.dealer_code,
        },
    )
    return receipt


@transaction.atomic
def update_receipt(
    *,
    receipt: DealerReceipt,
    received_quantities=None,
    receipt_date=None,
    received_by=None,
    notes=None,
) -> DealerReceipt:
    """
    received_quantities: optional {receipt_item_id: quantity}; each new value
    is checked against the delivered quantity.
    """
    locked = (
        DealerReceipt.objects.select_for_update()
        .select_related("dealer")
        .get(pk=receipt.pk)
    )
    pool = BatchPool.for_dealer(locked.dealer)

    for item in locked.items.select_related("raw_material"):
        if not received_quantities or str(item.id) not in received_quantities:
            continue

        new_qty = _received_quantity(item, received_quantities)
        delta = new_qty - item.received_quantity

        if delta > 0:
            item.dealer_batch = receive_into_pool(
                pool,
                raw_material=item.raw_material,
                batch_number=item.batch_number,
                quantity=delta,
                expiry_date=item.expiry_date,
            )
        elif delta < 0:
            withdraw_from_pool(
                pool,
                [
                    StockLine(
                        batch_id=item.dealer_batch_id,
                        quantity=-delta,
                        raw_material_id=item.raw_material_id,
                        batch_number=item.batch_number,
                    )
                ],
                reference=locked.receipt_number,
            )
            # Emptied dealer batches are pruned by the withdrawal.
            if not StockBatch.objects.filter(pk=item.dealer_batch_id).exists():
                item.dealer_batch = None

        if delta != 0:
            item.received_quantity = new_qty
            item.save(update_fields=["received_quantity", "dealer_batch"])

    fields = []
    if receipt_date is not None:
        locked.receipt_date = receipt_date
        fields.append("receipt_date")
    if received_by is not None:
        locked.received_by = (received_by or "").strip()
        fields.append("received_by")
    if notes is not None:
        locked.notes = (notes or "").strip()
        fields.append("notes")
    if fields:
        locked.save(update_fields=fields + ["updated_at"])

    logger.info("Receipt updated", extra={"receipt_number": locked.receipt_number})
    return locked


@transaction.atomic
def delete_receipt(*, receipt: DealerReceipt) -> None:
    locked = (
        DealerReceipt.objects.select_for_update()
        .select_related("dealer", "delivery")
        .get(pk=receipt.pk)
    )

    lines = [
        StockLine(
            batch_id=item.dealer_batch_id,
            quantity=item.received_quantity,
            raw_material_id=item.raw_material_id,
            batch_number=item.batch_number,
        )
        for item in locked.items.all()
    ]

    withdraw_from_pool(BatchPool.for_dealer(locked.dealer), lines, reference=locked.receipt_number)

    delivery = locked.delivery
    number = locked.receipt_number
    locked.delete()

    delivery.status = MaterialDelivery.Status.PENDING_RECEIPT
    delivery.save(update_fields=["status", "updated_at"])

    logger.info(
        "Receipt deleted and dealer stock withdrawn",
        extra={"receipt_number": number, "delivery_number": delivery.delivery_number},
    )
