# batches/services/pools.py

"""
BATCH POOLS

One StockBatch table, two owner scopes:
- BatchPool.warehouse()         -> dealer IS NULL
- BatchPool.for_dealer(dealer)  -> dealer = <dealer>

The pool is the only place that knows how a scope maps onto the table.
Pool policy:
- maintains_material_aggregate: warehouse commits also move RawMaterial.current_stock
- prunes_empty_batches: dealer batches emptied by a receipt withdrawal are deleted
"""

from __future__ import annotations

from collections import defaultdict
from typing import Dict, Iterable, List, Optional
from uuid import UUID

from batches.models import StockBatch
from batches.services.fifo import BatchSnapshot


class BatchPool:
    def __init__(self, dealer=None):
        self.dealer_id: Optional[UUID] = getattr(dealer, "id", dealer)

    @classmethod
    def warehouse(cls) -> "BatchPool":
        return cls(dealer=None)

    @classmethod
    def for_dealer(cls, dealer) -> "BatchPool":
        if dealer is None:
            raise ValueError("dealer is required for a dealer pool")
        return cls(dealer=dealer)

    # -------------------------------------------------
    # POLICY
    # -------------------------------------------------

    @property
    def is_warehouse(self) -> bool:
        return self.dealer_id is None

    @property
    def maintains_material_aggregate(self) -> bool:
        return self.is_warehouse

    @property
    def prunes_empty_batches(self) -> bool:
        return not self.is_warehouse

    @property
    def label(self) -> str:
        return "warehouse" if self.is_warehouse else f"dealer:{self.dealer_id}"

    # -------------------------------------------------
    # QUERIES
    # -------------------------------------------------

    def queryset(self):
        qs = StockBatch.objects.all()
        if self.is_warehouse:
            return qs.filter(dealer__isnull=True)
        return qs.filter(dealer_id=self.dealer_id)

    def snapshot(self, material_ids: Iterable) -> Dict[UUID, List[BatchSnapshot]]:
        """
        Read candidate batches (current_stock > 0) for the given materials,
        grouped by material, in FIFO order.
        """
        material_ids = list(material_ids)
        grouped: Dict[UUID, List[BatchSnapshot]] = defaultdict(list)
        if not material_ids:
            return grouped

        rows = (
            self.queryset()
            .filter(raw_material_id__in=material_ids, current_stock__gt=0)
            .order_by("received_at", "created_at")
            .values_list(
                "id",
                "raw_material_id",
                "batch_number",
                "current_stock",
                "received_at",
                "expiry_date",
            )
        )

        for batch_id, material_id, number, stock, received_at, expiry in rows:
            grouped[material_id].append(
                BatchSnapshot(
                    batch_id=batch_id,
                    batch_number=number,
                    current_stock=stock,
                    received_at=received_at,
                    expiry_date=expiry,
                )
            )

        return grouped

    def lock(self, batch_ids: Iterable) -> Dict[UUID, StockBatch]:
        """
        SELECT ... FOR UPDATE the named batches of THIS pool, in a stable order.
        Must be called inside transaction.atomic().
        """
        ids = sorted({b for b in batch_ids}, key=str)
        if not ids:
            return {}

        rows = (
            self.queryset()
            .select_for_update()
            .filter(id__in=ids)
            .order_by("id")
        )
        return {row.id: row for row in rows}

    def find_by_natural_key(self, *, raw_material_id, batch_number) -> Optional[StockBatch]:
        return (
            self.queryset()
            .select_for_update()
            .filter(raw_material_id=raw_material_id, batch_number=batch_number)
            .first()
        )

    def __repr__(self):
        return f"<BatchPool {self.label}>"
