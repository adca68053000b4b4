# batches/services/allocation_record.py

"""
ALLOCATION RECORD CODEC

The allocation record is what a consuming document (e.g. a warranty) persists
so its deduction can be reversed later, exactly, batch by batch.

Shape (JSON, keyed by material_code):

{
  "FILM-01": {
    "raw_material_id": "<uuid>",
    "material_code": "FILM-01",
    "material_name": "...",
    "material_type": "...",
    "unit": "m2",
    "quantity_per_unit": "1.1000",
    "total_quantity": "13.200",
    "batch_number": "B-001, B-002",
    "total_available_stock": "40.000",
    "is_stock_sufficient": true,
    "batches": [
      {"batch_id": "<uuid>", "batch_number": "B-001", "quantity_used": "5.000",
       "batch_stock": "5.000", "received_at": "2026-01-01T00:00:00+00:00",
       "expiry_date": "2026-07-01"},
      ...
    ]
  }
}

Rules:
- Decimals are written as strings (no float drift).
- Datetimes and dates are ISO-8601 (expiry_date may be null).
- Decoding also accepts a JSON string or a list of material entries.
"""

from __future__ import annotations

import json
from dataclasses import dataclass
from datetime import date, datetime
from decimal import Decimal
from typing import List, Optional
from uuid import UUID

from django.utils.dateparse import parse_date, parse_datetime

from batches.services.exceptions import AllocationRecordError
from batches.services.fifo import AllocationPlan
from products.services.quantities import to_quantity


@dataclass(frozen=True)
class StockLine:
    """
    One batch movement: the unit the committer and the reversal work in.

    raw_material_id / batch_number / received_at are carried so that a dealer
    batch deleted in the meantime can be re-created on reversal.
    """

    batch_id: Optional[UUID]
    quantity: Decimal
    raw_material_id: Optional[UUID] = None
    material_code: str = ""
    batch_number: str = ""
    received_at: Optional[datetime] = None
    expiry_date: Optional[date] = None


# ============================================================
# ENCODE
# ============================================================

def build_allocation_record(plan: AllocationPlan) -> dict:
    record = {}

    for allocation in plan.allocations:
        req = allocation.requirement
        result = allocation.result

        record[req.material_code] = {
            "raw_material_id": str(req.raw_material_id),
            "material_code": req.material_code,
            "material_name": req.material_name,
            "material_type": req.material_type,
            "unit": req.unit,
            "quantity_per_unit": str(req.quantity_per_unit),
            "total_quantity": str(req.total_quantity),
            "batch_number": ", ".join(d.batch_number for d in result.draws),
            "total_available_stock": str(result.total_available),
            "is_stock_sufficient": result.sufficient,
            "batches": [
                {
                    "batch_id": str(d.batch_id),
                    "batch_number": d.batch_number,
                    "quantity_used": str(d.quantity_used),
                    "batch_stock": str(d.batch_stock),
                    "received_at": d.received_at.isoformat() if d.received_at else None,
                    "expiry_date": d.expiry_date.isoformat() if d.expiry_date else None,
                }
                for d in result.draws
            ],
        }

    return record


def serialize_allocation_record(record: dict) -> str:
    return json.dumps(record, sort_keys=True)


# ============================================================
# DECODE
# ============================================================

def _entries(record) -> list:
    if record is None or record == "":
        return []

    if isinstance(record, str):
        try:
            record = json.loads(record)
        except ValueError as exc:
            raise AllocationRecordError("Allocation record is not valid JSON") from exc

    if isinstance(record, dict):
        return list(record.values())

    if isinstance(record, list):
        return record

    raise AllocationRecordError("Allocation record must be an object or a list")


def _uuid(value, *, field: str, required: bool = True) -> Optional[UUID]:
    if value in (None, ""):
        if required:
            raise AllocationRecordError(f"{field} is required")
        return None
    try:
        return UUID(str(value))
    except ValueError as exc:
        raise AllocationRecordError(f"{field} is not a valid UUID: {value!r}") from exc


def _date(value) -> Optional[date]:
    if value in (None, ""):
        return None
    try:
        parsed = parse_date(str(value))
    except ValueError as exc:
        raise AllocationRecordError(f"expiry_date is not a valid date: {value!r}") from exc
    if parsed is None:
        raise AllocationRecordError(f"expiry_date is not a valid date: {value!r}")
    return parsed


def parse_allocation_record(record) -> List[StockLine]:
    """
    Decode a persisted record into StockLines (one per batch draw).
    """
    lines: List[StockLine] = []

    for entry in _entries(record):
        if not isinstance(entry, dict):
            raise AllocationRecordError("Allocation record entries must be objects")

        material_id = _uuid(entry.get("raw_material_id"), field="raw_material_id", required=False)
        material_code = str(entry.get("material_code") or "")
        batches = entry.get("batches") or []

        if not isinstance(batches, list):
            raise AllocationRecordError(f"batches for {material_code or 'material'} must be a list")

        for row in batches:
            if not isinstance(row, dict):
                raise AllocationRecordError("Batch entries must be objects")

            try:
                quantity = to_quantity(row.get("quantity_used"))
            except ValueError as exc:
                raise AllocationRecordError(str(exc)) from exc

            if quantity <= 0:
                continue

            received_raw = row.get("received_at")
            expiry_raw = row.get("expiry_date")
            lines.append(
                StockLine(
                    batch_id=_uuid(row.get("batch_id"), field="batch_id"),
                    quantity=quantity,
                    raw_material_id=material_id,
                    material_code=material_code,
                    batch_number=str(row.get("batch_number") or ""),
                    received_at=parse_datetime(received_raw) if received_raw else None,
                    expiry_date=_date(expiry_raw),
                )
            )

    return lines
