# deliveries/services/numbering.py

"""
Document numbers:
- deliveries: DEL-YYYYMMDD-NNN
- receipts:   RCP-<dealer_code>-YYYYMMDD-NNN

The sequence restarts per prefix (per day, and per dealer for receipts).
"""

from __future__ import annotations


def next_document_number(*, model, field: str, prefix: str, width: int = 3) -> str:
    existing = model.objects.filter(**{f"{field}__startswith": prefix}).values_list(field, flat=True)

    highest = 0
    for number in existing:
        suffix = number[len(prefix):]
        if suffix.isdigit():
            highest = max(highest, int(suffix))

    return f"{prefix}{highest + 1:0{width}d}"


def delivery_prefix(delivery_date) -> str:
    return f"DEL-{delivery_date:%Y%m%d}-"


def receipt_prefix(dealer_code: str, receipt_date) -> str:
    return f"RCP-{dealer_code}-{receipt_date:%Y%m%d}-"
