# warranties/services/warranty_service.py

"""
WARRANTY SERVICE (MATERIAL CONSUMPTION)

Purpose:
- Issue a warranty and consume the dealer's materials for it, in ONE commit.
- Re-allocate when the installation changes (area / product): the old
  allocation is reversed and a fresh FIFO plan is committed, in ONE commit.
- Delete a warranty and give its materials back to the dealer pool.

HARD RULES:
- Warranties always draw from the issuing dealer's pool.
- Any shortfall aborts the whole operation; nothing is deducted and, on
  re-allocation, the original allocation stays in place.
- material_usage always holds the record of what is currently deducted.
"""

from __future__ import annotations

import calendar
import logging
from datetime import date

from django.db import IntegrityError, transaction
from django.utils import timezone

from batches.services.allocation import commit, expand_and_allocate, reverse
from products.models import ProductRecipe
from products.services.quantities import to_quantity
from warranties.models import Warranty
from warranties.services.exceptions import WarrantyError

logger = logging.getLogger(__name__)


def add_months(start: date, months: int) -> date:
    """
    Calendar month arithmetic, clamped to the last day of the target month.
    """
    month_index = start.month - 1 + int(months)
    year = start.year + month_index // 12
    month = month_index % 12 + 1
    day = min(start.day, calendar.monthrange(year, month)[1])
    return date(year, month, day)


def _active_recipe(product):
    try:
        recipe = product.recipe
    except ProductRecipe.DoesNotExist:
        return None
    return recipe if recipe.is_active else None


def _to_area(value):
    try:
        area = to_quantity(value)
    except ValueError as exc:
        raise WarrantyError(str(exc)) from exc
    if area < 0:
        raise WarrantyError("installation_area cannot be negative")
    return area


def _number_taken(number: str) -> bool:
    return Warranty.objects.filter(warranty_number=number).exists()


def _allocate(*, warranty_number, product, area, dealer) -> dict:
    plan = expand_and_allocate(recipe=_active_recipe(product), area=area, dealer=dealer)
    return commit(plan, reference=warranty_number)


# ============================================================
# ISSUE
# ============================================================

@transaction.atomic
def issue_warranty(
    *,
    dealer,
    product,
    warranty_number,
    customer_name,
    installation_area,
    warranty_date=None,
    warranty_period_months: int = 12,
    customer_phone: str = "",
    customer_address: str = "",
    user=None,
) -> Warranty:
    number = (warranty_number or "").strip()
    if not number:
        raise WarrantyError("warranty_number is required")

    if _number_taken(number):
        raise WarrantyError(f"Warranty {number} already exists")

    if dealer is None or product is None:
        raise WarrantyError("dealer and product are required")

    area = _to_area(installation_area)
    warranty_date = warranty_date or timezone.localdate()

    record = _allocate(warranty_number=number, product=product, area=area, dealer=dealer)

    try:
        with transaction.atomic():
            warranty = Warranty.objects.create(
                warranty_number=number,
                dealer=dealer,
                product=product,
                customer_name=(customer_name or "").strip(),
                customer_phone=(customer_phone or "").strip(),
                customer_address=(customer_address or "").strip(),
                installation_area=area,
                warranty_date=warranty_date,
                warranty_period_months=warranty_period_months,
                expiry_date=add_months(warranty_date, warranty_period_months),
                material_usage=record,
                created_by=user if getattr(user, "is_authenticated", False) else None,
            )
    except IntegrityError as exc:
        # Same number committed concurrently; the stock deduction rolls back with us.
        raise WarrantyError(f"Warranty {number} already exists") from exc

    logger.info(
        "Warranty issued",
        extra={
            "warranty_number": number,
            "dealer_code": dealer.dealer_code,
            "materials": len(record),
        },
    )
    return warranty


# ============================================================
# RE-ALLOCATE (installation change)
# ============================================================

@transaction.atomic
def reallocate_warranty(*, warranty: Warranty, installation_area=None, product=None) -> Warranty:
    """
    Reverse the current allocation, then commit a new one for the changed
    installation. A shortfall rolls everything back, reversal included.
    """
    locked = (
        Warranty.objects.select_for_update()
        .select_related("dealer", "product")
        .get(pk=warranty.pk)
    )

    area = locked.installation_area if installation_area is None else _to_area(installation_area)
    new_product = product or locked.product

    reverse(locked.material_usage, dealer=locked.dealer, reference=locked.warranty_number)

    record = _allocate(
        warranty_number=locked.warranty_number,
        product=new_product,
        area=area,
        dealer=locked.dealer,
    )

    locked.installation_area = area
    locked.product = new_product
    locked.material_usage = record
    locked.save(update_fields=["installation_area", "product", "material_usage", "updated_at"])

    logger.info(
        "Warranty materials re-allocated",
        extra={"warranty_number": locked.warranty_number, "materials": len(record)},
    )
    return locked


# ============================================================
# DELETE
# ============================================================

@transaction.atomic
def delete_warranty(*, warranty: Warranty) -> None:
    locked = (
        Warranty.objects.select_for_update()
        .select_related("dealer")
        .get(pk=warranty.pk)
    )

    reverse(locked.material_usage, dealer=locked.dealer, reference=locked.warranty_number)

    number = locked.warranty_number
    locked.delete()

    logger.info("Warranty deleted and materials restored", extra={"warranty_number": number})
