# batches/services/fifo.py

"""
FIFO BATCH ALLOCATOR + SUFFICIENCY VALIDATOR

Purpose:
- Given a required quantity and a pool's candidate batches, decide how much to
  draw from each batch, oldest received first.
- Validate a whole set of material requirements against one pool snapshot and
  report every shortfall at once.

HARD RULES:
- Pure functions over snapshots: nothing here reads or writes the database.
- Candidates are batches with current_stock > 0 (expired batches included).
- Order is received_at ascending; ties keep the input (creation) order.
- total_available is summed over ALL candidates, including undrawn ones.
- Allocation stops as soon as the requirement is covered.
- A plan with any shortfall must never reach the committer.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date, datetime
from decimal import Decimal
from typing import Dict, Iterable, List, Mapping, Optional, Sequence, Tuple
from uuid import UUID

from batches.services.exceptions import ShortfallError
from products.services.quantities import ZERO, to_quantity
from products.services.recipe_calculator import MaterialRequirement


# ============================================================
# VALUE TYPES
# ============================================================

@dataclass(frozen=True)
class BatchSnapshot:
    batch_id: UUID
    batch_number: str
    current_stock: Decimal
    received_at: datetime
    expiry_date: Optional[date] = None


@dataclass(frozen=True)
class BatchDraw:
    batch_id: UUID
    batch_number: str
    quantity_used: Decimal
    batch_stock: Decimal
    received_at: datetime
    expiry_date: Optional[date] = None


@dataclass(frozen=True)
class FifoResult:
    required: Decimal
    draws: Tuple[BatchDraw, ...]
    total_available: Decimal

    @property
    def sufficient(self) -> bool:
        return self.total_available >= self.required

    @property
    def allocated(self) -> Decimal:
        return sum((d.quantity_used for d in self.draws), ZERO)


@dataclass(frozen=True)
class Shortfall:
    raw_material_id: UUID
    material_code: str
    material_name: str
    total_required: Decimal
    total_available: Decimal

    @property
    def shortfall(self) -> Decimal:
        return self.total_required - self.total_available

    def as_dict(self) -> dict:
        return {
            "raw_material_id": str(self.raw_material_id),
            "material_code": self.material_code,
            "material_name": self.material_name,
            "total_required": str(self.total_required),
            "total_available": str(self.total_available),
            "shortfall": str(self.shortfall),
        }


@dataclass(frozen=True)
class MaterialAllocation:
    requirement: MaterialRequirement
    result: FifoResult

    @property
    def sufficient(self) -> bool:
        return self.result.sufficient

    def shortfall(self) -> Optional[Shortfall]:
        if self.sufficient:
            return None
        req = self.requirement
        return Shortfall(
            raw_material_id=req.raw_material_id,
            material_code=req.material_code,
            material_name=req.material_name,
            total_required=self.result.required,
            total_available=self.result.total_available,
        )


@dataclass(frozen=True)
class AllocationPlan:
    """
    One pool, many materials.

    dealer_id None means the plan draws from the warehouse pool.
    """

    dealer_id: Optional[UUID]
    allocations: Tuple[MaterialAllocation, ...] = field(default_factory=tuple)

    @property
    def is_warehouse(self) -> bool:
        return self.dealer_id is None

    @property
    def shortfalls(self) -> List[Shortfall]:
        return [s for s in (a.shortfall() for a in self.allocations) if s is not None]

    @property
    def is_sufficient(self) -> bool:
        return not self.shortfalls

    def draws(self) -> List[BatchDraw]:
        return [d for a in self.allocations for d in a.result.draws]


# ============================================================
# FIFO ALLOCATION
# ============================================================

def allocate_fifo(required, batches: Iterable[BatchSnapshot]) -> FifoResult:
    """
    Walk batches oldest-received first, drawing min(remaining, stock) from each.

    sorted() is stable, so batches sharing a received_at keep the order the
    caller supplied them in (creation order when read from the database).
    """
    required_qty = to_quantity(required)

    candidates = sorted(
        (b for b in batches if to_quantity(b.current_stock) > 0),
        key=lambda b: b.received_at,
    )
    total_available = sum((to_quantity(b.current_stock) for b in candidates), ZERO)

    draws: List[BatchDraw] = []
    remaining = required_qty

    for batch in candidates:
        if remaining <= 0:
            break

        stock = to_quantity(batch.current_stock)
        used = stock if stock <= remaining else remaining

        draws.append(
            BatchDraw(
                batch_id=batch.batch_id,
                batch_number=batch.batch_number,
                quantity_used=used,
                batch_stock=stock,
                received_at=batch.received_at,
                expiry_date=batch.expiry_date,
            )
        )
        remaining -= used

    return FifoResult(
        required=required_qty,
        draws=tuple(draws),
        total_available=total_available,
    )


# ============================================================
# SUFFICIENCY VALIDATION
# ============================================================

def plan_allocations(
    requirements: Sequence[MaterialRequirement],
    snapshots: Mapping[UUID, Sequence[BatchSnapshot]],
    *,
    dealer_id: Optional[UUID] = None,
) -> AllocationPlan:
    """
    Build an AllocationPlan for every requirement against ONE pool snapshot.

    If the same material is required twice, the second requirement sees the
    stock left over by the first.
    """
    drawn: Dict[UUID, Decimal] = {}
    allocations: List[MaterialAllocation] = []

    for requirement in requirements:
        candidates = []
        for snap in snapshots.get(requirement.raw_material_id, ()):
            already = drawn.get(snap.batch_id, ZERO)
            if already:
                snap = BatchSnapshot(
                    batch_id=snap.batch_id,
                    batch_number=snap.batch_number,
                    current_stock=to_quantity(snap.current_stock) - already,
                    received_at=snap.received_at,
                    expiry_date=snap.expiry_date,
                )
            candidates.append(snap)

        result = allocate_fifo(requirement.total_quantity, candidates)

        for draw in result.draws:
            drawn[draw.batch_id] = drawn.get(draw.batch_id, ZERO) + draw.quantity_used

        allocations.append(MaterialAllocation(requirement=requirement, result=result))

    return AllocationPlan(dealer_id=dealer_id, allocations=tuple(allocations))


def require_sufficient(plan: AllocationPlan) -> AllocationPlan:
    shortfalls = plan.shortfalls
    if shortfalls:
        raise ShortfallError(shortfalls)
    return plan


def validate_sufficiency(
    requirements: Sequence[MaterialRequirement],
    snapshots: Mapping[UUID, Sequence[BatchSnapshot]],
    *,
    dealer_id: Optional[UUID] = None,
) -> AllocationPlan:
    """
    Plan + fail closed: returns a fully sufficient plan or raises ShortfallError
    listing every insufficient material.
    """
    return require_sufficient(
        plan_allocations(requirements, snapshots, dealer_id=dealer_id)
    )
