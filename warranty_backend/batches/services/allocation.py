# batches/services/allocation.py

"""
ALLOCATION ENGINE (ENTRYPOINTS)

The three call shapes used by consuming workflows:

    plan   = expand_and_allocate(recipe=..., area=..., dealer=...)   # read-only
    record = commit(plan, reference=...)                            # atomic deduction
    reverse(record, dealer=...)                                     # atomic restoration

Planning never writes. Committing refuses any plan with a shortfall.
"""

from __future__ import annotations

from batches.services.fifo import AllocationPlan, plan_allocations
from batches.services.pools import BatchPool
from batches.services.stock_commit import commit_plan, reverse_allocation
from products.services.recipe_calculator import expand_recipe


def expand_and_allocate(*, recipe, area, dealer=None) -> AllocationPlan:
    """
    Expand a recipe for an area and plan FIFO draws against one pool.

    The returned plan may carry shortfalls; callers decide whether to show
    them (preview) or fail (commit).
    """
    pool = BatchPool.warehouse() if dealer is None else BatchPool.for_dealer(dealer)

    requirements = expand_recipe(recipe, area)
    snapshots = pool.snapshot(r.raw_material_id for r in requirements)

    return plan_allocations(requirements, snapshots, dealer_id=pool.dealer_id)


def commit(plan: AllocationPlan, *, reference: str = "") -> dict:
    return commit_plan(plan, reference=reference)


def reverse(record, *, dealer=None, reference: str = ""):
    return reverse_allocation(record, dealer=dealer, reference=reference)
