from .allocation import commit, expand_and_allocate, reverse
from .exceptions import (
    AllocationRecordError,
    ConcurrencyAbortError,
    LifecycleViolation,
    MissingBatchError,
    ShortfallError,
    StockEngineError,
)
from .fifo import allocate_fifo, plan_allocations, require_sufficient, validate_sufficiency
from .lifecycle import recertify_batch, refresh_expired_batches
from .pools import BatchPool

__all__ = [
    "commit",
    "expand_and_allocate",
    "reverse",
    "AllocationRecordError",
    "ConcurrencyAbortError",
    "LifecycleViolation",
    "MissingBatchError",
    "ShortfallError",
    "StockEngineError",
    "allocate_fifo",
    "plan_allocations",
    "require_sufficient",
    "validate_sufficiency",
    "recertify_batch",
    "refresh_expired_batches",
    "BatchPool",
]
