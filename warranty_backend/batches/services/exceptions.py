# batches/services/exceptions.py

"""
STOCK ENGINE ERRORS

Centralized domain errors for allocation, commit, reversal and lifecycle.
Every error carries a stable `code` and `as_dict()` so views can answer with
structured payloads.
"""


class StockEngineError(Exception):
    """Base exception for all stock engine failures."""

    code = "stock_error"

    def as_dict(self) -> dict:
        return {"code": self.code, "detail": str(self)}


class ShortfallError(StockEngineError):
    """Raised when at least one material cannot be fully covered by its pool."""

    code = "insufficient_stock"

    def __init__(self, shortfalls):
        self.shortfalls = list(shortfalls)
        parts = [
            f"{s.material_code}: required {s.total_required}, available {s.total_available}"
            for s in self.shortfalls
        ]
        super().__init__("Insufficient stock. " + "; ".join(parts))

    def as_dict(self) -> dict:
        return {
            "code": self.code,
            "detail": str(self),
            "shortfalls": [s.as_dict() for s in self.shortfalls],
        }


class ConcurrencyAbortError(StockEngineError):
    """Raised when a batch no longer holds the quantity a plan was built on."""

    code = "concurrent_modification"

    def __init__(self, batch_id, requested, available):
        self.batch_id = batch_id
        self.requested = requested
        self.available = available
        super().__init__(
            f"Batch {batch_id} changed since planning. "
            f"Requested: {requested}, Available: {available}"
        )

    def as_dict(self) -> dict:
        return {
            "code": self.code,
            "detail": str(self),
            "batch_id": str(self.batch_id),
            "requested": str(self.requested),
            "available": str(self.available),
        }


class MissingBatchError(StockEngineError):
    """Raised when a planned batch no longer exists at commit time."""

    code = "missing_batch"

    def __init__(self, batch_id):
        self.batch_id = batch_id
        super().__init__(f"Batch {batch_id} no longer exists")

    def as_dict(self) -> dict:
        return {"code": self.code, "detail": str(self), "batch_id": str(self.batch_id)}


class LifecycleViolation(StockEngineError):
    """Raised when a batch is not eligible for a lifecycle transition."""

    code = "lifecycle_violation"

    def __init__(self, reason: str, message: str):
        self.reason = reason
        super().__init__(message)

    def as_dict(self) -> dict:
        return {"code": self.code, "reason": self.reason, "detail": str(self)}


class AllocationRecordError(StockEngineError):
    """Raised when a persisted allocation record cannot be decoded."""

    code = "invalid_allocation_record"


class IntakeError(StockEngineError):
    """Raised when a warehouse intake can no longer be corrected or cancelled."""

    code = "intake_locked"
