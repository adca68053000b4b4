from .stock_batch import (
    AllocationPreviewSerializer,
    IntakeAdjustSerializer,
    RecertificationHistorySerializer,
    RecertifySerializer,
    StockBatchMetadataSerializer,
    StockBatchSerializer,
    WarehouseIntakeSerializer,
)

__all__ = [
    "AllocationPreviewSerializer",
    "IntakeAdjustSerializer",
    "RecertificationHistorySerializer",
    "RecertifySerializer",
    "StockBatchMetadataSerializer",
    "StockBatchSerializer",
    "WarehouseIntakeSerializer",
]
