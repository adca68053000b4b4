from .allocation import AllocationPreviewView
from .stock_batch import StockBatchViewSet

__all__ = [
    "AllocationPreviewView",
    "StockBatchViewSet",
]
