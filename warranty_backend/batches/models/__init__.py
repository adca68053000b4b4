from .stock_batch import StockBatch
from .recertification import RecertificationHistory

__all__ = [
    "StockBatch",
    "RecertificationHistory",
]
