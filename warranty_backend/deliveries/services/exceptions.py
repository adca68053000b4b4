# deliveries/services/exceptions.py

from batches.services.exceptions import StockEngineError


class DeliveryError(StockEngineError):
    """Raised when a delivery or receipt operation is not allowed."""

    code = "delivery_error"
