# warranties/services/exceptions.py

from batches.services.exceptions import StockEngineError


class WarrantyError(StockEngineError):
    """Raised when a warranty cannot be issued, changed or removed."""

    code = "warranty_error"
