from .delivery import MaterialDelivery, MaterialDeliveryItem
from .receipt import DealerReceipt, DealerReceiptItem

__all__ = [
    "MaterialDelivery",
    "MaterialDeliveryItem",
    "DealerReceipt",
    "DealerReceiptItem",
]
