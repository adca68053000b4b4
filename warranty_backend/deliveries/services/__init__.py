from .delivery_service import create_delivery, delete_delivery, update_delivery
from .exceptions import DeliveryError
from .receipt_service import delete_receipt, receive_delivery, update_receipt

__all__ = [
    "create_delivery",
    "delete_delivery",
    "DeliveryError",
    "delete_receipt",
    "receive_delivery",
    "update_delivery",
    "update_receipt",
]
