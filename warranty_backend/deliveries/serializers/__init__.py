from .delivery import (
    DealerReceiptSerializer,
    DeliveryCreateSerializer,
    DeliveryUpdateSerializer,
    MaterialDeliverySerializer,
    ReceiptUpdateSerializer,
    ReceiveDeliverySerializer,
)

__all__ = [
    "DealerReceiptSerializer",
    "DeliveryCreateSerializer",
    "DeliveryUpdateSerializer",
    "MaterialDeliverySerializer",
    "ReceiptUpdateSerializer",
    "ReceiveDeliverySerializer",
]
