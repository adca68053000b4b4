from .delivery import DealerReceiptViewSet, MaterialDeliveryViewSet

__all__ = ["DealerReceiptViewSet", "MaterialDeliveryViewSet"]
