from .dealer import DealerViewSet

__all__ = ["DealerViewSet"]
