from .warranty import WarrantyViewSet

__all__ = ["WarrantyViewSet"]
