from .warranty import WarrantyCreateSerializer, WarrantyReallocateSerializer, WarrantySerializer

__all__ = [
    "WarrantyCreateSerializer",
    "WarrantyReallocateSerializer",
    "WarrantySerializer",
]
