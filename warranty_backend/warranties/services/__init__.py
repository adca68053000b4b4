from .exceptions import WarrantyError
from .warranty_service import delete_warranty, issue_warranty, reallocate_warranty

__all__ = [
    "WarrantyError",
    "delete_warranty",
    "issue_warranty",
    "reallocate_warranty",
]
