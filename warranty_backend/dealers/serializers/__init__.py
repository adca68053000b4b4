from .dealer import DealerSerializer

__all__ = ["DealerSerializer"]
