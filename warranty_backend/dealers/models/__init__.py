from .dealer import Dealer

__all__ = ["Dealer"]
