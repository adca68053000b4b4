from .warranty import Warranty

__all__ = ["Warranty"]
