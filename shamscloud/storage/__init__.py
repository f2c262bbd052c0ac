from .base import Storage
from .database import TortoiseStorage

__all__ = ["Storage", "TortoiseStorage"]
