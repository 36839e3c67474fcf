"""Storage package."""
from .base import LocalStorage, StorageBackend

__all__ = ["LocalStorage", "StorageBackend"]
