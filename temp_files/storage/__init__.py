"""Storage backends."""

from temp_files.storage.base import StorageBackend, StorageError
from temp_files.storage.local import LocalStorage

__all__ = ["StorageBackend", "StorageError", "LocalStorage"]
