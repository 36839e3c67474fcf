"""
Base storage abstraction for published artifacts.

Provides a small interface over the output repositories.
All paths are relative to the storage root (a local repository directory).
"""
import logging
from abc import ABC, abstractmethod
from pathlib import Path
from typing import Union

logger = logging.getLogger(__name__)


class StorageBackend(ABC):
    """
    Abstract base class for storage backends.

    All implementations must support:
    - Path operations relative to a root
    - Read/write bytes
    - Exists checks
    """

    def __init__(self, base_path: Union[str, Path]):
        """
        Initialize storage backend.

        Args:
            base_path: Root path for all operations
        """
        self.base_path = str(base_path)

    @property
    @abstractmethod
    def backend_type(self) -> str:
        pass

    @abstractmethod
    def write_bytes(self, data: bytes, path: str) -> str:
        """
        Write bytes to storage, replacing any existing content.

        Args:
            data: Bytes to write
            path: Relative path from base_path

        Returns:
            Full path where data was written
        """
        pass

    @abstractmethod
    def read_bytes(self, path: str) -> bytes:
        """
        Read bytes from storage.

        Args:
            path: Relative path from base_path

        Returns:
            File contents as bytes
        """
        pass

    @abstractmethod
    def exists(self, path: str) -> bool:
        """
        Check if path exists.

        Args:
            path: Relative path from base_path

        Returns:
            True if path exists
        """
        pass

    @abstractmethod
    def get_full_path(self, path: str) -> str:
        pass


class LocalStorage(StorageBackend):
    """Local filesystem storage backend."""

    def __init__(self, base_path: Union[str, Path], create_base_dir: bool = True):
        """
        Initialize local storage.

        Args:
            base_path: Base directory for all operations
            create_base_dir: Create base_path if missing. When False, writes
                into a missing directory fail with FileNotFoundError.
        """
        super().__init__(base_path)
        self.base_dir = Path(base_path).resolve()
        self.create_base_dir = create_base_dir
        if create_base_dir:
            self.base_dir.mkdir(parents=True, exist_ok=True)

    @property
    def backend_type(self) -> str:
        return "local"

    def _resolve_path(self, path: str) -> Path:
        """Convert relative path to absolute local path."""
        return self.base_dir / path

    def write_bytes(self, data: bytes, path: str) -> str:
        full_path = self._resolve_path(path)
        if self.create_base_dir:
            full_path.parent.mkdir(parents=True, exist_ok=True)
        full_path.write_bytes(data)
        logger.debug(f"[LocalStorage] Wrote {len(data)} bytes to {full_path}")
        return str(full_path)

    def read_bytes(self, path: str) -> bytes:
        return self._resolve_path(path).read_bytes()

    def exists(self, path: str) -> bool:
        return self._resolve_path(path).exists()

    def get_full_path(self, path: str) -> str:
        return str(self._resolve_path(path))
