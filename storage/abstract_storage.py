"""Storage abstraction layer."""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import IO


class AbstractStorage(ABC):
    """Interface for upload storage backends."""

    @abstractmethod
    def save(self, file_obj: IO[bytes], filename: str) -> str:
        """Persist a file and return the stored name."""

    @abstractmethod
    def url(self, name: str) -> str:
        """Return the public path a stored file is served from."""
