from __future__ import annotations

from typing import BinaryIO, Protocol


class CacheError(Exception):
    """Raised when the cache cannot be written to its store."""


class Store(Protocol):
    def open(self, mode: str) -> BinaryIO:
        """Open the backing location for reading ("rb") or overwriting ("wb").

        Reading a location that holds nothing raises FileNotFoundError.
        """
        ...
