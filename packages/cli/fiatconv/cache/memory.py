from __future__ import annotations

import io
from collections.abc import Callable
from typing import BinaryIO

from fiatconv.cache.base import Store


class _Writer(io.BytesIO):
    def __init__(self, commit: Callable[[bytes], None]) -> None:
        super().__init__()
        self._commit = commit

    def close(self) -> None:
        if self.closed:
            return
        try:
            self._commit(self.getvalue())
        finally:
            super().close()


class MemoryStore(Store):
    """In-process store; bytes written become visible once the writer is closed."""

    def __init__(self, data: bytes | None = None) -> None:
        self._data = data

    @property
    def data(self) -> bytes | None:
        return self._data

    def open(self, mode: str) -> BinaryIO:
        if mode == "rb":
            if self._data is None:
                raise FileNotFoundError("memory store is empty")
            return io.BytesIO(self._data)
        if mode == "wb":
            return _Writer(self._set)
        raise ValueError(f"unsupported mode: {mode}")

    def _set(self, data: bytes) -> None:
        self._data = data
