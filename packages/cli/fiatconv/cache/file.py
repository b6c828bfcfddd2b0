from __future__ import annotations

from pathlib import Path
from typing import BinaryIO

from fiatconv.cache.base import Store


class FileStore(Store):
    def __init__(self, path: str | Path) -> None:
        self._path = Path(path)

    @property
    def path(self) -> Path:
        return self._path

    def open(self, mode: str) -> BinaryIO:
        if mode == "wb":
            self._path.parent.mkdir(parents=True, exist_ok=True)
        elif mode != "rb":
            raise ValueError(f"unsupported mode: {mode}")
        return open(self._path, mode)
