"""Key/value cache persisted as a JSON snapshot with per-entry expiry.

The cache is meant for unimportant data in short lived processes: load
errors are ignored, and expired entries are dropped only at load time.
"""

from __future__ import annotations

import json
import logging
from collections.abc import Hashable
from dataclasses import dataclass
from typing import Any, BinaryIO, Literal

from pydantic import BaseModel

from fiatconv.cache import codec
from fiatconv.cache.base import CacheError

logger = logging.getLogger(__name__)

SNAPSHOT_VERSION = 1


@dataclass
class _Entry:
    value: object
    expires: int


class _Record(BaseModel):
    key: Any
    value: Any
    expires: int


class _Snapshot(BaseModel):
    version: Literal[1]
    entries: list[_Record]


class Cache:
    def __init__(self) -> None:
        self._store: dict[Hashable, _Entry] = {}

    @classmethod
    def load(cls, stream: BinaryIO, cutoff: int) -> Cache:
        """Load a cache from stream, dropping entries that expire before cutoff.

        Any failure yields an empty cache.
        """
        cache = cls()
        try:
            snapshot = _Snapshot.model_validate_json(stream.read())
            store = {
                codec.decode(record.key): _Entry(codec.decode(record.value), record.expires)
                for record in snapshot.entries
            }
        except (OSError, ValueError, TypeError, KeyError) as exc:
            logger.debug("ignoring unreadable cache: %s", exc)
            return cache

        cache._store = {key: entry for key, entry in store.items() if entry.expires >= cutoff}
        return cache

    def save(self, stream: BinaryIO) -> None:
        """Write every entry to stream, expired or not."""
        try:
            snapshot = {
                "version": SNAPSHOT_VERSION,
                "entries": [
                    {
                        "key": codec.encode(key),
                        "value": codec.encode(entry.value),
                        "expires": entry.expires,
                    }
                    for key, entry in self._store.items()
                ],
            }
            stream.write(json.dumps(snapshot).encode("utf-8"))
        except (OSError, ValueError, TypeError) as exc:
            raise CacheError(str(exc)) from exc

    def set(self, key: Hashable, value: object, expires: int) -> None:
        self._store[key] = _Entry(value=value, expires=expires)

    def get(self, key: Hashable) -> tuple[object | None, bool]:
        """Return the value for key and whether it was present. Expiry is not checked."""
        entry = self._store.get(key)
        if entry is None:
            return None, False
        return entry.value, True

    def __len__(self) -> int:
        return len(self._store)

    def __contains__(self, key: object) -> bool:
        return key in self._store
