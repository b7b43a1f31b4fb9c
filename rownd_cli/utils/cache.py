from __future__ import annotations

from typing import Generic, TypeVar

K = TypeVar("K")
V = TypeVar("V")


class MemoryCache(Generic[K, V]):
    """Process-local key/value map.

    Shadows the refresh token between config file writes within one
    invocation. Not shared between processes.
    """

    def __init__(self) -> None:
        self._data: dict[K, V] = {}

    def get(self, key: K, default: V | None = None) -> V | None:
        return self._data.get(key, default)

    def set(self, key: K, value: V) -> None:
        self._data[key] = value

    def delete(self, key: K) -> None:
        self._data.pop(key, None)
