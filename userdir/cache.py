"""Tiny in-process TTL cache.

Sits between the directory client and the network so repeated page and
detail fetches within the TTL window never leave the process.
Expiry is checked lazily on access; nothing sweeps the store in the
background, so keys that are set and never read again stay in memory.
This is best-effort and resets when the process restarts.
"""

from __future__ import annotations

import time
from dataclasses import dataclass
from typing import Any, Callable, Dict, Generic, Hashable, Optional, TypeVar

T = TypeVar("T")

# Five minutes, shared by every key unless a call site overrides it
DEFAULT_TTL_SECONDS = 300.0


@dataclass(frozen=True)
class _Entry(Generic[T]):
    expires_at: float
    value: T


class TTLCache:
    def __init__(
        self,
        default_ttl: float = DEFAULT_TTL_SECONDS,
        clock: Callable[[], float] = time.monotonic,
    ):
        self._default_ttl = float(default_ttl)
        self._clock = clock
        self._data: Dict[Hashable, _Entry[Any]] = {}

    @property
    def default_ttl(self) -> float:
        return self._default_ttl

    def _fresh_entry(self, key: Hashable) -> Optional[_Entry[Any]]:
        entry = self._data.get(key)
        if entry is None:
            return None
        if entry.expires_at <= self._clock():
            self._data.pop(key, None)
            return None
        return entry

    def get(self, key: Hashable) -> Optional[Any]:
        """Return the cached value, or None if missing or expired."""
        entry = self._fresh_entry(key)
        return entry.value if entry is not None else None

    def has(self, key: Hashable) -> bool:
        return self._fresh_entry(key) is not None

    def set(self, key: Hashable, value: Any, ttl: Optional[float] = None) -> None:
        ttl_seconds = self._default_ttl if ttl is None else float(ttl)
        self._data[key] = _Entry(expires_at=self._clock() + ttl_seconds, value=value)

    def delete(self, key: Hashable) -> None:
        self._data.pop(key, None)

    def clear(self) -> None:
        self._data.clear()

    def __len__(self) -> int:
        # Counts expired-but-unread entries too
        return len(self._data)
