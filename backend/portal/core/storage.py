"""Key-value storage used for client-scoped gate state.

The PIN rate limiter and PIN session marker keep their state in a small
key-value store rather than in module globals, so the backing store can be
swapped (in-memory for tests and single-process deployments, something
shared for multi-worker deployments) without touching the gate logic.

Each browser client gets its own namespace, mirroring the browser-local
storage the gate was originally built on. Clearing the client cookie
therefore resets the gate: this is a convenience barrier for producers,
not a robust brute-force control. Server-side IP rate limiting
(portal.core.rate_limit) sits in front of it.
"""

import threading
import time
from typing import Callable, Protocol


class KeyValueStore(Protocol):
    """Minimal string key-value interface.

    ttl_seconds, when given, bounds how long the entry may be kept.
    """

    def get(self, key: str) -> str | None: ...

    def set(self, key: str, value: str, ttl_seconds: float | None = None) -> None: ...

    def remove(self, key: str) -> None: ...


class MemoryStore:
    """Thread-safe in-process key-value store with optional per-entry expiry.

    Expired entries read as missing and are dropped on access. Every
    prune_interval writes the whole store is swept, so entries written by
    clients that never return are reclaimed too.
    """

    def __init__(self, clock: Callable[[], float] = time.time, prune_interval: int = 256) -> None:
        self._data: dict[str, tuple[str, float | None]] = {}
        self._lock = threading.Lock()
        self.clock = clock
        self.prune_interval = max(1, prune_interval)
        self._writes = 0

    def _expired(self, expires_at: float | None, now: float) -> bool:
        return expires_at is not None and now >= expires_at

    def _prune_locked(self, now: float) -> int:
        stale = [k for k, (_, exp) in self._data.items() if self._expired(exp, now)]
        for key in stale:
            del self._data[key]
        return len(stale)

    def get(self, key: str) -> str | None:
        with self._lock:
            entry = self._data.get(key)
            if entry is None:
                return None
            value, expires_at = entry
            if self._expired(expires_at, self.clock()):
                del self._data[key]
                return None
            return value

    def set(self, key: str, value: str, ttl_seconds: float | None = None) -> None:
        with self._lock:
            now = self.clock()
            expires_at = now + ttl_seconds if ttl_seconds is not None else None
            self._data[key] = (value, expires_at)
            self._writes += 1
            if self._writes % self.prune_interval == 0:
                self._prune_locked(now)

    def remove(self, key: str) -> None:
        with self._lock:
            self._data.pop(key, None)

    def prune(self) -> int:
        """Drop every expired entry; returns how many were removed."""
        with self._lock:
            return self._prune_locked(self.clock())

    def clear(self) -> None:
        with self._lock:
            self._data.clear()

    def __len__(self) -> int:
        with self._lock:
            now = self.clock()
            return sum(1 for _, exp in self._data.values() if not self._expired(exp, now))


class NamespacedStore:
    """View of another store with every key prefixed by a namespace."""

    def __init__(self, store: KeyValueStore, namespace: str):
        if not namespace:
            raise ValueError("namespace must not be empty")
        self.store = store
        self.namespace = namespace

    def _key(self, key: str) -> str:
        return f"{self.namespace}:{key}"

    def get(self, key: str) -> str | None:
        return self.store.get(self._key(key))

    def set(self, key: str, value: str, ttl_seconds: float | None = None) -> None:
        self.store.set(self._key(key), value, ttl_seconds=ttl_seconds)

    def remove(self, key: str) -> None:
        self.store.remove(self._key(key))


# Process-wide store backing the per-client gate namespaces
client_state_store = MemoryStore()


def get_client_store(client_id: str) -> NamespacedStore:
    """Get the gate state namespace for one browser client."""
    return NamespacedStore(client_state_store, f"client:{client_id}")
