"""Unit tests for the key-value store abstraction."""

import pytest

from portal.core.storage import MemoryStore, NamespacedStore, get_client_store, client_state_store


class TestMemoryStore:
    def test_get_missing_returns_none(self):
        assert MemoryStore().get("missing") is None

    def test_set_get_remove(self):
        store = MemoryStore()
        store.set("k", "v")
        assert store.get("k") == "v"
        store.remove("k")
        assert store.get("k") is None

    def test_remove_missing_is_noop(self):
        MemoryStore().remove("missing")

    def test_clear(self):
        store = MemoryStore()
        store.set("a", "1")
        store.set("b", "2")
        assert len(store) == 2
        store.clear()
        assert len(store) == 0


class TestNamespacedStore:
    def test_keys_are_prefixed(self):
        backing = MemoryStore()
        NamespacedStore(backing, "client:abc").set("pin_attempts", "{}")
        assert backing.get("client:abc:pin_attempts") == "{}"

    def test_namespaces_do_not_collide(self):
        backing = MemoryStore()
        first = NamespacedStore(backing, "one")
        second = NamespacedStore(backing, "two")
        first.set("key", "1")
        assert second.get("key") is None

    def test_empty_namespace_rejected(self):
        with pytest.raises(ValueError):
            NamespacedStore(MemoryStore(), "")

    def test_get_client_store_uses_shared_backing_store(self):
        get_client_store("browser-1").set("pin_authenticated", "123")
        assert client_state_store.get("client:browser-1:pin_authenticated") == "123"


class FakeClock:
    def __init__(self, start: float = 1_000.0):
        self.now = start

    def __call__(self) -> float:
        return self.now


class TestMemoryStoreExpiry:
    """Entries written with a ttl are reclaimed once it elapses."""

    def test_entry_readable_until_ttl(self):
        clock = FakeClock()
        store = MemoryStore(clock=clock)
        store.set("k", "v", ttl_seconds=60)

        clock.now += 59
        assert store.get("k") == "v"

        clock.now += 1
        assert store.get("k") is None

    def test_entry_without_ttl_never_expires(self):
        clock = FakeClock()
        store = MemoryStore(clock=clock)
        store.set("k", "v")

        clock.now += 10 * 365 * 24 * 3600
        assert store.get("k") == "v"

    def test_rewrite_extends_ttl(self):
        clock = FakeClock()
        store = MemoryStore(clock=clock)
        store.set("k", "1", ttl_seconds=60)
        clock.now += 50
        store.set("k", "2", ttl_seconds=60)
        clock.now += 50

        assert store.get("k") == "2"

    def test_prune_removes_expired_entries(self):
        clock = FakeClock()
        store = MemoryStore(clock=clock)
        for i in range(10):
            store.set(f"gone-{i}", "x", ttl_seconds=30)
        store.set("kept", "x")

        clock.now += 31

        assert store.prune() == 10
        assert len(store) == 1
        assert store.get("kept") == "x"

    def test_writes_sweep_abandoned_entries(self):
        clock = FakeClock()
        store = MemoryStore(clock=clock, prune_interval=5)
        for i in range(4):
            store.set(f"client:{i}:pin_attempts", "{}", ttl_seconds=10)

        clock.now += 11
        # Fifth write triggers the sweep; nobody reads the stale keys
        store.set("client:new:pin_attempts", "{}", ttl_seconds=10)

        assert list(store._data) == ["client:new:pin_attempts"]

    def test_namespaced_store_passes_ttl(self):
        clock = FakeClock()
        backing = MemoryStore(clock=clock)
        NamespacedStore(backing, "client:abc").set("pin_authenticated", "1", ttl_seconds=5)

        clock.now += 5
        assert backing.get("client:abc:pin_authenticated") is None
