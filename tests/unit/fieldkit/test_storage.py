"""Tests for the in-memory persistence backends."""

from fieldkit.core.protocols import KeyValueStore
from fieldkit.storage import InMemoryScopedStore, InMemorySettingsStore


class TestScopedStore:
    def test_satisfies_protocol(self) -> None:
        assert isinstance(InMemoryScopedStore(), KeyValueStore)

    def test_scopes_are_isolated(self) -> None:
        store = InMemoryScopedStore("post")
        store.set(1, "title", "One")
        store.set(2, "title", "Two")
        assert store.get(1, "title") == "One"
        assert store.get(2, "title") == "Two"
        assert store.get(3, "title", "missing") == "missing"

    def test_values_are_copied(self) -> None:
        store = InMemoryScopedStore()
        rows = [{"a": 1}]
        store.set(1, "rows", rows)
        rows[0]["a"] = 2
        assert store.get(1, "rows") == [{"a": 1}]
        store.get(1, "rows")[0]["a"] = 3
        assert store.get(1, "rows") == [{"a": 1}]

    def test_delete_and_exists(self) -> None:
        store = InMemoryScopedStore()
        store.set(1, "a", "x")
        assert store.exists(1, "a")
        store.delete(1, "a")
        assert not store.exists(1, "a")
        store.delete(1, "a")
        assert len(store) == 0

    def test_stored_none_is_distinct_from_missing(self) -> None:
        store = InMemoryScopedStore()
        store.set(1, "a", None)
        assert store.exists(1, "a")
        assert store.get(1, "a", "default") is None

    def test_items_and_clear(self) -> None:
        store = InMemoryScopedStore()
        store.set(1, "a", 1)
        store.set(1, "b", 2)
        assert dict(store.items(1)) == {"a": 1, "b": 2}
        store.clear()
        assert len(store) == 0


class TestSettingsStore:
    def test_satisfies_protocol(self) -> None:
        assert isinstance(InMemorySettingsStore(), KeyValueStore)

    def test_scope_is_ignored(self) -> None:
        store = InMemorySettingsStore()
        store.set("page-a", "site_title", "Shop")
        assert store.get(None, "site_title") == "Shop"
        assert store.get("page-b", "site_title") == "Shop"

    def test_initial_values(self) -> None:
        store = InMemorySettingsStore({"page_currency": "EUR"})
        assert store.get(None, "page_currency") == "EUR"
        assert store.as_dict() == {"page_currency": "EUR"}

    def test_delete(self) -> None:
        store = InMemorySettingsStore({"a": 1})
        store.delete(None, "a")
        assert not store.exists(None, "a")
        assert len(store) == 0
