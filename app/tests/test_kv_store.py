"""
Tests for the synchronous key-value stores
"""
import pytest

from app.core.errors import StoreUnavailable
from app.stores.kv_store import InMemoryKeyValueStore, SqlKeyValueStore


def test_missing_key_reads_none(kv_store):
    assert kv_store.get("nothing-here") is None


def test_set_overwrites_whole_value(kv_store):
    kv_store.set("slot", "[1]")
    kv_store.set("slot", "[1, 2]")

    assert kv_store.get("slot") == "[1, 2]"


def test_values_persist_across_store_instances(tmp_path):
    url = f"sqlite:///{tmp_path / 'kv.db'}"
    first = SqlKeyValueStore(url)
    first.set("slot", "[]")
    first.close()

    second = SqlKeyValueStore(url)
    assert second.get("slot") == "[]"
    second.close()


def test_in_memory_sqlite_keeps_data_between_calls():
    store = SqlKeyValueStore("sqlite:///:memory:")
    store.set("slot", "value")

    assert store.get("slot") == "value"


def test_unopenable_database_raises_store_unavailable(tmp_path):
    with pytest.raises(StoreUnavailable):
        SqlKeyValueStore(f"sqlite:///{tmp_path / 'missing-dir' / 'kv.db'}")


def test_in_memory_store_round_trip():
    store = InMemoryKeyValueStore({"slot": "a"})
    store.set("other", "b")

    assert store.get("slot") == "a"
    assert store.get("other") == "b"
