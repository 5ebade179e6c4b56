from __future__ import annotations

import threading
from concurrent.futures import ThreadPoolExecutor
from types import SimpleNamespace

import pytest

from idr_finance import data_store
from idr_finance.data_store import InMemoryDataStore, get_data_store, reset_data_store_for_tests
from idr_finance.errors import InvalidArgumentError


def test_write_then_read_round_trip(store):
    dataset = SimpleNamespace(base="IDR")
    store.write("latest_idr_rates", dataset)
    assert store.read("latest_idr_rates") is dataset


def test_read_unknown_resource_returns_none(store):
    assert store.read("non_existent") is None


def test_write_none_is_rejected_while_loading(store):
    with pytest.raises(InvalidArgumentError):
        store.write("latest_idr_rates", None)
    assert "latest_idr_rates" not in store


def test_not_ready_until_sealed(store):
    store.write("a", 1)
    assert store.is_ready() is False
    store.seal()
    assert store.is_ready() is True


def test_seal_is_idempotent(store):
    store.write("a", 1)
    assert store.seal() is True
    before = dict(store.snapshot())

    assert store.seal() is False

    assert store.is_ready() is True
    assert dict(store.snapshot()) == before


def test_write_after_seal_is_silent_noop(store, caplog):
    store.write("a", "original")
    store.seal()

    with caplog.at_level("WARNING"):
        store.write("a", "overwritten")
        store.write("b", "late")
        store.write("c", None)

    assert store.read("a") == "original"
    assert store.read("b") is None
    assert len(store) == 1
    assert any("sealed" in msg for msg in caplog.messages)


def test_snapshot_is_read_only(store):
    store.write("resource1", "data1")
    store.write("resource2", "data2")

    view = store.snapshot()

    assert set(view) == {"resource1", "resource2"}
    with pytest.raises(TypeError):
        view["resource3"] = "data3"  # type: ignore[index]
    assert "resource3" not in store


def test_snapshot_is_point_in_time(store):
    store.write("a", 1)
    view = store.snapshot()
    store.write("b", 2)
    assert "b" not in view
    assert "b" in store


def test_concurrent_writers_and_readers_see_whole_entries():
    store = InMemoryDataStore()
    keys = [f"resource_{i}" for i in range(16)]
    payloads = {k: SimpleNamespace(key=k, values=list(range(100))) for k in keys}
    start = threading.Event()
    torn = []

    def writer(key: str) -> None:
        start.wait()
        store.write(key, payloads[key])

    def reader() -> int:
        start.wait()
        seen = 0
        for _ in range(500):
            for key in keys:
                value = store.read(key)
                if value is None:
                    continue
                if value is not payloads[key] or len(value.values) != 100:
                    torn.append(key)
                seen += 1
        return seen

    with ThreadPoolExecutor(max_workers=32) as pool:
        reads = [pool.submit(reader) for _ in range(16)]
        writes = [pool.submit(writer, k) for k in keys]
        start.set()
        for fut in writes:
            fut.result()
        store.seal()
        for fut in reads:
            fut.result()

    assert torn == []
    assert store.is_ready()
    assert len(store) == len(keys)


def test_concurrent_readers_after_seal():
    store = InMemoryDataStore()
    store.write("latest_idr_rates", "x")
    store.seal()

    with ThreadPoolExecutor(max_workers=16) as pool:
        results = list(pool.map(lambda _: store.read("latest_idr_rates"), range(1000)))

    assert set(results) == {"x"}


def test_get_data_store_is_singleton():
    reset_data_store_for_tests()
    first = get_data_store()
    assert get_data_store() is first

    reset_data_store_for_tests()
    assert get_data_store() is not first
    assert data_store._store_singleton is not None
