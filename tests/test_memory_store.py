import threading
from concurrent.futures import ThreadPoolExecutor

import pytest

from gateway.infra.store.base import StoreUnavailable
from gateway.infra.store.memory import InMemoryDocumentStore


def test_transaction_commits_writes_and_returns_result():
    store = InMemoryDocumentStore()

    def fn(tx):
        assert tx.get("users", "u1") is None
        tx.set("users", "u1", {"a": 1})
        return "done"

    assert store.run_transaction(fn) == "done"
    assert store.get_document("users", "u1") == {"a": 1}
    assert store.commit_count == 1


def test_merge_keeps_existing_fields():
    store = InMemoryDocumentStore()
    store.put_document("users", "u1", {"a": 1, "b": 2})

    store.run_transaction(lambda tx: tx.set("users", "u1", {"b": 3}, merge=True))
    assert store.get_document("users", "u1") == {"a": 1, "b": 3}

    store.run_transaction(lambda tx: tx.set("users", "u1", {"c": 4}))
    assert store.get_document("users", "u1") == {"c": 4}


def test_read_only_transaction_writes_nothing():
    store = InMemoryDocumentStore()
    store.run_transaction(lambda tx: tx.get("users", "u1"))
    assert store.write_count == 0
    assert store.commit_count == 0


def test_reads_after_writes_are_rejected():
    store = InMemoryDocumentStore()

    def fn(tx):
        tx.set("users", "u1", {"a": 1})
        tx.get("users", "u2")

    with pytest.raises(RuntimeError):
        store.run_transaction(fn)
    assert store.get_document("users", "u1") is None


def test_conflicting_write_triggers_retry():
    store = InMemoryDocumentStore()
    store.put_document("counters", "c", {"n": 0})
    calls = {"n": 0}

    def fn(tx):
        calls["n"] += 1
        n = tx.get("counters", "c")["n"]
        if calls["n"] == 1:
            # another writer commits between our read and our commit
            store.put_document("counters", "c", {"n": 10})
        tx.set("counters", "c", {"n": n + 1})

    store.run_transaction(fn)
    assert calls["n"] == 2
    assert store.get_document("counters", "c") == {"n": 11}


def test_gives_up_after_max_attempts():
    store = InMemoryDocumentStore(max_attempts=3)
    store.put_document("counters", "c", {"n": 0})

    def fn(tx):
        tx.get("counters", "c")
        store.put_document("counters", "c", {"n": 99})
        tx.set("counters", "c", {"n": 1})

    with pytest.raises(StoreUnavailable):
        store.run_transaction(fn)


def test_concurrent_increments_are_not_lost():
    store = InMemoryDocumentStore(max_attempts=1000)
    start = threading.Barrier(8)

    def increment(_):
        start.wait()
        for _ in range(25):
            store.run_transaction(
                lambda tx: tx.set("counters", "c", {"n": (tx.get("counters", "c") or {}).get("n", 0) + 1})
            )

    with ThreadPoolExecutor(max_workers=8) as pool:
        list(pool.map(increment, range(8)))

    assert store.get_document("counters", "c") == {"n": 200}
