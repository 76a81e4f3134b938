import copy
import threading
from typing import Any, Callable, TypeVar

from gateway.infra.store.base import DocumentStore, StoreUnavailable, Transaction

T = TypeVar("T")

_Key = tuple[str, str]


class _Conflict(Exception):
    pass


class _MemoryTransaction(Transaction):
    def __init__(self, store: "InMemoryDocumentStore"):
        self._store = store
        # key -> version observed at read time (0 = absent)
        self.read_versions: dict[_Key, int] = {}
        # key -> (data, merge), in write order
        self.writes: list[tuple[_Key, dict[str, Any], bool]] = []

    def get(self, collection: str, doc_id: str) -> dict[str, Any] | None:
        if self.writes:
            raise RuntimeError("transaction reads must happen before writes")
        key = (collection, doc_id)
        version, data = self._store._snapshot(key)
        self.read_versions.setdefault(key, version)
        return data

    def set(self, collection: str, doc_id: str, data: dict[str, Any], merge: bool = False) -> None:
        self.writes.append(((collection, doc_id), copy.deepcopy(data), merge))


class InMemoryDocumentStore(DocumentStore):
    """
    Process-local store with optimistic concurrency (thread-safe).
    - each document carries a version; a transaction records the versions it read
    - commit re-checks those versions under the lock and retries fn on conflict
    - max_attempts mirrors Firestore's default of 5
    Used by tests and by STORE_BACKEND=memory for local development.
    """

    def __init__(self, max_attempts: int = 5):
        self.max_attempts = max(1, int(max_attempts))
        self._lock = threading.Lock()
        # key -> (version, data)
        self._docs: dict[_Key, tuple[int, dict[str, Any]]] = {}
        self.commit_count = 0
        self.write_count = 0

    def _snapshot(self, key: _Key) -> tuple[int, dict[str, Any] | None]:
        with self._lock:
            item = self._docs.get(key)
            if not item:
                return 0, None
            version, data = item
            return version, copy.deepcopy(data)

    def _commit(self, tx: _MemoryTransaction) -> None:
        with self._lock:
            for key, seen in tx.read_versions.items():
                current = self._docs.get(key, (0, None))[0]
                if current != seen:
                    raise _Conflict(key)

            for key, data, merge in tx.writes:
                version, existing = self._docs.get(key, (0, {}))
                doc = {**existing, **data} if merge else data
                self._docs[key] = (version + 1, doc)
                self.write_count += 1

            if tx.writes:
                self.commit_count += 1

    def run_transaction(self, fn: Callable[[Transaction], T]) -> T:
        for _ in range(self.max_attempts):
            tx = _MemoryTransaction(self)
            result = fn(tx)
            try:
                self._commit(tx)
            except _Conflict:
                continue
            return result
        raise StoreUnavailable(f"transaction aborted after {self.max_attempts} attempts")

    # ---------- direct access (seeding / assertions) ----------
    def get_document(self, collection: str, doc_id: str) -> dict[str, Any] | None:
        return self._snapshot((collection, doc_id))[1]

    def put_document(self, collection: str, doc_id: str, data: dict[str, Any]) -> None:
        key = (collection, doc_id)
        with self._lock:
            version = self._docs.get(key, (0, None))[0]
            self._docs[key] = (version + 1, copy.deepcopy(data))

    def list_documents(self, collection: str) -> dict[str, dict[str, Any]]:
        with self._lock:
            return {
                doc_id: copy.deepcopy(data)
                for (coll, doc_id), (_, data) in self._docs.items()
                if coll == collection
            }
