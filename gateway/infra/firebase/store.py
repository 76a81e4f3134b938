from __future__ import annotations

from typing import Any, Callable, TypeVar

from google.api_core import exceptions as gexc
from google.cloud import firestore

from gateway.infra.store.base import DocumentStore, StoreUnavailable, Transaction

T = TypeVar("T")


class _CallbackError(Exception):
    """Carries an exception raised by the transaction callback past the store error mapping."""

    def __init__(self, error: Exception):
        self.error = error
        super().__init__(error)


class _FirestoreTransaction(Transaction):
    def __init__(self, client: firestore.Client, tx: firestore.Transaction, timeout: float):
        self._client = client
        self._tx = tx
        self._timeout = timeout

    def get(self, collection: str, doc_id: str) -> dict[str, Any] | None:
        ref = self._client.collection(collection).document(doc_id)
        snap = ref.get(transaction=self._tx, timeout=self._timeout)
        if not snap.exists:
            return None
        return snap.to_dict() or {}

    def set(self, collection: str, doc_id: str, data: dict[str, Any], merge: bool = False) -> None:
        ref = self._client.collection(collection).document(doc_id)
        self._tx.set(ref, data, merge=merge)


class FirestoreDocumentStore(DocumentStore):
    """
    DocumentStore over Cloud Firestore.
    Firestore transactions are optimistic: the callback is re-run on
    contention up to max_attempts times before commit fails.
    Only backend failures become StoreUnavailable; errors raised by the
    callback itself propagate unchanged.
    """

    def __init__(self, client: firestore.Client, timeout: float = 10.0, max_attempts: int = 5):
        self._client = client
        self._timeout = timeout
        self._max_attempts = max_attempts

    def run_transaction(self, fn: Callable[[Transaction], T]) -> T:
        @firestore.transactional
        def _run(tx: firestore.Transaction) -> T:
            handle = _FirestoreTransaction(self._client, tx, self._timeout)
            try:
                return fn(handle)
            except gexc.GoogleAPIError:
                # reads inside the callback failing against the backend
                raise
            except Exception as e:
                raise _CallbackError(e) from e

        try:
            return _run(self._client.transaction(max_attempts=self._max_attempts))
        except _CallbackError as e:
            raise e.error from None
        except gexc.GoogleAPIError as e:
            raise StoreUnavailable(f"Firestore transaction failed: {type(e).__name__}: {e}") from e
        except ValueError as e:
            # raised by google-cloud-firestore once max_attempts commits have failed
            raise StoreUnavailable(f"Firestore transaction aborted: {e}") from e
