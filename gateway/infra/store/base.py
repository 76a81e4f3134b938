from abc import ABC, abstractmethod
from typing import Any, Callable, TypeVar

T = TypeVar("T")


class StoreUnavailable(RuntimeError):
    """Transaction could not be completed (backend down, timeout, contention)."""


class Transaction(ABC):
    """
    Read/write handle passed to a transaction callback.
    Reads must happen before writes; writes are buffered until commit.
    """

    @abstractmethod
    def get(self, collection: str, doc_id: str) -> dict[str, Any] | None:
        raise NotImplementedError

    @abstractmethod
    def set(self, collection: str, doc_id: str, data: dict[str, Any], merge: bool = False) -> None:
        raise NotImplementedError


class DocumentStore(ABC):
    """Keyed document store with an atomic multi-document transaction primitive."""

    @abstractmethod
    def run_transaction(self, fn: Callable[[Transaction], T]) -> T:
        """
        Run fn(tx) atomically and return its result.
        fn may be invoked more than once on conflict, so it must not have
        side effects outside tx. Raises StoreUnavailable when the
        transaction cannot be committed.
        """
        raise NotImplementedError
