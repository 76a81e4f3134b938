import logging
from datetime import datetime, timedelta
from typing import Callable

from gateway.domain.clock import as_utc, utc_now
from gateway.domain.errors import RateLimiterUnavailable
from gateway.infra.store.base import DocumentStore, StoreUnavailable, Transaction

logger = logging.getLogger("uvicorn.error")

FIELD_COUNT = "aiRequestCount"
FIELD_WINDOW_START = "lastAiRequestTime"


class RateLimiter:
    """
    Fixed-window limiter for the AI proxy, one counter per user record.

    users/{uid}.aiRequestCount + users/{uid}.lastAiRequestTime (window start)
    - now - window_start > window  -> reset to (1, now), allow
    - count >= limit               -> deny, no write
    - otherwise                    -> (count + 1, window_start), allow

    The read-modify-write runs inside store.run_transaction so concurrent
    requests from one user cannot both observe the same count.
    """

    def __init__(
        self,
        store: DocumentStore,
        *,
        limit: int = 10,
        window_sec: int = 60,
        fail_open: bool = True,
        collection: str = "users",
        clock: Callable[[], datetime] = utc_now,
    ):
        self.store = store
        self.limit = int(limit)
        self.window = timedelta(seconds=int(window_sec))
        self.fail_open = bool(fail_open)
        self.collection = collection
        self.clock = clock

    def _read(self, tx: Transaction, principal_id: str) -> tuple[int, datetime]:
        data = tx.get(self.collection, principal_id) or {}
        count = int(data.get(FIELD_COUNT) or 0)
        window_start = as_utc(data.get(FIELD_WINDOW_START))
        return count, window_start

    def allow(self, principal_id: str) -> bool:
        now = self.clock()

        def _decide(tx: Transaction) -> bool:
            count, window_start = self._read(tx, principal_id)

            if now - window_start > self.window:
                tx.set(self.collection, principal_id, {FIELD_COUNT: 1, FIELD_WINDOW_START: now}, merge=True)
                return True

            if count >= self.limit:
                return False

            tx.set(self.collection, principal_id, {FIELD_COUNT: count + 1, FIELD_WINDOW_START: window_start}, merge=True)
            return True

        try:
            return self.store.run_transaction(_decide)
        except StoreUnavailable as e:
            if self.fail_open:
                logger.error("[ratelimit] store failure, failing open for %s: %s", principal_id, e)
                return True
            logger.error("[ratelimit] store failure, failing closed for %s: %s", principal_id, e)
            raise RateLimiterUnavailable()

    def status(self, principal_id: str) -> dict:
        """Read-only view of the current window (no counter mutation)."""
        now = self.clock()
        count, window_start = self.store.run_transaction(lambda tx: self._read(tx, principal_id))

        if now - window_start > self.window:
            return {"limit": self.limit, "used": 0, "remaining": self.limit, "window_resets_at": None}

        used = min(count, self.limit)
        return {
            "limit": self.limit,
            "used": used,
            "remaining": max(0, self.limit - used),
            "window_resets_at": (window_start + self.window).isoformat(),
        }
