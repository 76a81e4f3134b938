import json
import logging
import math
from datetime import datetime, timedelta
from typing import Any, Callable

from gateway.domain.clock import as_utc, utc_now
from gateway.domain.errors import LedgerUnavailable, MalformedEvent
from gateway.domain.ledger.models import (
    EVENT_CHARGE_SUCCESS,
    HANDLED_PURPOSES,
    PURPOSE_DONATION,
    PURPOSE_SUBSCRIPTION,
    LedgerOutcome,
    PaymentEvent,
)
from gateway.infra.store.base import DocumentStore, StoreUnavailable, Transaction
from gateway.services.payments.plans import get_plan

logger = logging.getLogger("uvicorn.error")


def _str_or_none(v: Any) -> str | None:
    if isinstance(v, str):
        return v.strip() or None
    if isinstance(v, (int, float)) and not isinstance(v, bool):
        return str(v)
    return None


def _metadata(data: dict) -> dict:
    """Paystack sometimes delivers metadata as a JSON string."""
    meta = data.get("metadata")
    if isinstance(meta, str):
        try:
            meta = json.loads(meta)
        except ValueError:
            return {}
    return meta if isinstance(meta, dict) else {}


def parse_event(payload: Any) -> PaymentEvent:
    """
    Pull the fields the ledger needs out of a Paystack envelope
    {event, data:{reference, amount, metadata:{userId, purpose}, customer, ...}}.
    A missing reference or userId is malformed whatever the event kind.
    """
    if not isinstance(payload, dict):
        raise MalformedEvent("Invalid payload")

    data = payload.get("data")
    if not isinstance(data, dict):
        raise MalformedEvent()

    meta = _metadata(data)
    reference = _str_or_none(data.get("reference"))
    user_id = _str_or_none(meta.get("userId"))
    if not reference or not user_id:
        raise MalformedEvent()

    customer = data.get("customer") if isinstance(data.get("customer"), dict) else {}

    return PaymentEvent(
        event=_str_or_none(payload.get("event")) or "",
        reference=reference,
        user_id=user_id,
        purpose=_str_or_none(meta.get("purpose")) or "",
        amount_kobo=data.get("amount"),
        plan=_str_or_none(meta.get("plan")),
        email=_str_or_none(customer.get("email")),
        status=_str_or_none(data.get("status")),
        channel=_str_or_none(data.get("channel")),
        paid_at=_str_or_none(data.get("paid_at")),
        raw=payload,
    )


class DonationLedger:
    """
    Idempotent processing of Paystack charge.success events.

    payments/{reference}.processed is the idempotency marker: the payment
    record and the user mutation are written in the same transaction, so a
    reference credits the user at most once regardless of redelivery.
    """

    def __init__(
        self,
        store: DocumentStore,
        *,
        fail_open: bool = False,
        users_collection: str = "users",
        payments_collection: str = "payments",
        clock: Callable[[], datetime] = utc_now,
    ):
        self.store = store
        self.fail_open = bool(fail_open)
        self.users_collection = users_collection
        self.payments_collection = payments_collection
        self.clock = clock

    def process(self, payload: Any) -> LedgerOutcome:
        event = parse_event(payload)

        if event.event != EVENT_CHARGE_SUCCESS:
            logger.info("[ledger] ignoring event=%s reference=%s", event.event, event.reference)
            return LedgerOutcome.IGNORED

        if event.purpose not in HANDLED_PURPOSES:
            logger.info("[ledger] ignoring purpose=%s reference=%s", event.purpose, event.reference)
            return LedgerOutcome.IGNORED

        amount = event.amount_kobo
        if isinstance(amount, bool) or not isinstance(amount, (int, float)) or not math.isfinite(amount) or amount < 0:
            raise MalformedEvent("Invalid amount")

        plan = None
        purpose = event.purpose
        if purpose == PURPOSE_SUBSCRIPTION:
            plan = get_plan(event.plan)
            if plan is None:
                raise MalformedEvent("Unknown subscription plan")
            # payer controls amount and metadata on inline checkout
            if amount < plan.price_kobo:
                logger.warning(
                    "[ledger] underpaid plan=%s amount=%s price=%s reference=%s, crediting as donation",
                    plan.id, amount, plan.price_kobo, event.reference,
                )
                plan = None
                purpose = PURPOSE_DONATION

        now = self.clock()
        payments, users = self.payments_collection, self.users_collection

        def _apply(tx: Transaction) -> LedgerOutcome:
            payment = tx.get(payments, event.reference)
            if payment and payment.get("processed"):
                return LedgerOutcome.DUPLICATE
            user = tx.get(users, event.user_id) or {}

            record: dict[str, Any] = {
                "reference": event.reference,
                "userId": event.user_id,
                "amount": event.amount_naira,
                "email": event.email,
                "purpose": purpose,
                "processed": True,
                "processedAt": now,
                "paystackData": {
                    "status": event.status,
                    "channel": event.channel,
                    "paidAt": event.paid_at,
                },
            }
            if plan:
                record["plan"] = plan.id
            elif event.purpose == PURPOSE_SUBSCRIPTION:
                record["requestedPlan"] = event.plan
            tx.set(payments, event.reference, record)

            update: dict[str, Any] = {
                "supporterStatus": True,
                "totalDonated": (user.get("totalDonated") or 0) + event.amount_naira,
            }
            if not user.get("supporterSince"):
                update["supporterSince"] = now
            if plan:
                current = as_utc(user.get("subscriptionExpiry"))
                start = current if current > now else now
                update.update({
                    "subscriptionTier": plan.id,
                    "subscriptionExpiry": start + timedelta(days=plan.duration_days),
                    "lastPaymentRef": event.reference,
                    "lastPaymentDate": now,
                    "lastPaymentAmount": amount,
                })
            tx.set(users, event.user_id, update, merge=True)
            return LedgerOutcome.APPLIED

        try:
            outcome = self.store.run_transaction(_apply)
        except StoreUnavailable as e:
            if self.fail_open:
                logger.error("[ledger] store failure, acknowledging reference=%s unprocessed: %s", event.reference, e)
                return LedgerOutcome.UNPROCESSED
            logger.error("[ledger] store failure for reference=%s, provider will retry: %s", event.reference, e)
            raise LedgerUnavailable()

        if outcome == LedgerOutcome.DUPLICATE:
            logger.info("[ledger] payment %s already processed, skipping", event.reference)
        else:
            logger.info("[ledger] processed payment %s for user %s", event.reference, event.user_id)
        return outcome
