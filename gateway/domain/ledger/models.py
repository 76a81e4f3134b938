from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Optional


class LedgerOutcome(str, Enum):
    IGNORED = "ignored"
    DUPLICATE = "duplicate"
    APPLIED = "applied"
    # store failed and the ledger is configured to acknowledge anyway
    UNPROCESSED = "unprocessed"


PURPOSE_DONATION = "supporter_donation"
PURPOSE_SUBSCRIPTION = "premium_subscription"
HANDLED_PURPOSES = (PURPOSE_DONATION, PURPOSE_SUBSCRIPTION)

EVENT_CHARGE_SUCCESS = "charge.success"


@dataclass
class PaymentEvent:
    """charge.* event fields the ledger needs, pulled from the Paystack envelope."""

    event: str
    reference: str
    user_id: str
    purpose: str
    amount_kobo: Any
    plan: Optional[str] = None
    email: Optional[str] = None
    status: Optional[str] = None
    channel: Optional[str] = None
    paid_at: Optional[str] = None
    raw: dict[str, Any] = field(default_factory=dict)

    @property
    def amount_naira(self) -> float:
        return self.amount_kobo / 100
