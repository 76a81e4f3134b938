import logging
import math
from typing import Any

from fastapi import APIRouter, Body, Depends, Response

from gateway.api.deps import get_paystack_client, get_settings, require_principal
from gateway.api.routers.cors import preflight_response
from gateway.api.schemas.payments import InitializePaymentIn, InitializePaymentOut
from gateway.config import Settings
from gateway.domain.auth.models import Principal
from gateway.domain.errors import InvalidInput, PaymentRejected, UpstreamUnavailable
from gateway.domain.ledger.models import PURPOSE_DONATION, PURPOSE_SUBSCRIPTION
from gateway.services.payments.paystack import PaystackClient, PaystackRejected
from gateway.services.payments.plans import get_plan

logger = logging.getLogger("uvicorn.error")

router = APIRouter()

MIN_AMOUNT_NGN = 100


def _is_number(v) -> bool:
    return isinstance(v, (int, float)) and not isinstance(v, bool) and math.isfinite(v)


@router.options("/initializePayment")
def initialize_payment_preflight() -> Response:
    return preflight_response()


@router.post("/initializePayment", response_model=InitializePaymentOut)
def initialize_payment(
    body: Any = Body(None),
    principal: Principal = Depends(require_principal),
    paystack: PaystackClient = Depends(get_paystack_client),
    settings: Settings = Depends(get_settings),
):
    """
    Create a Paystack transaction for a donation (amount in NGN) or a premium
    plan (price fixed by the plan). The metadata block is echoed back on the
    charge.success webhook and is what the ledger keys on.
    """
    if not isinstance(body, dict):
        raise InvalidInput("Invalid request body")
    payload = InitializePaymentIn.model_validate(body)

    metadata = {"userId": principal.user_id, "purpose": PURPOSE_DONATION}

    if payload.plan is not None:
        plan = get_plan(payload.plan if isinstance(payload.plan, str) else None)
        if plan is None:
            raise InvalidInput("Invalid subscription plan.")
        amount_kobo = plan.price_kobo
        metadata.update({"purpose": PURPOSE_SUBSCRIPTION, "plan": plan.id})
    else:
        amount = payload.amount
        if not _is_number(amount) or amount < MIN_AMOUNT_NGN:
            raise InvalidInput(f"Invalid amount. Minimum is {MIN_AMOUNT_NGN} NGN.")
        amount_kobo = int(round(amount * 100))

    email = payload.email if isinstance(payload.email, str) and payload.email.strip() else principal.email
    if not email:
        raise InvalidInput("Email required for payment.")

    callback_url = payload.callbackUrl if isinstance(payload.callbackUrl, str) and payload.callbackUrl.strip() else None

    try:
        data = paystack.initialize_transaction(
            email=email.strip(),
            amount_kobo=amount_kobo,
            callback_url=callback_url or settings.paystack_callback_url,
            metadata=metadata,
        )
    except PaystackRejected as e:
        logger.warning("[payments] Paystack rejected initialize for user=%s: %s", principal.user_id, e.message)
        raise PaymentRejected(e.message)
    except RuntimeError:
        logger.exception("[payments] Paystack initialize failed for user=%s", principal.user_id)
        raise UpstreamUnavailable("Payment service temporarily unavailable")

    return InitializePaymentOut(success=True, **data)
