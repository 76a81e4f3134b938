import json
import logging

from fastapi import APIRouter, Depends, Request
from starlette.concurrency import run_in_threadpool

from gateway.api.deps import get_ledger, get_settings
from gateway.api.schemas.payments import WebhookOut
from gateway.config import Settings
from gateway.domain.errors import InvalidSignature, LedgerUnavailable, MalformedEvent
from gateway.domain.ledger.service import DonationLedger
from gateway.services.payments.signature import verify_signature

logger = logging.getLogger("uvicorn.error")

router = APIRouter()


@router.post("/paystackWebhook", response_model=WebhookOut)
async def paystack_webhook(
    request: Request,
    ledger: DonationLedger = Depends(get_ledger),
    settings: Settings = Depends(get_settings),
):
    """
    Paystack webhook (no user auth; X-Paystack-Signature over the raw body).
    Status codes drive Paystack's redelivery:
    - 200: ignored / duplicate / applied (never retried)
    - 400 / 401: permanent failure
    - 500: transient, Paystack retries and the ledger makes that safe
    """
    if not settings.paystack_secret_key:
        logger.error("[webhook] PAYSTACK_SECRET_KEY not configured")
        raise LedgerUnavailable()

    raw = await request.body()
    signature = request.headers.get("x-paystack-signature")

    if not verify_signature(raw, signature, settings.paystack_secret_key):
        logger.warning("[webhook] invalid Paystack signature")
        raise InvalidSignature()

    try:
        payload = json.loads(raw.decode("utf-8"))
    except (UnicodeDecodeError, ValueError):
        raise MalformedEvent("Invalid JSON payload")

    # store transaction is blocking I/O
    outcome = await run_in_threadpool(ledger.process, payload)
    return WebhookOut(ok=True, status=outcome.value)
