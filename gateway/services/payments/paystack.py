import logging
from typing import Any

import requests

from gateway.config import _must_env

logger = logging.getLogger("uvicorn.error")


class PaystackError(RuntimeError):
    """Transport / parse failure talking to Paystack (treated as transient)."""


class PaystackRejected(Exception):
    """Paystack answered with status=false; message is safe to show to the payer."""

    def __init__(self, message: str):
        self.message = message or "Payment initialization failed"
        super().__init__(self.message)


class PaystackClient:
    def __init__(self, secret_key: str, base_url: str = "https://api.paystack.co", timeout: float = 15.0):
        self.secret_key = (secret_key or "").strip()
        self.base_url = (base_url or "https://api.paystack.co").rstrip("/")
        self.timeout = timeout

    def _headers(self) -> dict:
        _must_env("PAYSTACK_SECRET_KEY", self.secret_key)
        return {
            "Authorization": f"Bearer {self.secret_key}",
            "Content-Type": "application/json",
        }

    def initialize_transaction(
        self,
        *,
        email: str,
        amount_kobo: int,
        callback_url: str | None = None,
        metadata: dict[str, Any] | None = None,
    ) -> dict:
        """
        POST /transaction/initialize
        Returns data{authorization_url, access_code, reference}.
        """
        url = f"{self.base_url}/transaction/initialize"
        payload: dict[str, Any] = {
            "email": email,
            "amount": int(amount_kobo),
            "metadata": metadata or {},
        }
        if callback_url:
            payload["callback_url"] = callback_url

        try:
            r = requests.post(url, headers=self._headers(), json=payload, timeout=self.timeout)
        except requests.RequestException as e:
            raise PaystackError(f"Paystack request failed: {type(e).__name__}: {e}") from e

        try:
            body = r.json() or {}
        except ValueError as e:
            text = (r.text or "")
            if len(text) > 800:
                text = text[:800] + "...(truncated)"
            raise PaystackError(f"Invalid Paystack response: status={r.status_code} body={text}") from e

        if not body.get("status"):
            # 4xx from Paystack carries a human readable message (invalid email, amount...)
            if 400 <= r.status_code < 500 or r.status_code < 300:
                raise PaystackRejected(str(body.get("message") or ""))
            raise PaystackError(f"Paystack error: {r.status_code} {body.get('message')}")

        data = body.get("data") or {}
        return {
            "authorization_url": data.get("authorization_url"),
            "access_code": data.get("access_code"),
            "reference": data.get("reference"),
        }
