from typing import Any, Optional

from pydantic import BaseModel, Field


class InitializePaymentIn(BaseModel):
    amount: Any = Field(None, description="Amount in NGN (minimum 100)")
    email: Optional[Any] = Field(None, description="Payer email; defaults to the signed-in user's email")
    callbackUrl: Optional[Any] = Field(None, description="Where Paystack redirects after payment")
    plan: Optional[Any] = Field(None, description="monthly | quarterly | yearly (premium subscription)")


class InitializePaymentOut(BaseModel):
    success: bool = True
    authorization_url: Optional[str] = None
    access_code: Optional[str] = None
    reference: Optional[str] = None


class WebhookOut(BaseModel):
    ok: bool = True
    status: str


class AIRequestsStatus(BaseModel):
    limit: int
    used: int
    remaining: int
    window_resets_at: Optional[str] = None


class SubscriptionStatusOut(BaseModel):
    ok: bool = True
    tier: str = "free"
    is_active: bool = False
    expires_at: Optional[str] = None
    supporter_status: bool = False
    total_donated: float = 0
    ai_requests: Optional[AIRequestsStatus] = None
