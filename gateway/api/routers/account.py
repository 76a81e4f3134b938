from fastapi import APIRouter, Depends

from gateway.api.deps import get_rate_limiter, get_settings, get_store, require_principal
from gateway.api.schemas.payments import SubscriptionStatusOut
from gateway.config import Settings
from gateway.domain.auth.models import Principal
from gateway.domain.clock import as_utc, utc_now
from gateway.domain.errors import UpstreamUnavailable
from gateway.domain.ratelimit.service import RateLimiter
from gateway.infra.store.base import DocumentStore, StoreUnavailable

router = APIRouter()


@router.get("/subscriptionStatus", response_model=SubscriptionStatusOut)
def subscription_status(
    principal: Principal = Depends(require_principal),
    store: DocumentStore = Depends(get_store),
    limiter: RateLimiter = Depends(get_rate_limiter),
    settings: Settings = Depends(get_settings),
):
    """Premium / supporter state and remaining AI requests in the current window (read-only)."""
    try:
        user = store.run_transaction(lambda tx: tx.get(settings.users_collection, principal.user_id)) or {}
        ai_requests = limiter.status(principal.user_id)
    except StoreUnavailable:
        raise UpstreamUnavailable()

    expiry = as_utc(user.get("subscriptionExpiry"), default=None) if user.get("subscriptionExpiry") else None
    is_active = bool(expiry and expiry > utc_now())

    return SubscriptionStatusOut(
        tier=(user.get("subscriptionTier") or "premium") if is_active else "free",
        is_active=is_active,
        expires_at=expiry.isoformat() if expiry else None,
        supporter_status=bool(user.get("supporterStatus")),
        total_donated=float(user.get("totalDonated") or 0),
        ai_requests=ai_requests,
    )
