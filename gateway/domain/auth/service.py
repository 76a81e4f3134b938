import logging
from typing import Protocol

from fastapi import Request

from gateway.domain.auth.models import Principal
from gateway.domain.errors import Unauthenticated

logger = logging.getLogger("uvicorn.error")


class TokenVerifier(Protocol):
    def verify(self, token: str) -> dict:
        """Return the decoded claims (must contain uid) or raise on any failure."""
        ...


def get_bearer_token(request: Request) -> str | None:
    auth = request.headers.get("authorization") or request.headers.get("Authorization")
    if not auth:
        return None
    parts = auth.split()
    if len(parts) == 2 and parts[0].lower() == "bearer":
        return parts[1].strip() or None
    return None


def authenticate(request: Request, verifier: TokenVerifier) -> Principal:
    """
    Resolve the caller from Authorization: Bearer <Firebase ID token>.
    Missing header, malformed header and failed verification all surface as
    the same Unauthenticated error; the cause only goes to the log.
    """
    token = get_bearer_token(request)
    if not token:
        logger.warning("[auth] missing or malformed Authorization header")
        raise Unauthenticated()

    try:
        claims = verifier.verify(token)
    except Exception as e:
        logger.warning("[auth] token verification failed: %s", type(e).__name__)
        raise Unauthenticated()

    user_id = ((claims or {}).get("uid") or (claims or {}).get("user_id") or "").strip()
    if not user_id:
        logger.warning("[auth] verified token has no uid")
        raise Unauthenticated()

    return Principal(user_id=user_id, email=(claims.get("email") or None))
