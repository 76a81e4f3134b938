import logging
from functools import lru_cache

from fastapi import Depends, Request

from gateway.config import Settings, load_settings
from gateway.domain.auth import service as auth_service
from gateway.domain.auth.models import Principal
from gateway.domain.ledger.service import DonationLedger
from gateway.domain.ratelimit.service import RateLimiter
from gateway.infra.store.base import DocumentStore
from gateway.infra.store.memory import InMemoryDocumentStore
from gateway.services.ai.gemini import GeminiClient
from gateway.services.payments.paystack import PaystackClient

logger = logging.getLogger("uvicorn.error")


# =========================
# Clients (built once per process, swapped via app.dependency_overrides in tests)
# =========================

@lru_cache
def get_settings() -> Settings:
    return load_settings()


@lru_cache
def get_store() -> DocumentStore:
    settings = get_settings()
    if settings.store_backend == "memory":
        logger.warning("[store] STORE_BACKEND=memory: state is process-local and lost on restart")
        return InMemoryDocumentStore()

    from firebase_admin import firestore

    from gateway.infra.firebase.client import get_firebase_app
    from gateway.infra.firebase.store import FirestoreDocumentStore

    app = get_firebase_app(settings)
    return FirestoreDocumentStore(firestore.client(app), timeout=settings.store_timeout_sec)


@lru_cache
def get_token_verifier() -> auth_service.TokenVerifier:
    from gateway.infra.firebase.auth_repo import FirebaseTokenVerifier
    from gateway.infra.firebase.client import get_firebase_app

    return FirebaseTokenVerifier(get_firebase_app(get_settings()))


@lru_cache
def get_gemini_client() -> GeminiClient:
    s = get_settings()
    return GeminiClient(
        api_key=s.gemini_api_key,
        model=s.gemini_model,
        base_url=s.gemini_base_url,
        timeout=s.gemini_timeout_sec,
    )


@lru_cache
def get_paystack_client() -> PaystackClient:
    s = get_settings()
    return PaystackClient(
        secret_key=s.paystack_secret_key,
        base_url=s.paystack_base_url,
        timeout=s.paystack_timeout_sec,
    )


# =========================
# Per-request components
# =========================

def get_rate_limiter(
    store: DocumentStore = Depends(get_store),
    settings: Settings = Depends(get_settings),
) -> RateLimiter:
    return RateLimiter(
        store,
        limit=settings.rate_limit_requests,
        window_sec=settings.rate_limit_window_sec,
        fail_open=settings.rate_limit_fail_open,
        collection=settings.users_collection,
    )


def get_ledger(
    store: DocumentStore = Depends(get_store),
    settings: Settings = Depends(get_settings),
) -> DonationLedger:
    return DonationLedger(
        store,
        fail_open=settings.ledger_fail_open,
        users_collection=settings.users_collection,
        payments_collection=settings.payments_collection,
    )


def require_principal(
    request: Request,
    verifier: auth_service.TokenVerifier = Depends(get_token_verifier),
) -> Principal:
    return auth_service.authenticate(request, verifier)
