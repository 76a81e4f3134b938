import json
import pathlib
import sys
from datetime import datetime, timedelta, timezone

import pytest
from fastapi.testclient import TestClient

# Ensure repository root is importable when pytest is invoked from other directories
ROOT = pathlib.Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

import api_gateway
from gateway.api import deps
from gateway.config import Settings
from gateway.infra.store.base import DocumentStore, StoreUnavailable
from gateway.infra.store.memory import InMemoryDocumentStore
from gateway.services.payments.signature import compute_signature

WEBHOOK_SECRET = "sk_test_webhook_secret"

TOKENS = {
    "token-u1": {"uid": "u1", "email": "u1@example.com"},
    "token-u2": {"uid": "u2", "email": "u2@example.com"},
    "token-noemail": {"uid": "u3"},
}


class FakeTokenVerifier:
    def __init__(self):
        self.calls: list[str] = []

    def verify(self, token: str) -> dict:
        self.calls.append(token)
        if token not in TOKENS:
            raise ValueError("invalid id token")
        return dict(TOKENS[token])


class FakeGemini:
    def __init__(self, reply: str = "Lord, guide my steps.", error: Exception | None = None):
        self.reply = reply
        self.error = error
        self.prompts: list[str] = []

    def generate(self, text: str, **kwargs) -> str:
        self.prompts.append(text)
        if self.error:
            raise self.error
        return self.reply


class FakePaystack:
    def __init__(self, error: Exception | None = None):
        self.error = error
        self.calls: list[dict] = []

    def initialize_transaction(self, **kwargs) -> dict:
        self.calls.append(kwargs)
        if self.error:
            raise self.error
        return {
            "authorization_url": "https://checkout.paystack.com/abc123",
            "access_code": "abc123",
            "reference": "ref_abc123",
        }


class FailingStore(DocumentStore):
    """Every transaction fails before touching any document."""

    def __init__(self):
        self.attempts = 0

    def run_transaction(self, fn):
        self.attempts += 1
        raise StoreUnavailable("store offline")


class FakeClock:
    def __init__(self, start: datetime | None = None):
        self.now = start or datetime(2026, 1, 1, 12, 0, 0, tzinfo=timezone.utc)

    def __call__(self) -> datetime:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now = self.now + timedelta(seconds=seconds)


@pytest.fixture
def settings():
    return Settings(
        store_backend="memory",
        gemini_api_key="test-gemini-key",
        paystack_secret_key=WEBHOOK_SECRET,
    )


@pytest.fixture
def store():
    return InMemoryDocumentStore(max_attempts=100)


@pytest.fixture
def verifier():
    return FakeTokenVerifier()


@pytest.fixture
def gemini():
    return FakeGemini()


@pytest.fixture
def paystack():
    return FakePaystack()


@pytest.fixture
def app_instance(settings, store, verifier, gemini, paystack):
    app = api_gateway.app
    # Clear dependency overrides to ensure isolation between tests
    app.dependency_overrides = {
        deps.get_settings: lambda: settings,
        deps.get_store: lambda: store,
        deps.get_token_verifier: lambda: verifier,
        deps.get_gemini_client: lambda: gemini,
        deps.get_paystack_client: lambda: paystack,
    }
    yield app
    app.dependency_overrides = {}


@pytest.fixture
def client(app_instance):
    with TestClient(app_instance) as c:
        yield c


def auth_headers(token: str = "token-u1") -> dict:
    return {"Authorization": f"Bearer {token}"}


def signed_webhook(payload: dict, secret: str = WEBHOOK_SECRET) -> tuple[bytes, dict]:
    raw = json.dumps(payload, separators=(",", ":")).encode("utf-8")
    headers = {"x-paystack-signature": compute_signature(raw, secret), "Content-Type": "application/json"}
    return raw, headers


def charge_event(
    reference: str = "ref_123",
    user_id: str | None = "u1",
    amount: int = 500000,
    event: str = "charge.success",
    purpose: str = "supporter_donation",
    plan: str | None = None,
) -> dict:
    metadata: dict = {"purpose": purpose}
    if user_id is not None:
        metadata["userId"] = user_id
    if plan is not None:
        metadata["plan"] = plan
    return {
        "event": event,
        "data": {
            "reference": reference,
            "amount": amount,
            "status": "success",
            "channel": "card",
            "paid_at": "2026-01-01T12:00:00.000Z",
            "customer": {"email": "u1@example.com"},
            "metadata": metadata,
        },
    }
