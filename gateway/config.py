import os
from dataclasses import dataclass

from dotenv import load_dotenv

load_dotenv()


def _env(name: str, default: str = "") -> str:
    return (os.getenv(name) or default).strip()


def _env_int(name: str, default: int) -> int:
    raw = _env(name)
    return int(raw) if raw else default


def _env_float(name: str, default: float) -> float:
    raw = _env(name)
    return float(raw) if raw else default


def _env_bool(name: str, default: bool) -> bool:
    raw = _env(name).lower()
    if not raw:
        return default
    return raw in ("1", "true", "yes", "on")


def _must_env(name: str, value: str):
    if not value:
        raise RuntimeError(f"Missing required env: {name}")


@dataclass
class Settings:
    # Firebase (identity + Firestore)
    firebase_project_id: str = ""
    firebase_credentials_file: str = ""
    firebase_http_timeout_sec: float = 10.0
    store_backend: str = "firestore"
    store_timeout_sec: float = 10.0
    users_collection: str = "users"
    payments_collection: str = "payments"

    # Gemini
    gemini_api_key: str = ""
    gemini_model: str = "gemini-2.0-flash"
    gemini_base_url: str = "https://generativelanguage.googleapis.com/v1beta/models"
    gemini_timeout_sec: float = 30.0

    # Paystack
    paystack_secret_key: str = ""
    paystack_base_url: str = "https://api.paystack.co"
    paystack_timeout_sec: float = 15.0
    paystack_callback_url: str = "https://discipleme-app.web.app"

    # Rate limiting (AI proxy)
    rate_limit_requests: int = 10
    rate_limit_window_sec: int = 60
    rate_limit_fail_open: bool = True

    # Webhook ledger
    ledger_fail_open: bool = False


def load_settings() -> Settings:
    return Settings(
        firebase_project_id=_env("FIREBASE_PROJECT_ID"),
        firebase_credentials_file=_env("FIREBASE_CREDENTIALS_FILE"),
        firebase_http_timeout_sec=_env_float("FIREBASE_HTTP_TIMEOUT_SEC", 10.0),
        store_backend=_env("STORE_BACKEND", "firestore").lower(),
        store_timeout_sec=_env_float("STORE_TIMEOUT_SEC", 10.0),
        users_collection=_env("USERS_COLLECTION", "users"),
        payments_collection=_env("PAYMENTS_COLLECTION", "payments"),
        gemini_api_key=_env("GEMINI_API_KEY"),
        gemini_model=_env("GEMINI_MODEL", "gemini-2.0-flash"),
        gemini_base_url=_env("GEMINI_BASE_URL", "https://generativelanguage.googleapis.com/v1beta/models"),
        gemini_timeout_sec=_env_float("GEMINI_TIMEOUT_SEC", 30.0),
        paystack_secret_key=_env("PAYSTACK_SECRET_KEY"),
        paystack_base_url=_env("PAYSTACK_BASE_URL", "https://api.paystack.co"),
        paystack_timeout_sec=_env_float("PAYSTACK_TIMEOUT_SEC", 15.0),
        paystack_callback_url=_env("PAYSTACK_CALLBACK_URL", "https://discipleme-app.web.app"),
        rate_limit_requests=_env_int("RATE_LIMIT_REQUESTS", 10),
        rate_limit_window_sec=_env_int("RATE_LIMIT_WINDOW_SEC", 60),
        rate_limit_fail_open=_env_bool("RATE_LIMIT_FAIL_OPEN", True),
        ledger_fail_open=_env_bool("LEDGER_FAIL_OPEN", False),
    )
