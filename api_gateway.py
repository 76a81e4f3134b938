# api_gateway.py
import logging
import os

import uvicorn
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from gateway.api.errors import install_error_handlers
from gateway.api.routers import account, ai, payments, webhooks

logger = logging.getLogger("uvicorn.error")

SERVICE_NAME = "discipleme-gateway"
SERVICE_VERSION = "0.1.0"


# =========================
# FastAPI 基础配置
# =========================

app = FastAPI(
    title="DiscipleMe Gateway API",
    description="Gemini proxy (rate limited) + Paystack payment init & idempotent webhook",
    version=SERVICE_VERSION,
)

# Browser clients call /geminiProxy and /initializePayment cross-origin
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=False,
    allow_methods=["POST", "GET", "OPTIONS"],
    allow_headers=["Authorization", "Content-Type"],
)

install_error_handlers(app)

app.include_router(ai.router)
app.include_router(payments.router)
app.include_router(webhooks.router)
app.include_router(account.router)


@app.get("/health")
def health():
    return {"ok": True, "service": SERVICE_NAME, "version": SERVICE_VERSION}


if __name__ == "__main__":
    uvicorn.run(
        "api_gateway:app",
        host=os.getenv("HOST", "0.0.0.0"),
        port=int(os.getenv("PORT", "8080")),
    )
