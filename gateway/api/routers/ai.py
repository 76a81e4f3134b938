import logging
from typing import Any

from fastapi import APIRouter, Body, Depends, Response

from gateway.api.deps import get_gemini_client, get_rate_limiter, require_principal
from gateway.api.routers.cors import preflight_response
from gateway.api.schemas.ai import GeminiProxyIn, GeminiProxyOut
from gateway.domain.auth.models import Principal
from gateway.domain.errors import InvalidInput, RateLimited, UpstreamUnavailable
from gateway.domain.ratelimit.service import RateLimiter
from gateway.services.ai.gemini import GeminiClient
from gateway.services.ai.prompts import build_prompt

logger = logging.getLogger("uvicorn.error")

router = APIRouter()


@router.options("/geminiProxy")
def gemini_proxy_preflight() -> Response:
    return preflight_response()


@router.post("/geminiProxy", response_model=GeminiProxyOut)
def gemini_proxy(
    body: Any = Body(None),
    principal: Principal = Depends(require_principal),
    limiter: RateLimiter = Depends(get_rate_limiter),
    gemini: GeminiClient = Depends(get_gemini_client),
):
    """
    Verse insight / prayer generation.
    Order: auth -> rate limit -> prompt validation -> one Gemini call.
    The body is taken untyped so a non-object body is rejected after auth.
    """
    if not limiter.allow(principal.user_id):
        logger.info("[ai] rate limited user=%s", principal.user_id)
        raise RateLimited()

    payload = GeminiProxyIn.model_validate(body if isinstance(body, dict) else {})
    if not isinstance(payload.prompt, str) or not payload.prompt.strip():
        raise InvalidInput("Invalid prompt")

    kind = payload.type if isinstance(payload.type, str) else None
    full_prompt = build_prompt(payload.prompt, kind)

    try:
        text = gemini.generate(full_prompt)
    except RuntimeError:
        logger.exception("[ai] Gemini call failed for user=%s", principal.user_id)
        raise UpstreamUnavailable("AI service temporarily unavailable. Please try again later.")

    return GeminiProxyOut(content=text)
