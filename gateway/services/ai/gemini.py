import json
from typing import Any, Dict, Optional

import requests

from gateway.config import _must_env


class GeminiError(RuntimeError):
    pass


class GeminiClient:
    """
    Minimal Gemini client (v1beta generateContent).
    One HTTP call per generate(); retries are the caller's decision.
    """

    def __init__(
        self,
        api_key: str,
        model: str = "gemini-2.0-flash",
        base_url: str = "https://generativelanguage.googleapis.com/v1beta/models",
        timeout: float = 30.0,
    ):
        self.api_key = (api_key or "").strip()
        self.model = model
        self.base = base_url.rstrip("/")
        self.timeout = timeout

    def generate(self, text: str, temperature: float = 0.7, max_output_tokens: Optional[int] = None) -> str:
        _must_env("GEMINI_API_KEY", self.api_key)

        url = f"{self.base}/{self.model}:generateContent"
        headers = {"Content-Type": "application/json", "x-goog-api-key": self.api_key}

        data: Dict[str, Any] = {
            "contents": [{"parts": [{"text": text}]}],
            "generationConfig": {"temperature": temperature},
        }
        if max_output_tokens is not None:
            data["generationConfig"]["maxOutputTokens"] = max_output_tokens

        try:
            resp = requests.post(url, headers=headers, data=json.dumps(data), timeout=self.timeout)
        except requests.RequestException as e:
            raise GeminiError(f"Gemini request failed: {type(e).__name__}: {e}") from e

        if resp.status_code != 200:
            raise GeminiError(f"Gemini error: {resp.status_code}, {(resp.text or '')[:800]}")

        try:
            j = resp.json()
            return j["candidates"][0]["content"]["parts"][0]["text"]
        except (ValueError, KeyError, IndexError, TypeError) as e:
            raise GeminiError(f"Gemini parse error: {e}") from e
