from typing import Any, Optional

from pydantic import BaseModel, Field


class GeminiProxyIn(BaseModel):
    # Typed loosely on purpose: a non-string prompt is a 400 from the handler, not a 422.
    prompt: Any = Field(None, description="Verse reference/text the insight or prayer is about")
    type: Optional[Any] = Field(None, description="prayer | insight (default)")


class GeminiProxyOut(BaseModel):
    content: str
