from pydantic import BaseModel, ConfigDict, Field
from typing import Any, Dict, Optional


class GenerationConfig(BaseModel):
    """Sampling parameters sent with every generateContent call."""

    model_config = ConfigDict(populate_by_name=True, frozen=True)

    temperature: float = 0.75
    max_output_tokens: int = Field(350, alias="maxOutputTokens")
    top_p: float = Field(0.95, alias="topP")


class ReplyResponse(BaseModel):
    reply: str


class ErrorResponse(BaseModel):
    error: str


class HandlerResponse(BaseModel):
    status_code: int
    headers: Dict[str, str]
    body: Optional[Dict[str, Any]] = None # None = empty body (preflight)


class HealthResponse(BaseModel):
    status: str
    configured: bool
