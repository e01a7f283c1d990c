"""
CONTRACT 3: AI Assistant

Input: ChatRequest
Output: ChatResponse
"""

from typing import Optional
from pydantic import BaseModel, Field, field_validator


class ChatRequest(BaseModel):
    """
    A question for the AI assistant.
    Sent by: Frontend
    Received by: Chat Service
    """

    prompt: str = Field(..., min_length=1, max_length=4000)
    symbol: Optional[str] = Field(
        default=None,
        max_length=10,
        description="Ticker to load context for; detected from the prompt when omitted",
    )

    @field_validator("prompt")
    @classmethod
    def prompt_not_blank(cls, v: str) -> str:
        if not v.strip():
            raise ValueError("prompt must not be blank")
        return v.strip()

    @field_validator("symbol")
    @classmethod
    def normalize_symbol(cls, v: Optional[str]) -> Optional[str]:
        if v is None or not v.strip():
            return None
        return v.strip().upper()


class ChatResponse(BaseModel):
    """AI assistant answer."""

    response: str
    symbol: Optional[str] = None
    context_used: bool = False
    model: str
    provider: str
