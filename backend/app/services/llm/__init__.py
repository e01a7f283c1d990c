"""
AI Assistant Service

CONTRACT:
    Input:  ChatRequest (prompt + optional symbol)
    Output: ChatResponse

RESPONSIBILITIES:
    - Detect which company a question is about
    - Load fundamentals and indicator snapshot as context
    - Forward the question to the configured LLM provider

CRITICAL RULES:
    - LLM does NO math - all numbers come from the provider or the Indicator Engine
    - Missing data is reported as N/A, never estimated

FALLBACK BEHAVIOR:
    - Primary provider failure falls back to the next configured provider
    - Without any API key the assistant reports itself unavailable
"""

from app.services.llm.client import (
    LLMClient,
    LLMConfig,
    LLMProvider,
    LLMResponse,
    get_llm_client,
)
from app.services.llm.chat import ChatService, extract_symbol, get_chat_service

__all__ = [
    # Client
    "LLMClient",
    "LLMConfig",
    "LLMProvider",
    "LLMResponse",
    "get_llm_client",
    # Services
    "ChatService",
    "extract_symbol",
    "get_chat_service",
]
