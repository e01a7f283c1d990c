"""
AI Assistant Chat Service

Answers free-form questions about a company. Before calling the LLM it
loads the company's fundamentals, indicator snapshot and SEC filings so
the model interprets real numbers instead of inventing them.
"""

import asyncio
import logging
import re
from typing import Optional

from app.schemas.chat import ChatRequest, ChatResponse
from app.schemas.indicators import IndicatorOutput
from app.schemas.market import CompanyOverview, SecCompanyData
from app.services.base import BaseService, ServiceError
from app.services.data_ingestion import DataIngestionService, get_data_ingestion_service
from app.services.indicators import IndicatorService, get_indicator_service
from app.services.llm.client import LLMClient, get_llm_client
from app.services.llm.prompts import CHAT_SYSTEM_PROMPT, build_context, build_user_prompt

logger = logging.getLogger(__name__)

TICKER_PATTERN = re.compile(r"\$?\b([A-Z]{1,5})\b")

# Upper-case tokens that show up in questions but are not tickers
NON_TICKERS = {
    "A", "I", "AI", "AM", "AN", "AND", "ARE", "AS", "AT", "BE", "BUT", "BY",
    "CEO", "CFO", "CAGR", "DCF", "DO", "EBIT", "EPS", "ESG", "ETF", "EU",
    "EV", "FCF", "FOR", "GAAP", "GDP", "HOW", "IF", "IN", "IPO", "IS", "IT",
    "MA", "MACD", "ME", "MY", "NOT", "OF", "OK", "ON", "OR", "PE", "Q", "RSI",
    "ROE", "ROI", "SEC", "SMA", "SO", "THE", "TO", "TTM", "UK", "US", "USA",
    "USD", "VS", "WE", "WHAT", "WHY", "YOY",
}


def extract_symbol(prompt: str) -> Optional[str]:
    """
    First ticker-looking token in the prompt.

    "$xyz"-style cashtags win over bare upper-case words.
    """
    cashtag = re.search(r"\$([A-Za-z]{1,5})\b", prompt)
    if cashtag:
        return cashtag.group(1).upper()

    for match in TICKER_PATTERN.finditer(prompt):
        token = match.group(1)
        if token not in NON_TICKERS:
            return token
    return None


class ChatService(BaseService[ChatRequest, ChatResponse]):
    """AI assistant with company context."""

    def __init__(
        self,
        llm_client: Optional[LLMClient] = None,
        data_service: Optional[DataIngestionService] = None,
        indicator_service: Optional[IndicatorService] = None,
    ):
        self._llm_client = llm_client
        self._data_service = data_service
        self._indicator_service = indicator_service

    @property
    def name(self) -> str:
        return "ChatService"

    @property
    def llm(self) -> LLMClient:
        return self._llm_client or get_llm_client()

    @property
    def data_service(self) -> DataIngestionService:
        return self._data_service or get_data_ingestion_service()

    @property
    def indicator_service(self) -> IndicatorService:
        return self._indicator_service or get_indicator_service()

    async def execute(self, input_data: ChatRequest) -> ChatResponse:
        return await self.answer(input_data)

    async def answer(self, request: ChatRequest) -> ChatResponse:
        """Answer a question, with company data when a symbol is known."""
        if not self.llm.is_configured:
            raise ServiceError(self.name, "No LLM providers configured")

        symbol = request.symbol or extract_symbol(request.prompt)
        context = await self._load_context(symbol) if symbol else None

        try:
            result = await self.llm.generate(
                system_prompt=CHAT_SYSTEM_PROMPT,
                user_prompt=build_user_prompt(request.prompt, context),
            )
        except Exception as e:
            logger.error(f"AI assistant failed: {e}")
            raise ServiceError(self.name, "Failed to generate AI response") from e

        return ChatResponse(
            response=result.content,
            symbol=symbol,
            context_used=context is not None,
            model=result.model,
            provider=result.provider.value,
        )

    async def _load_context(self, symbol: str) -> Optional[str]:
        """Best effort: a failed lookup drops that part of the context."""
        overview, analysis, sec_data = await asyncio.gather(
            self._load_overview(symbol),
            self._load_analysis(symbol),
            self._load_sec_data(symbol),
        )
        return build_context(symbol, overview, analysis, sec_data)

    async def _load_overview(self, symbol: str) -> Optional[CompanyOverview]:
        try:
            return await self.data_service.get_overview(symbol)
        except ServiceError as e:
            logger.warning(f"No overview for chat context ({symbol}): {e}")
            return None

    async def _load_analysis(self, symbol: str) -> Optional[IndicatorOutput]:
        try:
            series = await self.data_service.get_price_series(symbol)
        except ServiceError as e:
            logger.warning(f"No price series for chat context ({symbol}): {e}")
            return None
        return self.indicator_service.analyze(symbol, series)

    async def _load_sec_data(self, symbol: str) -> Optional[SecCompanyData]:
        try:
            return await self.data_service.get_sec_data(symbol)
        except ServiceError as e:
            logger.warning(f"No SEC data for chat context ({symbol}): {e}")
            return None

    async def health_check(self) -> bool:
        return self.llm.is_configured


# Singleton instance
_chat_service: Optional[ChatService] = None


def get_chat_service() -> ChatService:
    """Get or create chat service instance."""
    global _chat_service
    if _chat_service is None:
        _chat_service = ChatService()
    return _chat_service
