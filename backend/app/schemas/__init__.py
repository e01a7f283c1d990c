"""
StockSight Schema Contracts

This module defines all JSON contracts between system components.
These are the authoritative interfaces - all modules must conform to these schemas.
"""

from app.schemas.market import (
    DataRequest,
    OutputSize,
    PriceBar,
    PriceSeries,
    CompanyOverview,
    NewsItem,
    NewsSentiment,
    NewsSentimentSummary,
    NewsFeed,
    SecFiling,
    FinancialFact,
    SecCompanyData,
)
from app.schemas.indicators import (
    IndicatorSnapshot,
    IndicatorSeries,
    IndicatorOutput,
    IndicatorSignal,
    SignalType,
)
from app.schemas.chat import (
    ChatRequest,
    ChatResponse,
)

__all__ = [
    # Market
    "DataRequest",
    "OutputSize",
    "PriceBar",
    "PriceSeries",
    "CompanyOverview",
    "NewsItem",
    "NewsSentiment",
    "NewsSentimentSummary",
    "NewsFeed",
    "SecFiling",
    "FinancialFact",
    "SecCompanyData",
    # Indicators
    "IndicatorSnapshot",
    "IndicatorSeries",
    "IndicatorOutput",
    "IndicatorSignal",
    "SignalType",
    # Chat
    "ChatRequest",
    "ChatResponse",
]
