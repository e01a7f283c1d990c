"""
CONTRACT 1: Market Data

Input: DataRequest
Output: PriceSeries, CompanyOverview, NewsItem, SecCompanyData

Normalized shapes produced by the data ingestion layer from the provider's
raw payloads. Price series are always oldest-first.
"""

from datetime import date, datetime
from enum import Enum
from typing import Any, Optional
from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator


# =============================================================================
# ENUMS
# =============================================================================


class OutputSize(str, Enum):
    COMPACT = "compact"  # latest 100 bars
    FULL = "full"


class NewsSentiment(str, Enum):
    VERY_BULLISH = "very_bullish"
    BULLISH = "bullish"
    NEUTRAL = "neutral"
    BEARISH = "bearish"
    VERY_BEARISH = "very_bearish"


# =============================================================================
# INPUT: DataRequest
# =============================================================================


class DataRequest(BaseModel):
    """
    Request for the data behind one ticker lookup.
    Sent by: API
    Received by: Data Ingestion Service
    """

    symbol: str = Field(..., min_length=1, max_length=10)
    output_size: OutputSize = OutputSize.COMPACT
    include_overview: bool = True
    use_cache: bool = True

    @field_validator("symbol")
    @classmethod
    def normalize_symbol(cls, v: str) -> str:
        return v.strip().upper()


# =============================================================================
# OUTPUT: Prices
# =============================================================================


class PriceBar(BaseModel):
    """One trading day."""

    model_config = ConfigDict(frozen=True)

    date: date
    open: float = Field(..., gt=0)
    high: float = Field(..., gt=0)
    low: float = Field(..., gt=0)
    close: float = Field(..., gt=0)
    volume: int = Field(..., ge=0)
    adjusted_close: Optional[float] = Field(default=None, gt=0)


class PriceSeries(BaseModel):
    """
    Daily bars for one symbol, oldest first.

    Dates must be strictly ascending (which also makes them unique). The
    provider emits newest-first; the adapter sorts before building this.
    """

    model_config = ConfigDict(frozen=True)

    symbol: Optional[str] = None
    bars: list[PriceBar] = Field(default_factory=list)

    @model_validator(mode="after")
    def check_ascending(self) -> "PriceSeries":
        for prev, bar in zip(self.bars, self.bars[1:]):
            if bar.date <= prev.date:
                raise ValueError(
                    f"bars must be strictly ascending by date: {prev.date} then {bar.date}"
                )
        return self

    def __len__(self) -> int:
        return len(self.bars)

    @property
    def closes(self) -> list[float]:
        return [bar.close for bar in self.bars]

    @property
    def volumes(self) -> list[int]:
        return [bar.volume for bar in self.bars]

    @property
    def dates(self) -> list[date]:
        return [bar.date for bar in self.bars]

    def tail(self, count: int) -> "PriceSeries":
        """Most recent `count` bars."""
        if count >= len(self.bars):
            return self
        return PriceSeries(symbol=self.symbol, bars=self.bars[len(self.bars) - count:])


# =============================================================================
# OUTPUT: Fundamentals
# =============================================================================


_MISSING = {"", "none", "-", "n/a", "null"}


class CompanyOverview(BaseModel):
    """
    Company fundamentals.

    Aliases are the provider's field labels, so a raw OVERVIEW payload
    validates directly.
    """

    model_config = ConfigDict(populate_by_name=True)

    symbol: str = Field(..., validation_alias="Symbol")
    name: Optional[str] = Field(default=None, validation_alias="Name")
    description: Optional[str] = Field(default=None, validation_alias="Description")
    exchange: Optional[str] = Field(default=None, validation_alias="Exchange")
    currency: Optional[str] = Field(default=None, validation_alias="Currency")
    sector: Optional[str] = Field(default=None, validation_alias="Sector")
    industry: Optional[str] = Field(default=None, validation_alias="Industry")

    market_capitalization: Optional[float] = Field(default=None, validation_alias="MarketCapitalization")
    pe_ratio: Optional[float] = Field(default=None, validation_alias="PERatio")
    dividend_yield: Optional[float] = Field(default=None, validation_alias="DividendYield")
    eps: Optional[float] = Field(default=None, validation_alias="EPS")
    beta: Optional[float] = Field(default=None, validation_alias="Beta")
    shares_outstanding: Optional[float] = Field(default=None, validation_alias="SharesOutstanding")
    shares_float: Optional[float] = Field(default=None, validation_alias="SharesFloat")
    quarterly_revenue_growth_yoy: Optional[float] = Field(
        default=None, validation_alias="QuarterlyRevenueGrowthYOY"
    )
    quarterly_earnings_growth_yoy: Optional[float] = Field(
        default=None, validation_alias="QuarterlyEarningsGrowthYOY"
    )
    profit_margin: Optional[float] = Field(default=None, validation_alias="ProfitMargin")
    price_to_sales_ratio: Optional[float] = Field(default=None, validation_alias="PriceToSalesRatioTTM")
    price_to_book_ratio: Optional[float] = Field(default=None, validation_alias="PriceToBookRatio")
    ev_to_ebitda: Optional[float] = Field(default=None, validation_alias="EVToEBITDA")
    week_52_high: Optional[float] = Field(default=None, validation_alias="52WeekHigh")
    week_52_low: Optional[float] = Field(default=None, validation_alias="52WeekLow")

    @field_validator(
        "market_capitalization",
        "pe_ratio",
        "dividend_yield",
        "eps",
        "beta",
        "shares_outstanding",
        "shares_float",
        "quarterly_revenue_growth_yoy",
        "quarterly_earnings_growth_yoy",
        "profit_margin",
        "price_to_sales_ratio",
        "price_to_book_ratio",
        "ev_to_ebitda",
        "week_52_high",
        "week_52_low",
        mode="before",
    )
    @classmethod
    def parse_number(cls, v: Any) -> Any:
        # Provider sends every number as a string, "None" when unknown
        if isinstance(v, str) and v.strip().lower() in _MISSING:
            return None
        return v

    @field_validator("name", "description", "exchange", "currency", "sector", "industry", mode="before")
    @classmethod
    def parse_text(cls, v: Any) -> Any:
        if isinstance(v, str) and v.strip().lower() in _MISSING:
            return None
        return v


# =============================================================================
# OUTPUT: News
# =============================================================================


class NewsItem(BaseModel):
    """Single news item with sentiment."""

    title: str
    url: str
    published_at: datetime
    authors: list[str] = Field(default_factory=list)
    summary: Optional[str] = None
    source: str
    sentiment_score: float = Field(..., ge=-1, le=1)
    sentiment: NewsSentiment
    relevance_score: Optional[float] = Field(default=None, ge=0, le=1)


class NewsSentimentSummary(BaseModel):
    """Aggregate sentiment over a set of articles."""

    bullish_count: int = Field(..., ge=0)
    bearish_count: int = Field(..., ge=0)
    neutral_count: int = Field(..., ge=0)
    avg_score: float = Field(..., ge=-1, le=1)
    overall: NewsSentiment = NewsSentiment.NEUTRAL


class NewsFeed(BaseModel):
    """News for one symbol."""

    symbol: str
    count: int = Field(..., ge=0)
    sentiment_summary: NewsSentimentSummary
    articles: list[NewsItem]


# =============================================================================
# OUTPUT: SEC filings
# =============================================================================


class SecFiling(BaseModel):
    """One entry of a company's recent EDGAR submissions."""

    form: str
    filing_date: date
    report_date: Optional[date] = None
    accession_number: str
    primary_document: Optional[str] = None


class FinancialFact(BaseModel):
    """An annual value of a us-gaap concept as reported in a 10-K."""

    metric: str
    concept: str
    period_end: date
    value: float
    unit: str = "USD"
    fiscal_year: Optional[int] = None
    filed: Optional[date] = None


class SecCompanyData(BaseModel):
    """
    EDGAR context for a ticker.

    `facts` holds the most recent fiscal years first for each metric.
    """

    symbol: str
    cik: str = Field(..., pattern=r"^\d{10}$")
    name: Optional[str] = None
    filings: list[SecFiling] = Field(default_factory=list)
    facts: list[FinancialFact] = Field(default_factory=list)

    def facts_for(self, metric: str) -> list[FinancialFact]:
        return [f for f in self.facts if f.metric == metric]
