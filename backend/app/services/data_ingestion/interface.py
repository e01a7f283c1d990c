"""
Data Ingestion Service Interface

Defines the contract for the data ingestion layer.
"""

from abc import abstractmethod
from dataclasses import dataclass, field
from typing import Optional

from app.services.base import BaseService
from app.schemas.market import (
    CompanyOverview,
    DataRequest,
    NewsItem,
    PriceSeries,
    SecCompanyData,
)


@dataclass
class DataIngestionResult:
    """Result from data ingestion including any warnings/errors."""

    symbol: str
    series: Optional[PriceSeries] = None
    overview: Optional[CompanyOverview] = None
    from_cache: bool = False
    errors: list[str] = field(default_factory=list)
    warnings: list[str] = field(default_factory=list)


class DataIngestionServiceInterface(BaseService[DataRequest, DataIngestionResult]):
    """
    Data Ingestion Service Contract.

    INPUT: DataRequest
        - symbol: Ticker to look up
        - output_size: compact (100 bars) or full history
        - include_overview: Also fetch company fundamentals

    OUTPUT: DataIngestionResult
        - series: Daily bars, oldest first
        - overview: Company fundamentals
        - errors: Parts that failed
        - warnings: Non-fatal warnings
    """

    @property
    def name(self) -> str:
        return "DataIngestionService"

    @abstractmethod
    async def execute(self, input_data: DataRequest) -> DataIngestionResult:
        """Fetch and normalize everything for one ticker lookup."""
        pass

    @abstractmethod
    async def get_price_series(self, symbol: str, use_cache: bool = True) -> PriceSeries:
        """Daily bars for a symbol, oldest first."""
        pass

    @abstractmethod
    async def get_overview(self, symbol: str) -> CompanyOverview:
        """Company fundamentals for a symbol."""
        pass

    @abstractmethod
    async def get_news(self, symbol: str, limit: int = 10) -> list[NewsItem]:
        """Recent news with sentiment for a symbol."""
        pass

    @abstractmethod
    async def get_sec_data(self, symbol: str) -> SecCompanyData:
        """Recent SEC filings and annual financial facts for a symbol."""
        pass
