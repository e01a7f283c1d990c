"""
Data Ingestion Service Implementation

Fetches market data from Alpha Vantage, with price series cached per ticker,
and SEC filings and annual facts from EDGAR.
"""

import asyncio
import logging
from typing import Callable, Optional

from app.core.config import settings
from app.schemas.market import (
    CompanyOverview,
    DataRequest,
    NewsItem,
    OutputSize,
    PriceSeries,
    SecCompanyData,
)
from app.services.base import ServiceError
from app.services.cache import SeriesCache, get_series_cache
from app.services.data_ingestion.alpha_vantage import (
    AlphaVantageClient,
    get_alpha_vantage_client,
)
from app.services.data_ingestion.sec_edgar import SecEdgarClient, get_sec_edgar_client
from app.services.data_ingestion.interface import (
    DataIngestionResult,
    DataIngestionServiceInterface,
)

logger = logging.getLogger(__name__)


class DataIngestionService(DataIngestionServiceInterface):
    """
    Data Ingestion Service.

    Series lookups are cache-aside: a fresh cache entry is returned as is,
    otherwise the provider is called and the result stored.
    """

    def __init__(
        self,
        client: Optional[AlphaVantageClient] = None,
        cache: Optional[SeriesCache] = None,
        sec_client: Optional[SecEdgarClient] = None,
        output_size: Optional[OutputSize] = None,
    ):
        self.client = client or get_alpha_vantage_client()
        self.cache = cache or get_series_cache()
        self.sec_client = sec_client or get_sec_edgar_client()
        # History length for cached lookups; sma200 needs the full series
        self.output_size = OutputSize(output_size or settings.alpha_vantage_output_size)

    async def execute(self, input_data: DataRequest) -> DataIngestionResult:
        """Fetch series and overview concurrently; failures are reported per part."""
        symbol = input_data.symbol
        result = DataIngestionResult(symbol=symbol)

        cached = await self.cache.get(symbol) if input_data.use_cache else None
        if cached is not None:
            result.series = cached.series
            result.from_cache = True
            series_task = None
        else:
            series_task = self._fetch_series(symbol, input_data.output_size)

        tasks = [t for t in (series_task, self._maybe_overview(input_data)) if t is not None]
        outcomes = await asyncio.gather(*tasks, return_exceptions=True)

        for outcome in outcomes:
            if isinstance(outcome, ServiceError):
                logger.warning(f"Data fetch failed for {symbol}: {outcome}")
                result.errors.append(str(outcome))
            elif isinstance(outcome, BaseException):
                raise outcome
            elif isinstance(outcome, PriceSeries):
                result.series = outcome
            elif isinstance(outcome, CompanyOverview):
                result.overview = outcome

        if result.series is not None and len(result.series) == 0:
            result.warnings.append(f"No price history for {symbol}")

        return result

    async def _fetch_series(self, symbol: str, output_size: OutputSize) -> PriceSeries:
        series = await self.client.get_daily_series(symbol, output_size)
        await self.cache.set(symbol, series)
        return series

    async def _maybe_overview(self, input_data: DataRequest) -> Optional[CompanyOverview]:
        if not input_data.include_overview:
            return None
        return await self.client.get_overview(input_data.symbol)

    async def get_price_series(self, symbol: str, use_cache: bool = True) -> PriceSeries:
        """Daily bars for a symbol, oldest first."""
        symbol = symbol.upper().strip()

        if use_cache:
            cached = await self.cache.get(symbol)
            if cached is not None:
                logger.debug(f"Series cache hit for {symbol} (fetched {cached.fetched_at})")
                return cached.series

        return await self._fetch_series(symbol, self.output_size)

    async def get_overview(self, symbol: str) -> CompanyOverview:
        """Company fundamentals for a symbol."""
        return await self.client.get_overview(symbol.upper().strip())

    async def get_news(
        self,
        symbol: str,
        limit: int = 10,
        text_scorer: Optional[Callable[[str], float]] = None,
    ) -> list[NewsItem]:
        """Recent news with sentiment for a symbol."""
        return await self.client.get_news_sentiment(symbol.upper().strip(), limit, text_scorer)

    async def get_sec_data(self, symbol: str) -> SecCompanyData:
        """Recent SEC filings and annual financial facts for a symbol."""
        return await self.sec_client.get_company_data(symbol.upper().strip())

    async def health_check(self) -> bool:
        """Healthy when the provider is configured."""
        return self.client.is_configured

    async def close(self) -> None:
        await self.client.close()
        await self.sec_client.close()


# Singleton instance
_service_instance: Optional[DataIngestionService] = None


def get_data_ingestion_service() -> DataIngestionService:
    """Get or create data ingestion service instance."""
    global _service_instance
    if _service_instance is None:
        _service_instance = DataIngestionService()
    return _service_instance
