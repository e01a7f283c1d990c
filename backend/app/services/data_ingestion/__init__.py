"""
Data Ingestion Service

CONTRACT:
    Input:  DataRequest
    Output: DataIngestionResult (PriceSeries + CompanyOverview)

RESPONSIBILITIES:
    - Fetch daily OHLCV, fundamentals and news sentiment from Alpha Vantage
    - Fetch recent SEC filings and annual XBRL facts from EDGAR
    - Flatten the provider's labelled payloads into standard schemas
    - Sort price series oldest-first before handing them to the indicator engine
    - Cache price series per ticker

NO LLM INVOLVEMENT - Pure data fetching and transformation.
"""

from app.services.data_ingestion.interface import (
    DataIngestionServiceInterface,
    DataIngestionResult,
)
from app.services.data_ingestion.alpha_vantage import (
    AlphaVantageClient,
    get_alpha_vantage_client,
)
from app.services.data_ingestion.sec_edgar import (
    SecEdgarClient,
    get_sec_edgar_client,
)
from app.services.data_ingestion.service import (
    DataIngestionService,
    get_data_ingestion_service,
)

__all__ = [
    "DataIngestionServiceInterface",
    "DataIngestionResult",
    "AlphaVantageClient",
    "get_alpha_vantage_client",
    "SecEdgarClient",
    "get_sec_edgar_client",
    "DataIngestionService",
    "get_data_ingestion_service",
]
