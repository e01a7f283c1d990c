"""
Stock API Endpoints

Company fundamentals, SEC filings and daily price history.
"""

import logging

from fastapi import APIRouter, HTTPException, Query

from app.api.v1.errors import to_http_exception
from app.schemas.market import CompanyOverview, PriceSeries, SecCompanyData
from app.services.base import ServiceError
from app.services.data_ingestion import get_data_ingestion_service

logger = logging.getLogger(__name__)

router = APIRouter()


@router.get("/{symbol}/overview", response_model=CompanyOverview)
async def get_overview(symbol: str):
    """
    Get company fundamentals.

    Sector, industry, market cap, valuation ratios, growth and 52-week range.
    """
    symbol = symbol.upper().strip()
    data_service = get_data_ingestion_service()

    try:
        return await data_service.get_overview(symbol)
    except ServiceError as e:
        logger.error(f"Overview lookup failed for {symbol}: {e}")
        raise to_http_exception(e)


@router.get("/{symbol}/prices", response_model=PriceSeries)
async def get_prices(
    symbol: str,
    limit: int = Query(default=100, ge=1, le=5000, description="Most recent N bars"),
    refresh: bool = Query(default=False, description="Bypass the series cache"),
):
    """
    Get daily OHLCV bars, oldest first.
    """
    symbol = symbol.upper().strip()
    data_service = get_data_ingestion_service()

    try:
        series = await data_service.get_price_series(symbol, use_cache=not refresh)
    except ServiceError as e:
        logger.error(f"Price lookup failed for {symbol}: {e}")
        raise to_http_exception(e)

    if len(series) == 0:
        raise HTTPException(status_code=404, detail=f"No price history for {symbol}")

    return series.tail(limit)


@router.get("/{symbol}/filings", response_model=SecCompanyData)
async def get_filings(symbol: str):
    """
    Get recent SEC filings and annual financial facts from EDGAR.

    Revenue, net income and operating income for the latest fiscal years.
    """
    symbol = symbol.upper().strip()
    data_service = get_data_ingestion_service()

    try:
        return await data_service.get_sec_data(symbol)
    except ServiceError as e:
        logger.error(f"SEC lookup failed for {symbol}: {e}")
        raise to_http_exception(e)
