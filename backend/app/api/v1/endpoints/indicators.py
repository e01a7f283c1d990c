"""
Indicator API Endpoints

Endpoints for technical indicator calculations.
"""

import logging
from typing import Optional

from fastapi import APIRouter

from app.api.v1.errors import to_http_exception
from app.schemas.market import PriceSeries
from app.schemas.indicators import IndicatorOutput, IndicatorSeries, IndicatorSnapshot
from app.services.base import ServiceError
from app.services.data_ingestion import get_data_ingestion_service
from app.services.indicators import get_indicator_service

logger = logging.getLogger(__name__)

router = APIRouter()


async def _load_series(symbol: str) -> PriceSeries:
    data_service = get_data_ingestion_service()
    try:
        return await data_service.get_price_series(symbol)
    except ServiceError as e:
        logger.error(f"Price lookup failed for {symbol}: {e}")
        raise to_http_exception(e)


@router.post("/snapshot", response_model=Optional[IndicatorSnapshot])
async def calculate_snapshot(series: PriceSeries):
    """
    Calculate the indicator snapshot for caller-supplied bars.

    Bars must be oldest first. Returns null for an empty series.
    """
    return get_indicator_service().snapshot(series)


@router.get("/{symbol}", response_model=IndicatorOutput)
async def get_indicators(symbol: str):
    """
    Get current indicator values for a symbol.

    Returns:
        - SMA 20/50/200, RSI(14), MACD(12,26,9), volume SMA(20)
        - Signals: overbought/oversold, price vs 50-day MA, MACD momentum

    Indicators without enough history are null; the whole snapshot is
    null when the symbol has no price history yet.
    """
    symbol = symbol.upper().strip()
    series = await _load_series(symbol)
    return get_indicator_service().analyze(symbol, series)


@router.get("/{symbol}/series", response_model=IndicatorSeries)
async def get_indicator_series(symbol: str):
    """
    Get full indicator series for charting.

    Every list is aligned to `dates`; leading entries without enough
    history are null.
    """
    symbol = symbol.upper().strip()
    series = await _load_series(symbol)
    return get_indicator_service().series(series)
