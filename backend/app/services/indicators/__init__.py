"""
Indicator Engine Service

CONTRACT:
    Input:  PriceSeries (daily OHLCV, oldest first)
    Output: IndicatorSnapshot / IndicatorSeries

RESPONSIBILITIES:
    - Simple and exponential moving averages
    - RSI (Wilder smoothing) with explicit flat/one-sided fallbacks
    - MACD with fast/slow EMA alignment
    - Volume SMA
    - Readable signals (overbought/oversold, price vs MA, momentum)

PURE PYTHON - No LLM involvement.
Uses NumPy for calculations.
All math is deterministic and reproducible.
"""

from app.services.indicators.interface import IndicatorServiceInterface
from app.services.indicators.service import IndicatorService, get_indicator_service

__all__ = [
    "IndicatorServiceInterface",
    "IndicatorService",
    "get_indicator_service",
]
