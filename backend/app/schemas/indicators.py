"""
CONTRACT 2: Indicator Engine

Input: PriceSeries (oldest first)
Output: IndicatorSnapshot / IndicatorSeries / IndicatorOutput

This module performs ALL mathematical calculations.
Pure Python/NumPy - NO LLM involvement.
"""

from datetime import date
from enum import Enum
from typing import Optional
from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


# =============================================================================
# ENUMS
# =============================================================================


class SignalType(str, Enum):
    BUY = "BUY"
    SELL = "SELL"
    NEUTRAL = "NEUTRAL"


# =============================================================================
# OUTPUT: current values
# =============================================================================


class IndicatorSnapshot(BaseModel):
    """
    Most recent value of each indicator.

    None means the series was too short for that indicator.
    """

    model_config = ConfigDict(frozen=True, alias_generator=to_camel, populate_by_name=True)

    sma20: Optional[float] = None
    sma50: Optional[float] = None
    sma200: Optional[float] = None
    rsi: Optional[float] = Field(default=None, ge=0, le=100)
    macd: Optional[float] = None
    macd_signal: Optional[float] = None
    macd_histogram: Optional[float] = None
    volume_sma: Optional[float] = Field(default=None, ge=0, alias="volumeSMA")


class IndicatorSignal(BaseModel):
    """Signal generated by an indicator."""

    indicator: str
    signal: SignalType
    description: str


class IndicatorOutput(BaseModel):
    """
    Indicator analysis for a symbol.
    Returned by: Indicator Service
    Consumed by: API, AI assistant context
    """

    symbol: str
    as_of: Optional[date] = None
    close: Optional[float] = None
    snapshot: Optional[IndicatorSnapshot] = None
    signals: list[IndicatorSignal] = Field(default_factory=list)

    class Config:
        json_schema_extra = {
            "example": {
                "symbol": "IBM",
                "as_of": "2024-02-02",
                "close": 185.64,
                "snapshot": {
                    "sma20": 180.12,
                    "sma50": 168.40,
                    "sma200": None,
                    "rsi": 64.3,
                    "macd": 3.21,
                    "macdSignal": 2.87,
                    "macdHistogram": 0.34,
                    "volumeSMA": 5123400.0,
                },
                "signals": [
                    {"indicator": "RSI", "signal": "NEUTRAL", "description": "Neutral"},
                ],
            }
        }


# =============================================================================
# OUTPUT: full series (charting)
# =============================================================================


class IndicatorSeries(BaseModel):
    """
    Indicator series aligned to `dates`.

    Every list has the same length as `dates`; positions before an
    indicator has enough history are None.
    """

    model_config = ConfigDict(frozen=True)

    symbol: Optional[str] = None
    dates: list[date] = Field(default_factory=list)
    close: list[float] = Field(default_factory=list)
    sma20: list[Optional[float]] = Field(default_factory=list)
    sma50: list[Optional[float]] = Field(default_factory=list)
    sma200: list[Optional[float]] = Field(default_factory=list)
    rsi: list[Optional[float]] = Field(default_factory=list)
    macd: list[Optional[float]] = Field(default_factory=list)
    macd_signal: list[Optional[float]] = Field(default_factory=list)
    macd_histogram: list[Optional[float]] = Field(default_factory=list)
    volume_sma: list[Optional[float]] = Field(default_factory=list)
