"""
Indicator Engine Service Interface

Defines the contract for the indicator calculation layer.
"""

from abc import abstractmethod
from typing import Optional

from app.services.base import BaseService
from app.schemas.market import PriceSeries
from app.schemas.indicators import IndicatorOutput, IndicatorSeries, IndicatorSnapshot


class IndicatorServiceInterface(BaseService[PriceSeries, Optional[IndicatorSnapshot]]):
    """
    Indicator Engine Service Contract.

    INPUT: PriceSeries
        - bars: daily OHLCV, strictly ascending by date

    OUTPUT: IndicatorSnapshot
        - Latest SMA20/50/200, RSI(14), MACD(12,26,9), volume SMA(20)
        - None when the series is empty
    """

    @property
    def name(self) -> str:
        return "IndicatorService"

    @abstractmethod
    async def execute(self, input_data: PriceSeries) -> Optional[IndicatorSnapshot]:
        """Calculate the current indicator snapshot."""
        pass

    @abstractmethod
    def snapshot(self, series: PriceSeries) -> Optional[IndicatorSnapshot]:
        """Latest value of every indicator, None for an empty series."""
        pass

    @abstractmethod
    def series(self, series: PriceSeries) -> IndicatorSeries:
        """Full indicator series aligned to the input dates (for charting)."""
        pass

    @abstractmethod
    def analyze(self, symbol: str, series: PriceSeries) -> IndicatorOutput:
        """Snapshot plus interpretation signals for a symbol."""
        pass

    async def health_check(self) -> bool:
        """Indicator service is always healthy (pure computation)."""
        return True
