"""
Indicator Engine Service Implementation

Calculates technical indicators from a daily price series.
NO LLM INVOLVEMENT - Pure Python/NumPy calculations.
"""

import logging
from typing import Optional

from app.schemas.market import PriceSeries
from app.schemas.indicators import (
    IndicatorOutput,
    IndicatorSeries,
    IndicatorSignal,
    IndicatorSnapshot,
    SignalType,
)
from app.services.indicators.interface import IndicatorServiceInterface
from app.services.indicators.calculations import (
    sma,
    rsi,
    macd,
    get_last_value,
    align_to,
)

logger = logging.getLogger(__name__)

SMA_PERIODS = (20, 50, 200)
RSI_PERIOD = 14
MACD_FAST, MACD_SLOW, MACD_SIGNAL = 12, 26, 9
VOLUME_SMA_PERIOD = 20

RSI_OVERBOUGHT = 70
RSI_OVERSOLD = 30


class IndicatorService(IndicatorServiceInterface):
    """
    Indicator Engine Service.

    Stateless: every call recomputes from the series it is given.
    """

    async def execute(self, input_data: PriceSeries) -> Optional[IndicatorSnapshot]:
        return self.snapshot(input_data)

    def snapshot(self, series: PriceSeries) -> Optional[IndicatorSnapshot]:
        """Latest value of every indicator, None for an empty series."""
        if len(series) == 0:
            return None

        closes = series.closes
        sma_20, sma_50, sma_200 = (sma(closes, p) for p in SMA_PERIODS)
        macd_line, signal_line, histogram = macd(closes, MACD_FAST, MACD_SLOW, MACD_SIGNAL)

        return IndicatorSnapshot(
            sma20=get_last_value(sma_20),
            sma50=get_last_value(sma_50),
            sma200=get_last_value(sma_200),
            rsi=get_last_value(rsi(closes, RSI_PERIOD)),
            macd=get_last_value(macd_line),
            macd_signal=get_last_value(signal_line),
            macd_histogram=get_last_value(histogram),
            volume_sma=get_last_value(sma(series.volumes, VOLUME_SMA_PERIOD)),
        )

    def series(self, series: PriceSeries) -> IndicatorSeries:
        """Full indicator series, front-padded with None to line up with dates."""
        closes = series.closes
        n = len(closes)
        sma_20, sma_50, sma_200 = (sma(closes, p) for p in SMA_PERIODS)
        macd_line, signal_line, histogram = macd(closes, MACD_FAST, MACD_SLOW, MACD_SIGNAL)

        return IndicatorSeries(
            symbol=series.symbol,
            dates=series.dates,
            close=closes,
            sma20=align_to(sma_20, n),
            sma50=align_to(sma_50, n),
            sma200=align_to(sma_200, n),
            rsi=align_to(rsi(closes, RSI_PERIOD), n),
            macd=align_to(macd_line, n),
            macd_signal=align_to(signal_line, n),
            macd_histogram=align_to(histogram, n),
            volume_sma=align_to(sma(series.volumes, VOLUME_SMA_PERIOD), n),
        )

    def analyze(self, symbol: str, series: PriceSeries) -> IndicatorOutput:
        """Snapshot plus interpretation signals."""
        snap = self.snapshot(series)
        if snap is None:
            logger.info(f"No price history for {symbol}; returning empty analysis")
            return IndicatorOutput(symbol=symbol)

        last_bar = series.bars[-1]
        return IndicatorOutput(
            symbol=symbol,
            as_of=last_bar.date,
            close=last_bar.close,
            snapshot=snap,
            signals=self._signals(snap, last_bar.close),
        )

    def _signals(self, snap: IndicatorSnapshot, close: float) -> list[IndicatorSignal]:
        """Readable interpretation of the snapshot."""
        signals = []

        if snap.rsi is not None:
            if snap.rsi > RSI_OVERBOUGHT:
                signals.append(IndicatorSignal(
                    indicator="RSI", signal=SignalType.SELL, description="Overbought"
                ))
            elif snap.rsi < RSI_OVERSOLD:
                signals.append(IndicatorSignal(
                    indicator="RSI", signal=SignalType.BUY, description="Oversold"
                ))
            else:
                signals.append(IndicatorSignal(
                    indicator="RSI", signal=SignalType.NEUTRAL, description="Neutral"
                ))

        if snap.sma50 is not None:
            if close > snap.sma50:
                signals.append(IndicatorSignal(
                    indicator="SMA50", signal=SignalType.BUY, description="Above 50-day MA"
                ))
            else:
                signals.append(IndicatorSignal(
                    indicator="SMA50", signal=SignalType.SELL, description="Below 50-day MA"
                ))

        if snap.macd_histogram is not None:
            if snap.macd_histogram > 0:
                signal, description = SignalType.BUY, "Bullish momentum"
            elif snap.macd_histogram < 0:
                signal, description = SignalType.SELL, "Bearish momentum"
            else:
                signal, description = SignalType.NEUTRAL, "No momentum"
            signals.append(IndicatorSignal(
                indicator="MACD", signal=signal, description=description
            ))

        return signals


# Singleton instance
_service_instance: Optional[IndicatorService] = None


def get_indicator_service() -> IndicatorService:
    """Get or create indicator service instance."""
    global _service_instance
    if _service_instance is None:
        _service_instance = IndicatorService()
    return _service_instance
