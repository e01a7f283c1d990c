"""
Technical Indicator Calculations

Pure NumPy implementations of technical indicators.
NO LLM INVOLVEMENT - All math is deterministic.

Every function takes values oldest-first and returns a compact array:
element 0 is the first window with enough history, the last element lines
up with the last input. Too little history yields an empty array, never NaN.
"""

from typing import Optional, Sequence, Union

import numpy as np

Values = Union[Sequence[float], np.ndarray]


def _as_array(values: Values) -> np.ndarray:
    # Copy so callers' arrays are never touched
    return np.array(values, dtype=float)


def _check_period(period: int) -> None:
    if period < 1:
        raise ValueError(f"period must be >= 1, got {period}")


# =============================================================================
# MOVING AVERAGES
# =============================================================================


def sma(values: Values, period: int) -> np.ndarray:
    """
    Simple Moving Average.

    Output length is max(0, n - period + 1); out[i] is the mean of
    values[i : i + period].
    """
    _check_period(period)
    data = _as_array(values)
    if len(data) < period:
        return np.empty(0)

    windows = np.lib.stride_tricks.sliding_window_view(data, period)
    return windows.mean(axis=1)


def ema(values: Values, period: int) -> np.ndarray:
    """
    Exponential Moving Average.

    Seeded with the mean of the first `period` values, then
    ema[i] = (x[i] - ema[i-1]) * k + ema[i-1] with k = 2 / (period + 1).
    Output length matches sma().
    """
    _check_period(period)
    data = _as_array(values)
    if len(data) < period:
        return np.empty(0)

    multiplier = 2 / (period + 1)
    result = np.empty(len(data) - period + 1)
    result[0] = np.mean(data[:period])

    for i, x in enumerate(data[period:], start=1):
        result[i] = (x - result[i - 1]) * multiplier + result[i - 1]

    return result


# =============================================================================
# MOMENTUM INDICATORS
# =============================================================================


def _rsi_value(avg_gain: float, avg_loss: float) -> float:
    if avg_loss == 0:
        # No losses: all gains -> 100, no movement at all -> neutral
        return 100.0 if avg_gain > 0 else 50.0
    rs = avg_gain / avg_loss
    return 100 - (100 / (1 + rs))


def rsi(closes: Values, period: int = 14) -> np.ndarray:
    """
    Relative Strength Index (Wilder smoothing).

    Average gain/loss are seeded over the first `period` price changes (all
    available changes when exactly `period` closes are given), then smoothed
    as avg = (avg * (period - 1) + change) / period.
    """
    _check_period(period)
    data = _as_array(closes)
    if len(data) < max(period, 2):
        return np.empty(0)

    deltas = np.diff(data)
    gains = np.where(deltas > 0, deltas, 0.0)
    losses = np.where(deltas < 0, -deltas, 0.0)

    seed = min(period, len(deltas))
    avg_gain = float(np.mean(gains[:seed]))
    avg_loss = float(np.mean(losses[:seed]))

    result = [_rsi_value(avg_gain, avg_loss)]
    for gain, loss in zip(gains[seed:], losses[seed:]):
        avg_gain = (avg_gain * (period - 1) + gain) / period
        avg_loss = (avg_loss * (period - 1) + loss) / period
        result.append(_rsi_value(avg_gain, avg_loss))

    return np.array(result)


def macd(
    closes: Values,
    fast_period: int = 12,
    slow_period: int = 26,
    signal_period: int = 9,
) -> tuple[np.ndarray, np.ndarray, np.ndarray]:
    """
    MACD (Moving Average Convergence Divergence).

    The fast and slow EMAs differ in length, so both are cut to their common
    tail (they always end on the last close) before subtracting. Signal and
    histogram are aligned to the tail of the MACD line.

    Returns: (macd_line, signal_line, histogram)
    """
    _check_period(signal_period)
    fast_ema = ema(closes, fast_period)
    slow_ema = ema(closes, slow_period)

    common = min(len(fast_ema), len(slow_ema))
    if common == 0:
        return np.empty(0), np.empty(0), np.empty(0)

    macd_line = fast_ema[len(fast_ema) - common:] - slow_ema[len(slow_ema) - common:]

    # Signal line is EMA of MACD line
    signal_line = ema(macd_line, signal_period)

    histogram = macd_line[len(macd_line) - len(signal_line):] - signal_line

    return macd_line, signal_line, histogram


# =============================================================================
# UTILITY FUNCTIONS
# =============================================================================


def get_last_value(arr: np.ndarray) -> Optional[float]:
    """Get last value from an indicator array, None when empty."""
    return float(arr[-1]) if len(arr) > 0 else None


def align_to(arr: np.ndarray, length: int) -> list[Optional[float]]:
    """Left-pad an indicator array with None so it lines up with `length` inputs."""
    padding = max(0, length - len(arr))
    return [None] * padding + [float(v) for v in arr[len(arr) - (length - padding):]]
