"""
Volatility helpers

True range, Wilder smoothing and ATR. Shared by the SuperTrend indicator and
by the engine, which sizes stop-loss/take-profit distance from the latest ATR.
"""

from __future__ import annotations

import math
from collections.abc import Sequence

import pandas as pd

from .base_indicator import Bar, InsufficientDataError, bars_to_frame


def wilder_smooth(series: pd.Series, period: int) -> pd.Series:
    """Wilder's moving average (EMA with alpha = 1/period)."""
    return series.ewm(alpha=1.0 / period, adjust=False, min_periods=period).mean()


def true_range(frame: pd.DataFrame) -> pd.Series:
    """Per-bar true range; the first bar falls back to high - low."""
    prev_close = frame["close"].shift(1)
    ranges = pd.concat(
        [
            frame["high"] - frame["low"],
            (frame["high"] - prev_close).abs(),
            (frame["low"] - prev_close).abs(),
        ],
        axis=1,
    )
    return ranges.max(axis=1)


def average_true_range(frame: pd.DataFrame, period: int = 14) -> pd.Series:
    """ATR series (Wilder). NaN until period + 1 bars are available."""
    if period <= 0:
        raise ValueError("ATR period must be > 0")
    # the first true range has no previous close, so it is left out
    tr = true_range(frame).iloc[1:]
    return wilder_smooth(tr, period).reindex(frame.index)


def latest_atr(bars: Sequence[Bar] | pd.DataFrame, period: int = 14) -> float:
    """
    ATR at the last bar.

    Raises:
        InsufficientDataError: fewer than period + 1 bars
    """
    frame = bars_to_frame(bars)
    if len(frame) < period + 1:
        raise InsufficientDataError("atr", period + 1, len(frame))

    value = float(average_true_range(frame, period).iloc[-1])
    if not math.isfinite(value):
        raise InsufficientDataError("atr", period + 1, len(frame))
    return value
