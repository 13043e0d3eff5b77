"""
Trend Indicators

Moving-average position votes: EMA crossover and MACD histogram.
"""

from __future__ import annotations

import pandas as pd

from ..base_indicator import BaseIndicator, Signal


def _ema(series: pd.Series, span: int) -> pd.Series:
    return series.ewm(span=span, adjust=False, min_periods=span).mean()


class EMACrossIndicator(BaseIndicator):
    """
    Fast/slow EMA position.

    Logic:
        - BUY while the fast EMA is above the slow EMA
        - SELL while it is below
        - HOLD only when they are equal
    """

    value_key = "fast"

    def __init__(
        self,
        name: str = "ema_cross",
        weight: float = 1.0,
        fast: int = 10,
        slow: int = 50,
    ):
        super().__init__(name, weight)
        if not 0 < fast < slow:
            raise ValueError("EMA cross requires 0 < fast < slow")
        self.fast = fast
        self.slow = slow

    @property
    def min_bars(self) -> int:
        return self.slow

    def compute(self, frame: pd.DataFrame) -> dict[str, float]:
        close = frame["close"]
        return {
            "fast": float(_ema(close, self.fast).iloc[-1]),
            "slow": float(_ema(close, self.slow).iloc[-1]),
        }

    def classify(self, values: dict[str, float]) -> Signal:
        if values["fast"] > values["slow"]:
            return Signal.BUY
        if values["fast"] < values["slow"]:
            return Signal.SELL
        return Signal.HOLD


class MACDIndicator(BaseIndicator):
    """
    MACD histogram sign.

    Logic:
        - MACD = EMA(fast) - EMA(slow), signal = EMA(MACD, signal)
        - BUY when the histogram is positive, SELL when negative
    """

    value_key = "histogram"

    def __init__(
        self,
        name: str = "macd",
        weight: float = 1.0,
        fast: int = 12,
        slow: int = 26,
        signal: int = 9,
    ):
        super().__init__(name, weight)
        if not 0 < fast < slow or signal <= 0:
            raise ValueError("MACD requires 0 < fast < slow and signal > 0")
        self.fast = fast
        self.slow = slow
        self.signal = signal

    @property
    def min_bars(self) -> int:
        return self.slow + self.signal - 1

    def compute(self, frame: pd.DataFrame) -> dict[str, float]:
        close = frame["close"]
        macd = (_ema(close, self.fast) - _ema(close, self.slow)).dropna()
        signal_line = _ema(macd, self.signal)
        if signal_line.empty:
            nan = float("nan")
            return {"histogram": nan, "macd": nan, "signal": nan}

        macd_last = float(macd.iloc[-1])
        signal_last = float(signal_line.iloc[-1])
        return {
            "histogram": macd_last - signal_last,
            "macd": macd_last,
            "signal": signal_last,
        }

    def classify(self, values: dict[str, float]) -> Signal:
        if values["histogram"] > 0:
            return Signal.BUY
        if values["histogram"] < 0:
            return Signal.SELL
        return Signal.HOLD
