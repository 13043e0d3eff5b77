"""
SuperTrend Indicator

Breakout vote based on ATR bands around the bar midpoint.
"""

from __future__ import annotations

import pandas as pd

from ..base_indicator import BaseIndicator, Signal
from ..volatility import average_true_range


class SuperTrendIndicator(BaseIndicator):
    """
    Simplified SuperTrend.

    Logic:
        - upper = hl2 + multiplier * ATR, lower = hl2 - multiplier * ATR
        - BUY when the close breaks above the upper band
        - SELL when the close breaks below the lower band
        - HOLD inside the bands
    """

    def __init__(
        self,
        name: str = "supertrend",
        weight: float = 1.0,
        period: int = 10,
        multiplier: float = 3.0,
    ):
        super().__init__(name, weight)
        if period <= 0:
            raise ValueError("SuperTrend period must be > 0")
        self.period = period
        self.multiplier = multiplier

    @property
    def min_bars(self) -> int:
        return self.period + 1

    def compute(self, frame: pd.DataFrame) -> dict[str, float]:
        atr = float(average_true_range(frame, self.period).iloc[-1])
        last = frame.iloc[-1]
        hl2 = (float(last["high"]) + float(last["low"])) / 2

        return {
            "value": float(last["close"]),
            "upper": hl2 + self.multiplier * atr,
            "lower": hl2 - self.multiplier * atr,
            "atr": atr,
        }

    def classify(self, values: dict[str, float]) -> Signal:
        if values["value"] > values["upper"]:
            return Signal.BUY
        if values["value"] < values["lower"]:
            return Signal.SELL
        return Signal.HOLD
