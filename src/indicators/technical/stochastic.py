"""
Stochastic Oscillator Indicator
"""

from __future__ import annotations

import pandas as pd

from ..base_indicator import BaseIndicator, Signal


class StochasticIndicator(BaseIndicator):
    """
    Slow stochastic vote.

    Logic:
        - %K = position of the close inside the k_period high/low range
        - %D = SMA(%K, d_period)
        - BUY when both %K and %D are below oversold
        - SELL when both are above overbought
    """

    value_key = "k"

    def __init__(
        self,
        name: str = "stochastic",
        weight: float = 1.0,
        k_period: int = 14,
        d_period: int = 3,
        oversold: float = 20.0,
        overbought: float = 80.0,
    ):
        super().__init__(name, weight)
        if k_period <= 0 or d_period <= 0:
            raise ValueError("Stochastic periods must be > 0")
        self.k_period = k_period
        self.d_period = d_period
        self.oversold = oversold
        self.overbought = overbought

    @property
    def min_bars(self) -> int:
        return self.k_period + self.d_period - 1

    def compute(self, frame: pd.DataFrame) -> dict[str, float]:
        lowest = frame["low"].rolling(self.k_period, min_periods=self.k_period).min()
        highest = frame["high"].rolling(self.k_period, min_periods=self.k_period).max()
        span = highest - lowest

        k = 100.0 * (frame["close"] - lowest) / span
        k = k.mask(span == 0, 50.0)
        d = k.rolling(self.d_period, min_periods=self.d_period).mean()

        return {"k": float(k.iloc[-1]), "d": float(d.iloc[-1])}

    def classify(self, values: dict[str, float]) -> Signal:
        k, d = values["k"], values["d"]
        if k < self.oversold and d < self.oversold:
            return Signal.BUY
        if k > self.overbought and d > self.overbought:
            return Signal.SELL
        return Signal.HOLD
