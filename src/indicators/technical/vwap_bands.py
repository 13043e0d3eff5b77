"""
VWAP + Bollinger Bands Indicator

Band-touch vote confirmed by the close's side of VWAP.
"""

from __future__ import annotations

import pandas as pd

from ..base_indicator import BaseIndicator, Signal


class VWAPBollingerIndicator(BaseIndicator):
    """
    VWAP / Bollinger Bands vote.

    Logic:
        - VWAP over the whole bar series (typical price weighted by volume)
        - Bands = SMA(period) +/- num_std * population std
        - BUY when the close is below the lower band and below VWAP
        - SELL when the close is above the upper band and above VWAP
    """

    def __init__(
        self,
        name: str = "vwap_bb",
        weight: float = 1.0,
        period: int = 20,
        num_std: float = 2.0,
    ):
        super().__init__(name, weight)
        if period <= 1:
            raise ValueError("Bollinger period must be > 1")
        self.period = period
        self.num_std = num_std

    @property
    def min_bars(self) -> int:
        return self.period

    def compute(self, frame: pd.DataFrame) -> dict[str, float]:
        typical = (frame["high"] + frame["low"] + frame["close"]) / 3
        volume = frame["volume"]
        total_volume = float(volume.sum())
        if total_volume > 0:
            vwap = float((typical * volume).sum() / total_volume)
        else:
            vwap = float(typical.mean())

        window = frame["close"].iloc[-self.period:]
        middle = float(window.mean())
        std = float(window.std(ddof=0))

        return {
            "value": float(frame["close"].iloc[-1]),
            "vwap": vwap,
            "middle": middle,
            "upper": middle + self.num_std * std,
            "lower": middle - self.num_std * std,
        }

    def classify(self, values: dict[str, float]) -> Signal:
        close = values["value"]
        if close < values["lower"] and close < values["vwap"]:
            return Signal.BUY
        if close > values["upper"] and close > values["vwap"]:
            return Signal.SELL
        return Signal.HOLD
