"""
Commodity Channel Index Indicator
"""

from __future__ import annotations

import numpy as np
import pandas as pd

from ..base_indicator import BaseIndicator, Signal


class CCIIndicator(BaseIndicator):
    """
    CCI reversal vote.

    Logic:
        - CCI = (TP - SMA(TP)) / (0.015 * mean deviation)
        - BUY below the lower band (-100), SELL above the upper band (+100)
    """

    def __init__(
        self,
        name: str = "cci",
        weight: float = 1.0,
        period: int = 20,
        lower: float = -100.0,
        upper: float = 100.0,
    ):
        super().__init__(name, weight)
        if period <= 0:
            raise ValueError("CCI period must be > 0")
        self.period = period
        self.lower = lower
        self.upper = upper

    @property
    def min_bars(self) -> int:
        return self.period

    def compute(self, frame: pd.DataFrame) -> dict[str, float]:
        window = frame.iloc[-self.period:]
        typical = ((window["high"] + window["low"] + window["close"]) / 3).to_numpy()

        mean = typical.mean()
        mean_dev = np.abs(typical - mean).mean()
        if mean_dev == 0:
            return {"value": 0.0}
        return {"value": float((typical[-1] - mean) / (0.015 * mean_dev))}

    def classify(self, values: dict[str, float]) -> Signal:
        if values["value"] < self.lower:
            return Signal.BUY
        if values["value"] > self.upper:
            return Signal.SELL
        return Signal.HOLD
