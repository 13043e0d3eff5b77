"""
RSI Indicators

Plain RSI and the EMA-smoothed RSI used by the default panel.
Mean reversion votes on oscillator extremes.
"""

from __future__ import annotations

import pandas as pd

from ..base_indicator import BaseIndicator, Signal
from ..volatility import wilder_smooth


def relative_strength_index(close: pd.Series, period: int = 14) -> pd.Series:
    """RSI series with Wilder smoothing. NaN until period + 1 closes."""
    delta = close.diff().iloc[1:]
    avg_gain = wilder_smooth(delta.clip(lower=0.0), period)
    avg_loss = wilder_smooth((-delta).clip(lower=0.0), period)

    rsi = 100.0 - 100.0 / (1.0 + avg_gain / avg_loss)
    # no losses in the window: RSI saturates, flat window stays neutral
    rsi = rsi.mask((avg_loss == 0) & (avg_gain > 0), 100.0)
    rsi = rsi.mask((avg_loss == 0) & (avg_gain == 0), 50.0)
    return rsi.reindex(close.index)


def _classify_band(value: float, oversold: float, overbought: float) -> Signal:
    if value < oversold:
        return Signal.BUY
    if value > overbought:
        return Signal.SELL
    return Signal.HOLD


class RSIIndicator(BaseIndicator):
    """
    RSI reversal vote.

    Logic:
        - BUY when RSI < oversold
        - SELL when RSI > overbought
    """

    def __init__(
        self,
        name: str = "rsi",
        weight: float = 1.0,
        period: int = 7,
        oversold: float = 30.0,
        overbought: float = 70.0,
    ):
        super().__init__(name, weight)
        if period <= 0:
            raise ValueError("RSI period must be > 0")
        self.period = period
        self.oversold = oversold
        self.overbought = overbought

    @property
    def min_bars(self) -> int:
        return self.period + 1

    def compute(self, frame: pd.DataFrame) -> dict[str, float]:
        rsi = relative_strength_index(frame["close"], self.period)
        return {"value": float(rsi.iloc[-1])}

    def classify(self, values: dict[str, float]) -> Signal:
        return _classify_band(values["value"], self.oversold, self.overbought)


class EMARSIIndicator(BaseIndicator):
    """
    EMA-smoothed RSI.

    Logic:
        - RSI(rsi_period) smoothed by EMA(ema_period)
        - BUY below oversold, SELL above overbought

    Smoothing removes single-bar spikes that make raw RSI flip votes.
    """

    def __init__(
        self,
        name: str = "ema_rsi",
        weight: float = 1.0,
        rsi_period: int = 14,
        ema_period: int = 9,
        oversold: float = 30.0,
        overbought: float = 70.0,
    ):
        super().__init__(name, weight)
        if rsi_period <= 0 or ema_period <= 0:
            raise ValueError("EMA-RSI periods must be > 0")
        self.rsi_period = rsi_period
        self.ema_period = ema_period
        self.oversold = oversold
        self.overbought = overbought

    @property
    def min_bars(self) -> int:
        return self.rsi_period + self.ema_period

    def compute(self, frame: pd.DataFrame) -> dict[str, float]:
        rsi = relative_strength_index(frame["close"], self.rsi_period).dropna()
        ema = rsi.ewm(span=self.ema_period, adjust=False, min_periods=self.ema_period).mean()
        if ema.empty:
            return {"value": float("nan"), "rsi": float("nan")}
        return {"value": float(ema.iloc[-1]), "rsi": float(rsi.iloc[-1])}

    def classify(self, values: dict[str, float]) -> Signal:
        return _classify_band(values["value"], self.oversold, self.overbought)
