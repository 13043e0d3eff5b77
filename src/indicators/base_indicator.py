"""
Base Indicator

Bar and reading types plus the abstract base class every panel indicator
implements. An indicator computes its own values from a bar frame and maps
them to a BUY/SELL/HOLD vote with a fixed threshold policy.
"""

from __future__ import annotations

import math
from abc import ABC, abstractmethod
from collections.abc import Sequence
from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Any

import pandas as pd

BAR_COLUMNS = ["timestamp", "open", "high", "low", "close", "volume"]


class Signal(str, Enum):
    """Ternary indicator vote."""

    BUY = "BUY"
    SELL = "SELL"
    HOLD = "HOLD"


class InsufficientDataError(ValueError):
    """Raised when a bar series is shorter than an indicator's lookback."""

    def __init__(self, indicator: str, required: int, available: int):
        self.indicator = indicator
        self.required = required
        self.available = available
        super().__init__(
            f"{indicator} needs at least {required} bars, got {available}"
        )


@dataclass(frozen=True)
class Bar:
    """One OHLCV candle."""
    timestamp: datetime
    open: float
    high: float
    low: float
    close: float
    volume: float


@dataclass(frozen=True)
class IndicatorReading:
    """
    Output of one indicator for one evaluation.

    Attributes:
        name: Indicator name
        value: Headline numeric value
        signal: BUY / SELL / HOLD vote
        weight: Static weight from configuration
        components: The indicator's own auxiliary values (bands, %D, ...)
    """
    name: str
    value: float
    signal: Signal
    weight: float = 1.0
    components: dict[str, float] = field(default_factory=dict)

    def to_record(self) -> dict[str, Any]:
        return {
            "name": self.name,
            "value": self.value,
            "signal": self.signal.value,
            "weight": self.weight,
            **self.components,
        }


def bars_to_frame(bars: Sequence[Bar] | pd.DataFrame) -> pd.DataFrame:
    """
    Convert a bar sequence into a float DataFrame ordered by timestamp.

    A DataFrame is passed through after a column check.
    """
    if isinstance(bars, pd.DataFrame):
        missing = {"open", "high", "low", "close", "volume"} - set(bars.columns)
        if missing:
            raise ValueError(f"Missing required columns: {missing}")
        return bars.reset_index(drop=True)

    if not bars:
        return pd.DataFrame(columns=BAR_COLUMNS)

    frame = pd.DataFrame(
        [(b.timestamp, b.open, b.high, b.low, b.close, b.volume) for b in bars],
        columns=BAR_COLUMNS,
    )
    for col in ("open", "high", "low", "close", "volume"):
        frame[col] = frame[col].astype(float)
    return frame


class BaseIndicator(ABC):
    """
    Base class for panel indicators.

    Subclasses implement:
        - min_bars: smallest bar count that yields a valid value
        - compute(): the indicator's own values at the last bar
        - classify(): fixed threshold policy over those values

    classify() only sees the values produced by the same indicator, so no
    indicator can read another one's output.
    """

    #: key of the headline value inside compute()'s result
    value_key: str = "value"

    def __init__(self, name: str, weight: float = 1.0):
        if weight < 0:
            raise ValueError(f"Indicator weight must be >= 0, got {weight}")
        self.name = name
        self.weight = float(weight)

    @property
    @abstractmethod
    def min_bars(self) -> int:
        """Minimum number of bars required."""

    @abstractmethod
    def compute(self, frame: pd.DataFrame) -> dict[str, float]:
        """
        Compute indicator values at the last bar.

        Args:
            frame: Bar frame with open/high/low/close/volume columns

        Returns:
            Mapping of value name to float; must contain value_key
        """

    @abstractmethod
    def classify(self, values: dict[str, float]) -> Signal:
        """Map this indicator's own values to a vote."""

    def evaluate(self, frame: pd.DataFrame) -> IndicatorReading:
        """Compute, validate and classify in one step."""
        if len(frame) < self.min_bars:
            raise InsufficientDataError(self.name, self.min_bars, len(frame))

        values = self.compute(frame)
        for val in values.values():
            # NaN means a rolling window was not filled
            if val is None or not math.isfinite(val):
                raise InsufficientDataError(self.name, self.min_bars, len(frame))

        value = values[self.value_key]
        components = {k: v for k, v in values.items() if k != self.value_key}
        return IndicatorReading(
            name=self.name,
            value=float(value),
            signal=self.classify(values),
            weight=self.weight,
            components=components,
        )

    def get_parameters(self) -> dict[str, Any]:
        return {"name": self.name, "weight": self.weight, "min_bars": self.min_bars}

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}(name='{self.name}', weight={self.weight})"
