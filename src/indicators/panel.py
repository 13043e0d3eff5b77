"""
Indicator Panel

Evaluates a fixed, configured set of indicators against one bar series.
Either every indicator produces a reading or the whole evaluation fails
with InsufficientDataError; callers never receive a partial panel.
"""

from __future__ import annotations

import logging
from collections.abc import Mapping, Sequence
from typing import Any

import pandas as pd

from .base_indicator import (
    Bar,
    BaseIndicator,
    IndicatorReading,
    InsufficientDataError,
    bars_to_frame,
)
from .technical import (
    CCIIndicator,
    EMACrossIndicator,
    EMARSIIndicator,
    MACDIndicator,
    RSIIndicator,
    StochasticIndicator,
    SuperTrendIndicator,
    VWAPBollingerIndicator,
)

logger = logging.getLogger(__name__)

INDICATOR_REGISTRY: dict[str, type[BaseIndicator]] = {
    "supertrend": SuperTrendIndicator,
    "ema_rsi": EMARSIIndicator,
    "stochastic": StochasticIndicator,
    "cci": CCIIndicator,
    "vwap_bb": VWAPBollingerIndicator,
    "ema_cross": EMACrossIndicator,
    "rsi": RSIIndicator,
    "macd": MACDIndicator,
}


def register_indicator(name: str, cls: type[BaseIndicator]) -> None:
    """Make an indicator class available to config-built panels."""
    INDICATOR_REGISTRY[name] = cls


def build_indicator(name: str, spec: Mapping[str, Any] | None = None) -> BaseIndicator:
    """
    Build one indicator from a config entry.

    Args:
        name: Registry key (also used as the reading name)
        spec: {"weight": float, "type": registry key, **params}

    Raises:
        ValueError: Unknown indicator type
    """
    params = dict(spec or {})
    params.pop("enabled", None)
    kind = params.pop("type", name)

    if kind not in INDICATOR_REGISTRY:
        raise ValueError(f"Unknown indicator: {kind}")
    return INDICATOR_REGISTRY[kind](name=name, **params)


class IndicatorPanel:
    """
    Ordered collection of indicators evaluated together.

    The panel's minimum window is the largest minimum declared by any member.
    """

    def __init__(self, indicators: Sequence[BaseIndicator]):
        if not indicators:
            raise ValueError("IndicatorPanel needs at least one indicator")

        names = [ind.name for ind in indicators]
        if len(set(names)) != len(names):
            raise ValueError(f"Duplicate indicator names: {names}")
        self.indicators = list(indicators)

    @classmethod
    def from_config(cls, config: Mapping[str, Mapping[str, Any]]) -> "IndicatorPanel":
        """Build a panel from {name: {enabled, weight, **params}}; order is kept."""
        indicators = [
            build_indicator(name, spec)
            for name, spec in config.items()
            if spec.get("enabled", True)
        ]
        return cls(indicators)

    @property
    def min_bars(self) -> int:
        return max(ind.min_bars for ind in self.indicators)

    @property
    def names(self) -> list[str]:
        return [ind.name for ind in self.indicators]

    def evaluate(self, bars: Sequence[Bar] | pd.DataFrame) -> list[IndicatorReading]:
        """
        Evaluate every indicator on the same bar series.

        Raises:
            InsufficientDataError: series shorter than any indicator's lookback,
                or an indicator could not produce a finite value
        """
        frame = bars_to_frame(bars)

        for ind in self.indicators:
            if len(frame) < ind.min_bars:
                raise InsufficientDataError(ind.name, ind.min_bars, len(frame))

        readings = [ind.evaluate(frame) for ind in self.indicators]
        logger.debug(
            "Panel: "
            + ", ".join(f"{r.name}={r.signal.value}({r.value:.4f})" for r in readings)
        )
        return readings

    def __len__(self) -> int:
        return len(self.indicators)

    def __repr__(self) -> str:
        return f"IndicatorPanel({self.names})"
