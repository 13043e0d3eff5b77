"""
Indicators Module

Bar types, panel indicators and the IndicatorPanel that evaluates them.
"""

from .base_indicator import (
    Bar,
    BaseIndicator,
    IndicatorReading,
    InsufficientDataError,
    Signal,
    bars_to_frame,
)
from .panel import IndicatorPanel, build_indicator, register_indicator
from .volatility import average_true_range, latest_atr

__all__ = [
    "Bar",
    "BaseIndicator",
    "IndicatorPanel",
    "IndicatorReading",
    "InsufficientDataError",
    "Signal",
    "average_true_range",
    "bars_to_frame",
    "build_indicator",
    "latest_atr",
    "register_indicator",
]
