"""
Technical Indicators

Panel indicators built on OHLCV bars.
"""

from .cci import CCIIndicator
from .rsi import EMARSIIndicator, RSIIndicator, relative_strength_index
from .stochastic import StochasticIndicator
from .supertrend import SuperTrendIndicator
from .trend import EMACrossIndicator, MACDIndicator
from .vwap_bands import VWAPBollingerIndicator

__all__ = [
    "CCIIndicator",
    "EMACrossIndicator",
    "EMARSIIndicator",
    "MACDIndicator",
    "RSIIndicator",
    "StochasticIndicator",
    "SuperTrendIndicator",
    "VWAPBollingerIndicator",
    "relative_strength_index",
]
