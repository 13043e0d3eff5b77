"""
Execution Module

Market data and notification adapters.
"""

from .market_data import CcxtMarketData, MarketDataError, MarketDataSource
from .telegram_bot import TelegramNotifier

__all__ = [
    "CcxtMarketData",
    "MarketDataError",
    "MarketDataSource",
    "TelegramNotifier",
]
