"""
Market Data

Source interface consumed by the trading engine and a ccxt-backed
implementation for spot/futures exchanges.
"""

from __future__ import annotations

import logging
import math
from datetime import datetime, timezone
from typing import Protocol

import ccxt

from src.indicators.base_indicator import Bar

logger = logging.getLogger(__name__)


class MarketDataError(Exception):
    """Exchange request failed or returned unusable data."""


class MarketDataSource(Protocol):
    def fetch_bars(self, symbol: str, timeframe: str, limit: int) -> list[Bar]:
        ...

    def fetch_current_price(self, symbol: str) -> float:
        ...


class CcxtMarketData:
    """
    Read-only market data via ccxt.

    Handles:
        - OHLCV candles as Bar sequences
        - Last traded price
    """

    def __init__(
        self,
        exchange_id: str = "binance",
        api_key: str = "",
        api_secret: str = "",
        timeout_ms: int = 10000,
        exchange: ccxt.Exchange | None = None,
    ):
        if exchange is not None:
            self._exchange = exchange
            return

        if not hasattr(ccxt, exchange_id):
            raise ValueError(f"Unknown ccxt exchange: {exchange_id}")
        self._exchange = getattr(ccxt, exchange_id)({
            "apiKey": api_key,
            "secret": api_secret,
            "timeout": timeout_ms,
            "enableRateLimit": True,
        })

    def fetch_bars(self, symbol: str, timeframe: str = "15m", limit: int = 100) -> list[Bar]:
        """
        Fetch the most recent candles, oldest first.

        Raises:
            MarketDataError: request failed or no candles returned
        """
        try:
            raw = self._exchange.fetch_ohlcv(symbol, timeframe=timeframe, limit=limit)
        except ccxt.BaseError as e:
            raise MarketDataError(f"OHLCV fetch failed for {symbol}: {e}") from e

        if not raw:
            raise MarketDataError(f"No OHLCV data for {symbol}")

        bars = []
        for ts, o, h, l, c, v in raw:
            bars.append(Bar(
                timestamp=datetime.fromtimestamp(ts / 1000, tz=timezone.utc),
                open=float(o),
                high=float(h),
                low=float(l),
                close=float(c),
                volume=float(v or 0.0),
            ))
        return bars

    def fetch_current_price(self, symbol: str) -> float:
        """
        Get the latest price for a symbol.

        Raises:
            MarketDataError: request failed or price missing/non-positive
        """
        try:
            ticker = self._exchange.fetch_ticker(symbol)
        except ccxt.BaseError as e:
            raise MarketDataError(f"Price fetch failed for {symbol}: {e}") from e

        price = float(ticker.get("last") or ticker.get("close") or 0)
        if not math.isfinite(price) or price <= 0:
            raise MarketDataError(f"Invalid price for {symbol}: {price}")
        return price
