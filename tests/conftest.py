"""
Pytest Configuration and Fixtures

Shared fixtures for all tests.
"""

from __future__ import annotations

import sys
import time
from datetime import datetime, timedelta, timezone
from pathlib import Path

import pytest

# Add project root to path
sys.path.insert(0, str(Path(__file__).parent.parent))

from src.daemon.signal_aggregator import Direction, SignalDecision
from src.execution.market_data import MarketDataError
from src.indicators.base_indicator import Bar, IndicatorReading, Signal


def build_bars(closes, spread: float = 0.5, volume: float = 1000.0) -> list[Bar]:
    start = datetime(2024, 1, 15, tzinfo=timezone.utc)
    return [
        Bar(
            timestamp=start + timedelta(minutes=15 * i),
            open=float(c),
            high=float(c) + spread,
            low=float(c) - spread,
            close=float(c),
            volume=volume,
        )
        for i, c in enumerate(closes)
    ]


class FakeMarketData:
    """In-memory market data; symbols listed in `failing` raise, `slow` ones sleep."""

    def __init__(self, bars=None, prices=None, failing=(), slow=(), delay: float = 1.0):
        self.bars = dict(bars or {})
        self.prices = dict(prices or {})
        self.failing = set(failing)
        self.slow = set(slow)
        self.delay = delay

    def fetch_bars(self, symbol, timeframe="15m", limit=100):
        if symbol in self.failing:
            raise MarketDataError(f"{symbol} unavailable")
        if symbol in self.slow:
            time.sleep(self.delay)
        return list(self.bars[symbol][-limit:])

    def fetch_current_price(self, symbol):
        if symbol in self.failing:
            raise MarketDataError(f"{symbol} unavailable")
        if symbol in self.slow:
            time.sleep(self.delay)
        if symbol in self.prices:
            return self.prices[symbol]
        return self.bars[symbol][-1].close


@pytest.fixture
def make_bars():
    """Factory: closes -> list[Bar] with a fixed high/low spread."""
    return build_bars


@pytest.fixture
def flat_bars():
    """60 identical bars: every default indicator holds."""
    return build_bars([100.0] * 60)


@pytest.fixture
def falling_bars():
    """
    60 bars falling one point per bar (200 -> 141).

    The default panel votes BUY on ema_rsi, stochastic and cci; ATR is 1.5.
    """
    return build_bars([200.0 - i for i in range(60)])


@pytest.fixture
def rising_bars():
    """60 bars rising one point per bar (100 -> 159)."""
    return build_bars([100.0 + i for i in range(60)])


@pytest.fixture
def fake_market():
    return FakeMarketData


@pytest.fixture
def make_readings():
    """Factory: (n_buy, n_sell, n_hold) -> readings with weight 1."""

    def _make(n_buy: int, n_sell: int, n_hold: int = 0) -> list[IndicatorReading]:
        signals = [Signal.BUY] * n_buy + [Signal.SELL] * n_sell + [Signal.HOLD] * n_hold
        return [
            IndicatorReading(name=f"ind_{i}", value=0.0, signal=sig)
            for i, sig in enumerate(signals)
        ]

    return _make


@pytest.fixture
def long_decision():
    return SignalDecision(
        direction=Direction.LONG, strength=4, confidence=80,
        buy_count=4, sell_count=1, accepted=True,
    )


@pytest.fixture
def short_decision():
    return SignalDecision(
        direction=Direction.SHORT, strength=4, confidence=80,
        buy_count=1, sell_count=4, accepted=True,
    )
