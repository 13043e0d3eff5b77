"""
Signal Daemon: indicator-driven position lifecycle and risk control.

Single-process engine that handles:
  - Indicator panel evaluation and count-based signal aggregation
  - Position open / partial targets / SL-TP exits per tick
  - Daily-loss breaker, capacity and trading-hours gating
  - Per-symbol performance statistics
"""

from .config import AlertConfig, EngineConfig, PositionConfig, RiskConfig
from .events import Closed, Opened, PartialHit, PriceAlert, StopWarning, TakeProfitZone, TickEvent
from .performance_tracker import PairStatistics, PerformanceTracker
from .position_manager import (
    AlreadyClosed,
    CapacityError,
    PositionExistsError,
    PositionLifecycleManager,
    TickAction,
    TickResult,
)
from .position_store import CloseReason, Position, PositionStore, Side
from .signal_aggregator import Direction, SignalAggregator, SignalDecision
from .signal_daemon import SignalDaemon
from .trading_engine import TradingEngine

__all__ = [
    "AlertConfig",
    "AlreadyClosed",
    "CapacityError",
    "CloseReason",
    "Closed",
    "Direction",
    "EngineConfig",
    "Opened",
    "PairStatistics",
    "PartialHit",
    "PerformanceTracker",
    "Position",
    "PositionConfig",
    "PositionExistsError",
    "PositionLifecycleManager",
    "PositionStore",
    "PriceAlert",
    "RiskConfig",
    "Side",
    "SignalAggregator",
    "SignalDaemon",
    "SignalDecision",
    "StopWarning",
    "TakeProfitZone",
    "TickAction",
    "TickEvent",
    "TickResult",
    "TradingEngine",
]
