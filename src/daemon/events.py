"""
Tick Events

Everything the engine reports from one tick. Events are immutable and carry
`to_record()` for notification and persistence.
"""

from __future__ import annotations

from dataclasses import asdict, dataclass
from typing import Any

from src.daemon.position_store import CloseReason, Side


@dataclass(frozen=True)
class TickEvent:
    symbol: str

    @property
    def kind(self) -> str:
        return type(self).__name__

    def to_record(self) -> dict[str, Any]:
        record = {"event": self.kind}
        for key, val in asdict(self).items():
            record[key] = val.value if isinstance(val, (Side, CloseReason)) else val
        return record


@dataclass(frozen=True)
class Opened(TickEvent):
    side: Side
    entry_price: float
    stop_loss: float
    take_profit: float
    partial_prices: tuple[float, ...]
    size_units: float
    confidence: int
    strength: int
    indicators: tuple[str, ...] = ()


@dataclass(frozen=True)
class PartialHit(TickEvent):
    level: int
    fraction: float
    target_price: float
    price: float
    pnl_percent: float


@dataclass(frozen=True)
class Closed(TickEvent):
    side: Side
    reason: CloseReason
    entry_price: float
    exit_price: float
    pnl_percent: float

    @property
    def is_win(self) -> bool:
        return self.pnl_percent > 0


@dataclass(frozen=True)
class PriceAlert(TickEvent):
    previous_price: float
    price: float
    change_percent: float
    pnl_percent: float


@dataclass(frozen=True)
class StopWarning(TickEvent):
    price: float
    stop_loss: float
    # remaining distance to the stop as a fraction of the initial risk
    distance_fraction: float
    warning_number: int


@dataclass(frozen=True)
class TakeProfitZone(TickEvent):
    price: float
    take_profit: float
    distance_fraction: float
