"""
Position Store

Position model (entry, SL/TP levels, partial targets) and a JSON snapshot
store so open positions survive daemon restarts.
"""

from __future__ import annotations

import json
import logging
from dataclasses import asdict, dataclass, field
from datetime import datetime
from enum import Enum
from pathlib import Path
from typing import Any

logger = logging.getLogger(__name__)


class Side(str, Enum):
    LONG = "LONG"
    SHORT = "SHORT"


class PositionStatus(str, Enum):
    OPEN = "OPEN"
    CLOSED = "CLOSED"


class CloseReason(str, Enum):
    STOP_LOSS = "STOP_LOSS"
    TAKE_PROFIT = "TAKE_PROFIT"
    MANUAL_CLOSE = "MANUAL_CLOSE"


@dataclass
class PartialTarget:
    """Intermediate profit level; `hit` never goes back to False."""
    level: int
    fraction: float
    price: float
    hit: bool = False


@dataclass
class Position:
    """A managed position with absolute SL/TP price levels."""
    symbol: str
    side: Side
    entry_price: float
    stop_loss: float
    take_profit: float
    partial_targets: list[PartialTarget]
    size_units: float
    opened_at: datetime
    last_alert_price: float
    # |entry - stop| at open; alert distances are measured against it
    risk_distance: float
    current_price: float = 0.0
    sl_warnings_sent: int = 0
    tp_alerts_sent: int = 0
    status: PositionStatus = PositionStatus.OPEN
    close_reason: CloseReason | None = None
    pnl_percent: float = 0.0
    exit_price: float | None = None
    closed_at: datetime | None = None
    confidence: int = 0
    strength: int = 0
    indicators: list[str] = field(default_factory=list)

    @property
    def is_open(self) -> bool:
        return self.status is PositionStatus.OPEN

    def pnl_at(self, price: float) -> float:
        """Unrealized PnL percent at `price`, sign-adjusted for the side."""
        change = (price - self.entry_price) / self.entry_price * 100
        return change if self.side is Side.LONG else -change

    def to_record(self) -> dict[str, Any]:
        data = asdict(self)
        data["side"] = self.side.value
        data["status"] = self.status.value
        data["close_reason"] = self.close_reason.value if self.close_reason else None
        data["opened_at"] = self.opened_at.isoformat()
        data["closed_at"] = self.closed_at.isoformat() if self.closed_at else None
        return data

    @classmethod
    def from_record(cls, data: dict[str, Any]) -> "Position":
        data = dict(data)
        data["side"] = Side(data["side"])
        data["status"] = PositionStatus(data.get("status", "OPEN"))
        if data.get("close_reason"):
            data["close_reason"] = CloseReason(data["close_reason"])
        data["opened_at"] = datetime.fromisoformat(data["opened_at"])
        if data.get("closed_at"):
            data["closed_at"] = datetime.fromisoformat(data["closed_at"])
        data["partial_targets"] = [
            PartialTarget(**t) for t in data.get("partial_targets", [])
        ]
        return cls(**data)


class PositionStore:
    """
    Persist open positions to a JSON file.

    Writes are atomic (write tmp, then rename). Load failures are logged and
    yield an empty store.
    """

    def __init__(self, path: Path | str):
        self.path = Path(path)

    def load(self) -> list[Position]:
        """Load positions from the JSON file."""
        if not self.path.exists():
            return []
        try:
            with open(self.path) as f:
                data = json.load(f)
            positions = [Position.from_record(rec) for rec in data.values()]
            logger.info(f"Loaded {len(positions)} stored positions")
            return positions
        except (OSError, ValueError, KeyError, TypeError) as e:
            logger.warning(f"Failed to load position store: {e}")
            return []

    def save(self, positions: list[Position]) -> None:
        """Save positions to JSON file atomically (write tmp → rename)."""
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            data = {p.symbol: p.to_record() for p in positions}
            tmp_path = self.path.with_suffix(".tmp")
            with open(tmp_path, "w") as f:
                json.dump(data, f, indent=2)
            tmp_path.replace(self.path)
        except OSError as e:
            logger.error(f"Failed to save position store: {e}")
