"""
Position Lifecycle Manager

Owns every open position and moves it through OPEN -> CLOSED.

Per tick, for each open symbol:
    1. Recompute unrealized PnL at the current price
    2. Stop-loss check (before take-profit)
    3. Take-profit check
    4. Partial targets, nearest first; each fires once
    5. Alert side channel (price move, stop proximity, target zone)

close() is the only path to CLOSED. Every close updates RiskState and the
PerformanceTracker exactly once.
"""

from __future__ import annotations

import copy
import logging
import threading
from collections import deque
from collections.abc import Mapping
from dataclasses import dataclass
from datetime import datetime, timezone
from enum import Enum

from src.daemon.config import AlertConfig, PositionConfig
from src.daemon.events import (
    Closed,
    Opened,
    PartialHit,
    PriceAlert,
    StopWarning,
    TakeProfitZone,
    TickEvent,
)
from src.daemon.performance_tracker import PerformanceTracker
from src.daemon.position_store import (
    CloseReason,
    PartialTarget,
    Position,
    PositionStatus,
    PositionStore,
    Side,
)
from src.daemon.signal_aggregator import Direction, SignalDecision
from src.risk.risk_gate import RiskGate, RiskState

logger = logging.getLogger(__name__)


class PositionExistsError(Exception):
    """An OPEN position already exists for the symbol."""


class CapacityError(Exception):
    """The manager already holds its maximum number of open positions."""


@dataclass(frozen=True)
class AlreadyClosed:
    """close() on a symbol with no open position."""
    symbol: str

    def to_record(self) -> dict[str, str]:
        return {"event": "AlreadyClosed", "symbol": self.symbol}


class TickAction(str, Enum):
    NO_ACTION = "NO_ACTION"
    PARTIAL_HIT = "PARTIAL_HIT"
    CLOSED = "CLOSED"


@dataclass(frozen=True)
class TickResult:
    """Outcome of one tick for one symbol."""
    symbol: str
    action: TickAction = TickAction.NO_ACTION
    # highest partial level hit on this tick
    level: int | None = None
    reason: CloseReason | None = None
    events: tuple[TickEvent, ...] = ()


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class PositionLifecycleManager:
    """
    Open, tick and close positions.

    All mutations of the position map and RiskState happen under one
    re-entrant lock. Reads return copies.
    """

    def __init__(
        self,
        config: PositionConfig | None = None,
        alerts: AlertConfig | None = None,
        risk_state: RiskState | None = None,
        risk_gate: RiskGate | None = None,
        tracker: PerformanceTracker | None = None,
        store: PositionStore | None = None,
    ):
        self.config = config or PositionConfig()
        self.alerts = alerts or AlertConfig()
        self.risk_state = risk_state or RiskState()
        self.risk_gate = risk_gate or RiskGate()
        self.tracker = tracker
        self.store = store

        self._positions: dict[str, Position] = {}
        self._history: deque[Position] = deque(maxlen=self.config.history_size)
        self._lock = threading.RLock()

    # ------------------------------------------------------------------
    # Open
    # ------------------------------------------------------------------

    def open(
        self,
        symbol: str,
        decision: SignalDecision,
        current_price: float,
        atr: float,
        now: datetime | None = None,
    ) -> Position:
        """
        Open a position from an accepted decision.

        Args:
            symbol: Instrument
            decision: LONG or SHORT decision
            current_price: Entry price
            atr: Volatility estimate; stop/target distance = atr_multiplier * atr

        Returns:
            Copy of the new position

        Raises:
            PositionExistsError: symbol already has an OPEN position
            CapacityError: open count is at max_concurrent_positions
            ValueError: NONE decision or non-positive price/ATR
        """
        if decision.direction is Direction.NONE:
            raise ValueError(f"Cannot open {symbol} on a NONE decision")
        if current_price <= 0 or atr <= 0:
            raise ValueError(f"Invalid price/ATR for {symbol}: {current_price}/{atr}")

        side = Side(decision.direction.value)
        sign = 1 if side is Side.LONG else -1
        distance = self.config.atr_multiplier * atr

        with self._lock:
            if symbol in self._positions:
                raise PositionExistsError(f"{symbol} already has an open position")
            if len(self._positions) >= self.risk_state.max_concurrent_positions:
                raise CapacityError(
                    f"{len(self._positions)}/{self.risk_state.max_concurrent_positions} "
                    f"positions open"
                )

            if self.config.amount_per_pair is not None:
                size = self.config.amount_per_pair / current_price
            else:
                size = self.config.default_size_units

            pos = Position(
                symbol=symbol,
                side=side,
                entry_price=current_price,
                stop_loss=current_price - sign * distance,
                take_profit=current_price + sign * distance,
                partial_targets=[
                    PartialTarget(level=i, fraction=f, price=current_price + sign * f * distance)
                    for i, f in enumerate(self.config.partial_fractions, start=1)
                ],
                size_units=size,
                opened_at=now or _utcnow(),
                last_alert_price=current_price,
                risk_distance=distance,
                current_price=current_price,
                confidence=decision.confidence,
                strength=decision.strength,
                indicators=[r.name for r in decision.contributing_indicators],
            )
            self._positions[symbol] = pos
            self.risk_gate.record_open(self.risk_state)
            self._check_invariants()
            self._persist()

            logger.info(
                f"[OPEN] {symbol} {side.value} @ {current_price:.4f} "
                f"SL={pos.stop_loss:.4f} TP={pos.take_profit:.4f} "
                f"(confidence {decision.confidence}%, {decision.strength} indicators)"
            )
            return copy.deepcopy(pos)

    @staticmethod
    def opened_event(pos: Position) -> Opened:
        return Opened(
            symbol=pos.symbol,
            side=pos.side,
            entry_price=pos.entry_price,
            stop_loss=pos.stop_loss,
            take_profit=pos.take_profit,
            partial_prices=tuple(t.price for t in pos.partial_targets),
            size_units=pos.size_units,
            confidence=pos.confidence,
            strength=pos.strength,
            indicators=tuple(pos.indicators),
        )

    # ------------------------------------------------------------------
    # Tick
    # ------------------------------------------------------------------

    def tick(self, symbol: str, price: float, now: datetime | None = None) -> TickResult:
        """
        Evaluate one price update for one symbol.

        A symbol without an OPEN position yields NO_ACTION; closed positions
        are never touched.
        """
        with self._lock:
            pos = self._positions.get(symbol)
            if pos is None:
                return TickResult(symbol)

            pos.current_price = price
            pos.pnl_percent = pos.pnl_at(price)
            long = pos.side is Side.LONG

            if (price <= pos.stop_loss) if long else (price >= pos.stop_loss):
                closed = self.close(symbol, CloseReason.STOP_LOSS, price, now)
                return TickResult(symbol, TickAction.CLOSED, reason=CloseReason.STOP_LOSS,
                                  events=(closed,))

            if (price >= pos.take_profit) if long else (price <= pos.take_profit):
                closed = self.close(symbol, CloseReason.TAKE_PROFIT, price, now)
                return TickResult(symbol, TickAction.CLOSED, reason=CloseReason.TAKE_PROFIT,
                                  events=(closed,))

            events: list[TickEvent] = []
            for target in pos.partial_targets:
                if target.hit:
                    continue
                crossed = price >= target.price if long else price <= target.price
                if not crossed:
                    # targets are ordered by distance from entry
                    break
                target.hit = True
                events.append(PartialHit(
                    symbol=symbol,
                    level=target.level,
                    fraction=target.fraction,
                    target_price=target.price,
                    price=price,
                    pnl_percent=pos.pnl_percent,
                ))
                logger.info(
                    f"[PARTIAL] {symbol} TP{target.level} ({target.fraction:.0%}) "
                    f"hit @ {price:.4f}"
                )

            level = events[-1].level if events else None
            events.extend(self._alerts(pos, price))

            if events:
                self._persist()

            action = TickAction.PARTIAL_HIT if level is not None else TickAction.NO_ACTION
            return TickResult(symbol, action, level=level, events=tuple(events))

    def _alerts(self, pos: Position, price: float) -> list[TickEvent]:
        cfg = self.alerts
        events: list[TickEvent] = []

        if cfg.price_alert_percent is not None and pos.last_alert_price > 0:
            change = abs(price - pos.last_alert_price) / pos.last_alert_price * 100
            if change > cfg.price_alert_percent:
                events.append(PriceAlert(
                    symbol=pos.symbol,
                    previous_price=pos.last_alert_price,
                    price=price,
                    change_percent=change,
                    pnl_percent=pos.pnl_percent,
                ))
                pos.last_alert_price = price

        if cfg.sl_warning_fraction is not None and pos.sl_warnings_sent < cfg.max_sl_warnings:
            remaining = abs(price - pos.stop_loss) / pos.risk_distance
            if remaining < cfg.sl_warning_fraction:
                pos.sl_warnings_sent += 1
                events.append(StopWarning(
                    symbol=pos.symbol,
                    price=price,
                    stop_loss=pos.stop_loss,
                    distance_fraction=remaining,
                    warning_number=pos.sl_warnings_sent,
                ))
                logger.warning(f"[ALERT] {pos.symbol} approaching stop-loss @ {price:.4f}")

        if cfg.tp_zone_fraction is not None and pos.tp_alerts_sent < cfg.max_tp_alerts:
            remaining = abs(price - pos.take_profit) / abs(pos.take_profit - pos.entry_price)
            if remaining < cfg.tp_zone_fraction:
                pos.tp_alerts_sent += 1
                events.append(TakeProfitZone(
                    symbol=pos.symbol,
                    price=price,
                    take_profit=pos.take_profit,
                    distance_fraction=remaining,
                ))

        return events

    def check_all(
        self,
        prices: Mapping[str, float],
        now: datetime | None = None,
    ) -> list[TickResult]:
        """
        Tick every open symbol that has a price.

        A failure on one symbol is logged and does not stop the others.
        """
        results = []
        for symbol in self.open_symbols():
            price = prices.get(symbol)
            if price is None:
                logger.debug(f"No price for {symbol}, skipping position check")
                continue
            try:
                results.append(self.tick(symbol, price, now))
            except Exception as e:
                logger.error(f"Position check error for {symbol}: {e}", exc_info=True)
        return results

    # ------------------------------------------------------------------
    # Close / adjust
    # ------------------------------------------------------------------

    def close(
        self,
        symbol: str,
        reason: CloseReason,
        exit_price: float | None = None,
        now: datetime | None = None,
    ) -> Closed | AlreadyClosed:
        """
        Close an open position.

        Idempotent: a symbol without an OPEN position returns AlreadyClosed
        and leaves RiskState and the tracker unchanged.
        """
        with self._lock:
            pos = self._positions.pop(symbol, None)
            if pos is None:
                return AlreadyClosed(symbol)

            price = exit_price if exit_price is not None else pos.current_price
            pos.status = PositionStatus.CLOSED
            pos.close_reason = reason
            pos.exit_price = price
            pos.current_price = price
            pos.pnl_percent = pos.pnl_at(price)
            pos.closed_at = now or _utcnow()
            self._history.append(pos)

            self.risk_gate.record_close(self.risk_state, pos.pnl_percent)
            event = Closed(
                symbol=symbol,
                side=pos.side,
                reason=reason,
                entry_price=pos.entry_price,
                exit_price=price,
                pnl_percent=pos.pnl_percent,
            )
            if self.tracker is not None:
                self.tracker.record(symbol, event.is_win, pos.pnl_percent, event.to_record())

            self._check_invariants()
            self._persist()

            logger.info(
                f"[CLOSE] {symbol} {reason.value} @ {price:.4f} "
                f"(entry {pos.entry_price:.4f}, pnl {pos.pnl_percent:+.2f}%)"
            )
            return event

    def trail_stop_to_breakeven(self, symbol: str) -> bool:
        """
        Move the stop to the entry price while the position is in profit.

        Returns:
            True if the stop moved.
        """
        with self._lock:
            pos = self._positions.get(symbol)
            if pos is None or pos.pnl_percent <= 0 or pos.stop_loss == pos.entry_price:
                return False
            old = pos.stop_loss
            pos.stop_loss = pos.entry_price
            self._persist()
            logger.info(f"[TRAIL] {symbol} stop {old:.4f} -> {pos.entry_price:.4f} (breakeven)")
            return True

    # ------------------------------------------------------------------
    # Reads
    # ------------------------------------------------------------------

    @property
    def lock(self) -> threading.RLock:
        return self._lock

    def open_symbols(self) -> list[str]:
        with self._lock:
            return list(self._positions)

    def get_position(self, symbol: str) -> Position | None:
        with self._lock:
            pos = self._positions.get(symbol)
            return copy.deepcopy(pos) if pos else None

    def get_open_positions(self) -> list[Position]:
        with self._lock:
            return [copy.deepcopy(p) for p in self._positions.values()]

    def get_closed_positions(self) -> list[Position]:
        with self._lock:
            return [copy.deepcopy(p) for p in self._history]

    # ------------------------------------------------------------------
    # Persistence
    # ------------------------------------------------------------------

    def restore(self) -> int:
        """
        Reload open positions from the store.

        Restored positions count toward capacity but not toward today's
        trade count.
        """
        if self.store is None:
            return 0
        with self._lock:
            restored = 0
            for pos in self.store.load():
                if pos.status is not PositionStatus.OPEN or pos.symbol in self._positions:
                    continue
                self._positions[pos.symbol] = pos
                restored += 1
            self.risk_state.open_position_count = len(self._positions)
            logger.info(f"Restored {restored} open positions")
            return restored

    def _persist(self) -> None:
        if self.store is not None:
            self.store.save(list(self._positions.values()))

    def _check_invariants(self) -> None:
        assert self.risk_state.open_position_count == len(self._positions), (
            f"open count {self.risk_state.open_position_count} != "
            f"{len(self._positions)} positions"
        )
        assert all(p.is_open for p in self._positions.values())
