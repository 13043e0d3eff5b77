"""
Risk Gate

Decides whether a new position may be opened.

Checks, in order:
    1. Capacity ceiling (open positions vs max concurrent)
    2. Daily-loss circuit breaker (one-way until the next daily reset)
    3. Daily trade-count ceiling (optional)
    4. Trading-hours window in the configured time zone (optional)

Per-candidate filters (volatility, probability gate) are separate calls
because they depend on the candidate, not on the shared RiskState.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, replace
from datetime import date, datetime
from zoneinfo import ZoneInfo

import numpy as np

logger = logging.getLogger(__name__)


@dataclass
class RiskState:
    """
    Process-wide risk counters, reset once per calendar day.

    open_position_count is written by the position manager on every open and
    close; daily_pnl_percent by record_close().
    """
    max_concurrent_positions: int = 3
    max_daily_loss_percent: float = 5.0
    open_position_count: int = 0
    daily_pnl_percent: float = 0.0
    last_reset_date: date | None = None
    breaker_tripped: bool = False
    daily_trade_count: int = 0

    @property
    def available_slots(self) -> int:
        return max(0, self.max_concurrent_positions - self.open_position_count)

    def snapshot(self) -> "RiskState":
        return replace(self)


@dataclass(frozen=True)
class TradingHours:
    """
    Hour window, inclusive on both ends (9..20 allows 09:00-20:59).

    start_hour > end_hour wraps past midnight.
    """
    start_hour: int
    end_hour: int

    def __post_init__(self):
        for hour in (self.start_hour, self.end_hour):
            if not 0 <= hour <= 23:
                raise ValueError(f"Trading hour must be within 0..23, got {hour}")

    def contains(self, hour: int) -> bool:
        if self.start_hour <= self.end_hour:
            return self.start_hour <= hour <= self.end_hour
        return hour >= self.start_hour or hour <= self.end_hour


@dataclass(frozen=True)
class GateDecision:
    """Outcome of RiskGate.check()."""
    allowed: bool
    reason: str = ""


class ProbabilityGate:
    """
    Seeded throttle applied when recent performance is poor.

    Once at least `min_trades` trades are tracked and the win rate falls below
    `win_rate_floor`, each candidate open passes with `pass_probability`.
    The generator is seeded so runs are reproducible.
    """

    def __init__(
        self,
        win_rate_floor: float = 60.0,
        pass_probability: float = 0.5,
        min_trades: int = 10,
        seed: int | None = None,
    ):
        if not 0.0 <= pass_probability <= 1.0:
            raise ValueError("pass_probability must be within [0, 1]")
        self.win_rate_floor = win_rate_floor
        self.pass_probability = pass_probability
        self.min_trades = min_trades
        self._rng = np.random.default_rng(seed)

    def allow(self, win_rate: float, trade_count: int) -> bool:
        if trade_count < self.min_trades or win_rate >= self.win_rate_floor:
            return True
        passed = bool(self._rng.random() < self.pass_probability)
        logger.warning(
            f"Low win rate {win_rate:.1f}% over {trade_count} trades, "
            f"throttled open {'passed' if passed else 'blocked'}"
        )
        return passed


class RiskGate:
    """
    Policy for opening new positions.

    The gate never mutates positions; it only reads RiskState and records
    closes and opens into it.
    """

    def __init__(
        self,
        timezone: str = "UTC",
        trading_hours: TradingHours | None = None,
        max_daily_trades: int | None = None,
        min_atr_percent: float | None = None,
        probability_gate: ProbabilityGate | None = None,
    ):
        self.tz = ZoneInfo(timezone)
        self.trading_hours = trading_hours
        self.max_daily_trades = max_daily_trades
        self.min_atr_percent = min_atr_percent
        self.probability_gate = probability_gate

    # ------------------------------------------------------------------
    # Time helpers
    # ------------------------------------------------------------------

    def local_time(self, now: datetime) -> datetime:
        """Convert to the configured zone; naive datetimes are taken as local."""
        if now.tzinfo is None:
            return now.replace(tzinfo=self.tz)
        return now.astimezone(self.tz)

    def local_date(self, now: datetime) -> date:
        return self.local_time(now).date()

    # ------------------------------------------------------------------
    # Open decision
    # ------------------------------------------------------------------

    def check(self, risk: RiskState, now: datetime) -> GateDecision:
        """Evaluate shared-state rules and report the first failing one."""
        if risk.open_position_count >= risk.max_concurrent_positions:
            return GateDecision(
                False,
                f"capacity {risk.open_position_count}/{risk.max_concurrent_positions}",
            )

        if risk.breaker_tripped or risk.daily_pnl_percent <= -risk.max_daily_loss_percent:
            return GateDecision(
                False,
                f"daily loss breaker ({risk.daily_pnl_percent:.2f}% "
                f"<= -{risk.max_daily_loss_percent:.2f}%)",
            )

        if self.max_daily_trades is not None and risk.daily_trade_count >= self.max_daily_trades:
            return GateDecision(False, f"daily trade limit {self.max_daily_trades}")

        if self.trading_hours is not None:
            hour = self.local_time(now).hour
            if not self.trading_hours.contains(hour):
                return GateDecision(False, f"outside trading hours (hour={hour})")

        return GateDecision(True)

    def can_open(self, risk: RiskState, now: datetime) -> bool:
        return self.check(risk, now).allowed

    def accepts_volatility(self, atr: float, price: float) -> bool:
        """ATR as a percent of price must reach min_atr_percent, if configured."""
        if self.min_atr_percent is None:
            return True
        if price <= 0:
            return False
        return atr / price * 100 >= self.min_atr_percent

    def passes_probability_gate(self, win_rate: float, trade_count: int) -> bool:
        if self.probability_gate is None:
            return True
        return self.probability_gate.allow(win_rate, trade_count)

    # ------------------------------------------------------------------
    # State updates
    # ------------------------------------------------------------------

    def record_open(self, risk: RiskState) -> None:
        risk.open_position_count += 1
        risk.daily_trade_count += 1

    def record_close(self, risk: RiskState, pnl_percent: float) -> None:
        """
        Accumulate a closed position's PnL into the daily total.

        Must be called exactly once per close. Trips the breaker when the daily
        total reaches the loss limit; a later winning close does not reset it.
        """
        risk.open_position_count = max(0, risk.open_position_count - 1)
        risk.daily_pnl_percent += pnl_percent

        if (
            not risk.breaker_tripped
            and risk.daily_pnl_percent <= -risk.max_daily_loss_percent
        ):
            risk.breaker_tripped = True
            logger.warning(
                f"Daily loss limit reached ({risk.daily_pnl_percent:.2f}%), "
                f"blocking new positions until the daily reset"
            )

    def reset_if_new_day(self, risk: RiskState, now: datetime) -> bool:
        """
        Reset daily counters when `now` falls on a new local calendar day.

        Returns:
            True if a reset happened. The first call only stamps the date.
        """
        today = self.local_date(now)
        if risk.last_reset_date is None:
            risk.last_reset_date = today
            return False
        if today == risk.last_reset_date:
            return False

        logger.info(
            f"[RISK] Daily state reset ({risk.last_reset_date} -> {today}), "
            f"previous daily PnL {risk.daily_pnl_percent:+.2f}%"
        )
        risk.daily_pnl_percent = 0.0
        risk.breaker_tripped = False
        risk.daily_trade_count = 0
        risk.last_reset_date = today
        return True
