"""
Test Risk Gate

Tests for capacity, daily-loss breaker, trading hours and daily reset.
"""

from __future__ import annotations

from datetime import date, datetime, timezone

import pytest

from src.risk.risk_gate import ProbabilityGate, RiskGate, RiskState, TradingHours

NOON = datetime(2024, 1, 15, 12, 0, tzinfo=timezone.utc)


class TestCanOpen:
    """Shared-state rules."""

    def test_fresh_state_allows(self):
        assert RiskGate().can_open(RiskState(), NOON)

    def test_capacity_ceiling(self):
        risk = RiskState(max_concurrent_positions=2, open_position_count=2)
        decision = RiskGate().check(risk, NOON)
        assert not decision.allowed
        assert "capacity" in decision.reason

    def test_loss_limit_blocks(self):
        risk = RiskState(max_daily_loss_percent=5.0, daily_pnl_percent=-5.0)
        assert not RiskGate().can_open(risk, NOON)

    def test_breaker_survives_winning_close(self):
        gate = RiskGate()
        risk = RiskState(max_daily_loss_percent=5.0, open_position_count=2)

        gate.record_close(risk, -6.0)
        assert risk.breaker_tripped
        assert not gate.can_open(risk, NOON)

        gate.record_close(risk, 3.0)
        assert risk.daily_pnl_percent == pytest.approx(-3.0)
        assert not gate.can_open(risk, NOON)

    def test_breaker_cleared_by_daily_reset(self):
        gate = RiskGate()
        risk = RiskState(last_reset_date=date(2024, 1, 15), open_position_count=1)
        gate.record_close(risk, -6.0)

        assert gate.reset_if_new_day(risk, datetime(2024, 1, 16, 0, 5, tzinfo=timezone.utc))
        assert risk.daily_pnl_percent == 0.0
        assert not risk.breaker_tripped
        assert gate.can_open(risk, NOON)

    def test_daily_trade_limit(self):
        gate = RiskGate(max_daily_trades=2)
        risk = RiskState(max_concurrent_positions=5)
        gate.record_open(risk)
        gate.record_open(risk)

        decision = gate.check(risk, NOON)
        assert not decision.allowed
        assert "trade limit" in decision.reason

    def test_record_open_and_close_track_count(self):
        gate = RiskGate()
        risk = RiskState()
        gate.record_open(risk)
        assert risk.open_position_count == 1
        assert risk.available_slots == 2
        gate.record_close(risk, 1.0)
        assert risk.open_position_count == 0


class TestTradingHours:
    """Trading window in the configured zone."""

    def test_window_in_zone(self):
        gate = RiskGate(timezone="America/New_York", trading_hours=TradingHours(9, 20))

        # 12:00 UTC = 07:00 New York
        assert not gate.can_open(RiskState(), NOON)
        # 15:00 UTC = 10:00 New York
        assert gate.can_open(RiskState(), datetime(2024, 1, 15, 15, 0, tzinfo=timezone.utc))

    def test_end_hour_inclusive(self):
        hours = TradingHours(9, 20)
        assert hours.contains(9)
        assert hours.contains(20)
        assert not hours.contains(21)

    def test_wraps_midnight(self):
        hours = TradingHours(22, 2)
        assert hours.contains(23)
        assert hours.contains(1)
        assert not hours.contains(12)

    def test_invalid_hour(self):
        with pytest.raises(ValueError):
            TradingHours(9, 24)


class TestDailyReset:
    """Calendar-day boundary in the configured zone."""

    def test_first_call_only_stamps(self):
        risk = RiskState(daily_pnl_percent=-2.0)
        assert not RiskGate().reset_if_new_day(risk, NOON)
        assert risk.last_reset_date == date(2024, 1, 15)
        assert risk.daily_pnl_percent == -2.0

    def test_resets_once_per_day(self):
        gate = RiskGate()
        risk = RiskState(last_reset_date=date(2024, 1, 15), daily_pnl_percent=-2.0)

        next_day = datetime(2024, 1, 16, 1, 0, tzinfo=timezone.utc)
        assert gate.reset_if_new_day(risk, next_day)
        risk.daily_pnl_percent = -1.0
        assert not gate.reset_if_new_day(risk, next_day.replace(hour=23))
        assert risk.daily_pnl_percent == -1.0

    def test_boundary_follows_zone(self):
        gate = RiskGate(timezone="America/New_York")
        risk = RiskState()
        gate.reset_if_new_day(risk, datetime(2024, 1, 15, 23, 30, tzinfo=timezone.utc))

        # 00:30 UTC on the 16th is still the 15th in New York
        assert not gate.reset_if_new_day(
            risk, datetime(2024, 1, 16, 0, 30, tzinfo=timezone.utc)
        )
        assert gate.reset_if_new_day(
            risk, datetime(2024, 1, 16, 6, 0, tzinfo=timezone.utc)
        )


class TestFilters:
    """Per-candidate filters."""

    def test_volatility_disabled_by_default(self):
        assert RiskGate().accepts_volatility(0.0, 100.0)

    def test_volatility_floor(self):
        gate = RiskGate(min_atr_percent=0.5)
        assert not gate.accepts_volatility(0.4, 100.0)
        assert gate.accepts_volatility(0.5, 100.0)

    def test_probability_gate_min_trades(self):
        gate = ProbabilityGate(pass_probability=0.0, min_trades=10, seed=1)
        assert gate.allow(win_rate=0.0, trade_count=9)
        assert not gate.allow(win_rate=0.0, trade_count=10)

    def test_probability_gate_inactive_with_good_win_rate(self):
        gate = ProbabilityGate(pass_probability=0.0, seed=1)
        assert gate.allow(win_rate=75.0, trade_count=50)

    def test_probability_gate_extremes(self):
        assert not ProbabilityGate(pass_probability=0.0, seed=1).allow(40.0, 50)
        assert ProbabilityGate(pass_probability=1.0, seed=1).allow(40.0, 50)

    def test_probability_gate_reproducible(self):
        first = ProbabilityGate(seed=42)
        second = ProbabilityGate(seed=42)
        draws_a = [first.allow(40.0, 50) for _ in range(20)]
        draws_b = [second.allow(40.0, 50) for _ in range(20)]
        assert draws_a == draws_b

    def test_gate_without_probability_gate(self):
        assert RiskGate().passes_probability_gate(0.0, 100)
