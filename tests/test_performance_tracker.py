"""
Test Performance Tracker

Tests for incremental per-symbol statistics, daily reset and the journal.
"""

from __future__ import annotations

import json

import pytest

from src.daemon.performance_tracker import PairStatistics, PerformanceTracker


class TestRecord:
    """Incremental statistics."""

    def test_running_means(self):
        tracker = PerformanceTracker()
        tracker.record("BTC", True, 2.0)
        tracker.record("BTC", False, -1.0)
        tracker.record("BTC", True, 4.0)

        stats = tracker.get("BTC")
        assert stats.trade_count == 3
        assert stats.wins == 2
        assert stats.losses == 1
        assert stats.total_pnl_percent == pytest.approx(5.0)
        assert stats.avg_win_percent == pytest.approx(3.0)
        assert stats.avg_loss_percent == pytest.approx(1.0)
        assert stats.win_rate == pytest.approx(200 / 3)

    def test_symbols_independent(self):
        tracker = PerformanceTracker()
        tracker.record("BTC", True, 1.0)
        tracker.record("ETH", False, -2.0)

        assert tracker.get("BTC").wins == 1
        assert tracker.get("ETH").losses == 1
        assert set(tracker.get_all()) == {"BTC", "ETH"}

    def test_unknown_symbol(self):
        assert PerformanceTracker().get("BTC") is None

    def test_get_returns_copy(self):
        tracker = PerformanceTracker()
        tracker.record("BTC", True, 1.0)
        tracker.get("BTC").wins = 99
        assert tracker.get("BTC").wins == 1

    def test_empty_win_rate(self):
        assert PairStatistics("BTC").win_rate == 0.0


class TestDaily:
    """Daily reset and report."""

    def test_reset_clears_daily_but_not_lifetime(self):
        tracker = PerformanceTracker()
        tracker.record("BTC", True, 1.0)
        tracker.record("BTC", False, -1.0)
        tracker.reset_daily()

        assert tracker.get_all() == {}
        assert tracker.lifetime_trades == 2
        assert tracker.overall_win_rate() == pytest.approx(50.0)

    def test_report(self):
        tracker = PerformanceTracker()
        tracker.record("BTC", True, 3.0)
        tracker.record("ETH", False, -2.0)
        tracker.record("SOL", True, 1.0)

        report = tracker.daily_report()
        assert report["total_trades"] == 3
        assert report["total_pnl_percent"] == pytest.approx(2.0)
        assert report["avg_win_rate"] == pytest.approx(200 / 3)
        assert report["best_pair"] == "BTC"
        assert report["worst_pair"] == "ETH"
        assert report["pairs"]["BTC"]["win_rate"] == 100.0

    def test_empty_report(self):
        report = PerformanceTracker().daily_report()
        assert report["total_trades"] == 0
        assert report["best_pair"] is None


class TestJournal:
    def test_appends_jsonl(self, tmp_path):
        path = tmp_path / "journal" / "trades.jsonl"
        tracker = PerformanceTracker(journal_path=path)
        tracker.record("BTC", True, 2.0, {"reason": "TAKE_PROFIT"})
        tracker.record("ETH", False, -1.0)

        lines = [json.loads(line) for line in path.read_text().splitlines()]
        assert [r["symbol"] for r in lines] == ["BTC", "ETH"]
        assert lines[0]["reason"] == "TAKE_PROFIT"
        assert lines[1]["is_win"] is False
