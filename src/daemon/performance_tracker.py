"""
Performance Tracker

Per-symbol trade statistics with O(1) incremental updates, a daily report,
and an optional append-only JSONL trade journal.
"""

from __future__ import annotations

import json
import logging
import threading
from dataclasses import asdict, dataclass, replace
from datetime import datetime
from pathlib import Path
from typing import Any

logger = logging.getLogger(__name__)


@dataclass
class PairStatistics:
    """
    Running statistics for one symbol.

    avg_loss_percent is stored as a positive magnitude.
    """
    symbol: str
    trade_count: int = 0
    wins: int = 0
    losses: int = 0
    total_pnl_percent: float = 0.0
    avg_win_percent: float = 0.0
    avg_loss_percent: float = 0.0

    @property
    def win_rate(self) -> float:
        if self.trade_count == 0:
            return 0.0
        return self.wins / self.trade_count * 100

    def update(self, is_win: bool, pnl_percent: float) -> None:
        self.trade_count += 1
        self.total_pnl_percent += pnl_percent
        if is_win:
            self.wins += 1
            self.avg_win_percent += (pnl_percent - self.avg_win_percent) / self.wins
        else:
            self.losses += 1
            self.avg_loss_percent += (abs(pnl_percent) - self.avg_loss_percent) / self.losses

    def to_record(self) -> dict[str, Any]:
        data = asdict(self)
        data["win_rate"] = self.win_rate
        return data


class PerformanceTracker:
    """
    Track closed-trade performance per symbol.

    Daily statistics are cleared by reset_daily(); lifetime win/loss counts
    survive it and feed overall_win_rate().
    """

    def __init__(self, journal_path: Path | str | None = None):
        self._stats: dict[str, PairStatistics] = {}
        self._lifetime_trades = 0
        self._lifetime_wins = 0
        self._lock = threading.Lock()
        self._journal = Path(journal_path) if journal_path else None

    def record(
        self,
        symbol: str,
        is_win: bool,
        pnl_percent: float,
        details: dict[str, Any] | None = None,
    ) -> None:
        """
        Record one closed trade.

        Args:
            symbol: Instrument
            is_win: Win flag (the engine passes pnl_percent > 0)
            pnl_percent: Realized PnL in percent
            details: Extra fields written to the journal line
        """
        with self._lock:
            stats = self._stats.setdefault(symbol, PairStatistics(symbol))
            stats.update(is_win, pnl_percent)
            self._lifetime_trades += 1
            if is_win:
                self._lifetime_wins += 1

        if self._journal is not None:
            self._append_journal({
                "symbol": symbol,
                "is_win": is_win,
                "pnl_percent": pnl_percent,
                "recorded_at": datetime.now().isoformat(),
                **(details or {}),
            })

    def _append_journal(self, record: dict[str, Any]) -> None:
        try:
            self._journal.parent.mkdir(parents=True, exist_ok=True)
            with open(self._journal, "a") as f:
                f.write(json.dumps(record, default=str) + "\n")
        except OSError as e:
            logger.error(f"Failed to append trade journal: {e}")

    def reset_daily(self) -> None:
        with self._lock:
            self._stats.clear()
        logger.info("[PERF] Daily statistics cleared")

    def get(self, symbol: str) -> PairStatistics | None:
        with self._lock:
            stats = self._stats.get(symbol)
            return replace(stats) if stats else None

    def get_all(self) -> dict[str, PairStatistics]:
        with self._lock:
            return {s: replace(st) for s, st in self._stats.items()}

    @property
    def lifetime_trades(self) -> int:
        return self._lifetime_trades

    def overall_win_rate(self) -> float:
        """Win rate in percent over all trades since start (0.0 if none)."""
        with self._lock:
            if self._lifetime_trades == 0:
                return 0.0
            return self._lifetime_wins / self._lifetime_trades * 100

    def daily_report(self) -> dict[str, Any]:
        """
        Summarize today's statistics.

        Returns:
            {"total_trades", "total_pnl_percent", "avg_win_rate",
             "best_pair", "worst_pair", "pairs"}; best/worst by total PnL,
            None when nothing was traded.
        """
        stats = self.get_all()
        if not stats:
            return {
                "total_trades": 0,
                "total_pnl_percent": 0.0,
                "avg_win_rate": 0.0,
                "best_pair": None,
                "worst_pair": None,
                "pairs": {},
            }

        ranked = sorted(stats.values(), key=lambda s: s.total_pnl_percent)
        return {
            "total_trades": sum(s.trade_count for s in stats.values()),
            "total_pnl_percent": sum(s.total_pnl_percent for s in stats.values()),
            "avg_win_rate": sum(s.win_rate for s in stats.values()) / len(stats),
            "best_pair": ranked[-1].symbol,
            "worst_pair": ranked[0].symbol,
            "pairs": {s: st.to_record() for s, st in stats.items()},
        }
