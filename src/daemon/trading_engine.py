"""
Trading Engine

One tick of the signal engine:
    1. Daily-boundary roll (RiskState + PerformanceTracker)
    2. Parallel price fetch; tick every open position
    3. If the risk gate allows, parallel bar fetch for symbols without a position
    4. Indicator panel -> signal aggregator -> position open

The engine has no timer of its own; SignalDaemon (or a test) drives it.
"""

from __future__ import annotations

import logging
import threading
from collections.abc import Callable, Iterable
from concurrent.futures import ThreadPoolExecutor, as_completed
from concurrent.futures import TimeoutError as FuturesTimeoutError
from datetime import datetime, timezone
from typing import Any, TypeVar

from src.daemon.config import EngineConfig
from src.daemon.events import Closed, Opened, TickEvent
from src.daemon.performance_tracker import PairStatistics, PerformanceTracker
from src.daemon.position_manager import (
    AlreadyClosed,
    CapacityError,
    PositionExistsError,
    PositionLifecycleManager,
)
from src.daemon.position_store import CloseReason, Position, PositionStore
from src.daemon.signal_aggregator import SignalAggregator
from src.execution.market_data import MarketDataError, MarketDataSource
from src.indicators import Bar, IndicatorPanel, InsufficientDataError, latest_atr
from src.risk.risk_gate import RiskState

logger = logging.getLogger(__name__)

T = TypeVar("T")


class TradingEngine:
    """
    Signal aggregation engine plus position lifecycle and risk control.

    Ticks never overlap: evaluate_tick() returns [] immediately if another
    tick is still running.
    """

    def __init__(
        self,
        config: EngineConfig,
        market_data: MarketDataSource,
        panel: IndicatorPanel | None = None,
        tracker: PerformanceTracker | None = None,
    ):
        self.config = config
        self.market_data = market_data
        self.panel = panel or IndicatorPanel.from_config(config.indicators)
        self.aggregator = SignalAggregator(config.min_agreement, config.min_confidence)
        self.risk_gate = config.risk.build_gate()
        self.tracker = tracker or PerformanceTracker(config.journal_path)

        store = PositionStore(config.state_path) if config.state_path else None
        self.positions = PositionLifecycleManager(
            config=config.position,
            alerts=config.alerts,
            risk_state=config.risk.new_state(),
            risk_gate=self.risk_gate,
            tracker=self.tracker,
            store=store,
        )
        self.positions.restore()

        self._tick_guard = threading.Lock()
        self._pending_report: dict[str, Any] | None = None

        required = max(self.panel.min_bars, config.risk.atr_period + 1)
        if config.bar_limit < required:
            logger.warning(
                f"bar_limit={config.bar_limit} is below the {required} bars the "
                f"panel needs; no position will ever open"
            )

    @property
    def risk_state(self) -> RiskState:
        return self.positions.risk_state

    # ------------------------------------------------------------------
    # Tick
    # ------------------------------------------------------------------

    def evaluate_tick(self, now: datetime | None = None) -> list[TickEvent]:
        """
        Run one tick.

        Returns:
            Events produced by this tick, in order: position events first,
            then opens.
        """
        if not self._tick_guard.acquire(blocking=False):
            logger.warning("Previous tick still running, skipping")
            return []

        try:
            now = now or datetime.now(timezone.utc)
            self._roll_daily(now)

            events: list[TickEvent] = []
            prices = self._fetch_parallel(
                self.market_data.fetch_current_price, self.config.symbols
            )

            for result in self.positions.check_all(prices, now):
                events.extend(result.events)

            held = set(self.positions.open_symbols())
            candidates = [s for s in self.config.symbols if s not in held]
            if not candidates:
                return events

            gate = self.risk_gate.check(self.risk_state, now)
            if not gate.allowed:
                logger.debug(f"New positions blocked: {gate.reason}")
                return events

            bars = self._fetch_parallel(
                lambda s: self.market_data.fetch_bars(
                    s, self.config.timeframe, self.config.bar_limit
                ),
                candidates,
            )
            for symbol in candidates:
                if symbol not in bars:
                    continue
                if not self.risk_gate.can_open(self.risk_state, now):
                    break
                try:
                    opened = self._evaluate_candidate(
                        symbol, bars[symbol], prices.get(symbol), now
                    )
                except Exception as e:
                    logger.error(f"Signal evaluation error for {symbol}: {e}", exc_info=True)
                    continue
                if opened is not None:
                    events.append(opened)

            return events
        finally:
            self._tick_guard.release()

    def _roll_daily(self, now: datetime) -> None:
        with self.positions.lock:
            closed_day = self.risk_state.last_reset_date
            if self.risk_gate.reset_if_new_day(self.risk_state, now):
                report = self.tracker.daily_report()
                report["date"] = closed_day.isoformat()
                logger.info(
                    f"[REPORT] {report['date']} trades={report['total_trades']} "
                    f"pnl={report['total_pnl_percent']:+.2f}% "
                    f"best={report['best_pair']} worst={report['worst_pair']}"
                )
                self.tracker.reset_daily()
                self._pending_report = report

    def pop_daily_report(self) -> dict[str, Any] | None:
        """Report of the day closed by the last roll, once; None otherwise."""
        with self.positions.lock:
            report, self._pending_report = self._pending_report, None
        return report

    def _evaluate_candidate(
        self,
        symbol: str,
        bars: list[Bar],
        price: float | None,
        now: datetime,
    ) -> Opened | None:
        try:
            readings = self.panel.evaluate(bars)
            atr = latest_atr(bars, self.config.risk.atr_period)
        except InsufficientDataError as e:
            logger.debug(f"Skipping {symbol}: {e}")
            return None

        decision = self.aggregator.decide(readings)
        if not decision.is_actionable:
            return None

        entry = price if price is not None else bars[-1].close
        if not self.risk_gate.accepts_volatility(atr, entry):
            logger.info(f"Skipping {symbol}: ATR {atr:.4f} below volatility floor")
            return None

        if not self.risk_gate.passes_probability_gate(
            self.tracker.overall_win_rate(), self.tracker.lifetime_trades
        ):
            return None

        try:
            position = self.positions.open(symbol, decision, entry, atr, now)
        except (PositionExistsError, CapacityError) as e:
            logger.warning(f"Open rejected for {symbol}: {e}")
            return None

        return self.positions.opened_event(position)

    def _fetch_parallel(
        self,
        fetch: Callable[[str], T],
        symbols: Iterable[str],
    ) -> dict[str, T]:
        """
        Run `fetch` for every symbol on a per-tick pool.

        Failed or late symbols are left out of the result; late results are
        discarded together with the pool.
        """
        symbols = list(symbols)
        if not symbols:
            return {}

        results: dict[str, T] = {}
        pool = ThreadPoolExecutor(
            max_workers=min(self.config.max_workers, len(symbols)),
            thread_name_prefix="fetch",
        )
        futures = {pool.submit(fetch, s): s for s in symbols}
        try:
            for future in as_completed(futures, timeout=self.config.fetch_timeout_seconds):
                symbol = futures[future]
                try:
                    results[symbol] = future.result()
                except MarketDataError as e:
                    logger.warning(f"Market data unavailable for {symbol}: {e}")
                except Exception as e:
                    logger.error(f"Fetch error for {symbol}: {e}", exc_info=True)
        except FuturesTimeoutError:
            late = sorted(s for f, s in futures.items() if not f.done())
            logger.warning(f"Fetch timed out for {late}, skipping this tick")
        finally:
            pool.shutdown(wait=False, cancel_futures=True)

        return results

    # ------------------------------------------------------------------
    # Commands and reads
    # ------------------------------------------------------------------

    def manual_close(self, symbol: str, now: datetime | None = None) -> Closed | AlreadyClosed:
        """Close at the current price (last known price if the fetch fails)."""
        price = None
        if symbol in self.positions.open_symbols():
            try:
                price = self.market_data.fetch_current_price(symbol)
            except MarketDataError as e:
                logger.warning(f"Manual close of {symbol} at last known price: {e}")
        return self.positions.close(symbol, CloseReason.MANUAL_CLOSE, price, now)

    def trail_stop(self, symbol: str) -> bool:
        return self.positions.trail_stop_to_breakeven(symbol)

    def get_open_positions(self) -> list[Position]:
        return self.positions.get_open_positions()

    def get_pair_statistics(self, symbol: str) -> PairStatistics | None:
        return self.tracker.get(symbol)

    def get_risk_state(self) -> RiskState:
        with self.positions.lock:
            return self.risk_state.snapshot()

    def daily_report(self) -> dict[str, Any]:
        report = self.tracker.daily_report()
        risk = self.get_risk_state()
        report["daily_pnl_percent"] = risk.daily_pnl_percent
        report["open_positions"] = risk.open_position_count
        report["breaker_tripped"] = risk.breaker_tripped
        return report
