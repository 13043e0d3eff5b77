"""
Signal Daemon

External scheduler for the trading engine: runs one tick every
`interval_seconds`, logs the resulting events and forwards them to an
optional notifier.
"""

from __future__ import annotations

import logging
import time
import traceback
from datetime import datetime, timezone
from typing import TYPE_CHECKING

from src.daemon.events import TickEvent
from src.daemon.trading_engine import TradingEngine

if TYPE_CHECKING:
    from src.execution.telegram_bot import TelegramNotifier

logger = logging.getLogger(__name__)


class SignalDaemon:
    """Tick loop around a TradingEngine."""

    def __init__(
        self,
        engine: TradingEngine,
        notifier: TelegramNotifier | None = None,
        interval_seconds: float | None = None,
        dry_run: bool = False,
    ):
        self.engine = engine
        self.notifier = notifier
        self.interval_seconds = (
            interval_seconds if interval_seconds is not None
            else engine.config.interval_seconds
        )
        self.dry_run = dry_run
        self._running = False

    def run_once(self, now: datetime | None = None) -> list[TickEvent]:
        """Run a single tick and dispatch its events and any daily report."""
        events = self.engine.evaluate_tick(now or datetime.now(timezone.utc))
        for event in events:
            logger.info(f"Event: {event.to_record()}")

        if events and self.notifier is not None:
            if self.dry_run:
                logger.info(f"[DRY RUN] {len(events)} notifications not sent")
            else:
                self.notifier.notify(events)

        report = self.engine.pop_daily_report()
        if report is not None and self.notifier is not None:
            if self.dry_run:
                logger.info(f"[DRY RUN] daily report for {report['date']} not sent")
            else:
                self.notifier.send_daily_report(report)
        return events

    def run(self) -> None:
        """Main event loop."""
        self._running = True
        logger.info(
            f"Signal daemon started: {list(self.engine.config.symbols)} "
            f"every {self.interval_seconds}s"
        )
        if self.notifier is not None and not self.dry_run:
            self.notifier.send_startup(self.engine.config.symbols)

        try:
            while self._running:
                started = time.time()
                try:
                    self.run_once()
                except Exception as e:
                    logger.error(f"Tick error: {e}\n{traceback.format_exc()}")

                deadline = started + self.interval_seconds
                while self._running and time.time() < deadline:
                    time.sleep(min(1.0, max(0.0, deadline - time.time())))

        except KeyboardInterrupt:
            logger.info("Shutdown requested")
        finally:
            self.stop()

    def stop(self) -> None:
        """Graceful shutdown."""
        if self._running:
            logger.info("Shutting down signal daemon...")
        self._running = False
