#!/usr/bin/env python3
"""
Signal Daemon Runner

Usage:
    python scripts/run_daemon.py                        # default settings
    python scripts/run_daemon.py --config engine.yaml   # YAML overrides
    python scripts/run_daemon.py --dry-run              # log events, no notifications
    python scripts/run_daemon.py --once                 # single tick, then exit
    python scripts/run_daemon.py --no-persist           # in-memory positions, no journal
"""

import argparse
import os
import signal
import sys
from pathlib import Path

# Add project root to path
project_root = Path(__file__).parent.parent
sys.path.insert(0, str(project_root))

from config.logging_config import setup_logging
from config.settings import EXCHANGE, TELEGRAM


def main():
    parser = argparse.ArgumentParser(
        description="Signal engine daemon with position lifecycle and risk control"
    )
    parser.add_argument(
        "--config", type=Path, default=None,
        help="YAML file with overrides for config/settings.py sections",
    )
    parser.add_argument(
        "--dry-run", action="store_true",
        help="Log events only, do not send notifications",
    )
    parser.add_argument(
        "--once", action="store_true",
        help="Run a single tick and exit",
    )
    parser.add_argument(
        "--no-persist", action="store_true",
        help="Keep positions in memory and skip the trade journal",
    )
    parser.add_argument(
        "--log-level", default=None,
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        help="Override the configured log level",
    )

    args = parser.parse_args()
    logger = setup_logging("src", level=args.log_level)

    from src.daemon.config import EngineConfig
    from src.daemon.signal_daemon import SignalDaemon
    from src.daemon.trading_engine import TradingEngine
    from src.execution.market_data import CcxtMarketData
    from src.execution.telegram_bot import TelegramNotifier

    config = EngineConfig.from_yaml(args.config) if args.config else EngineConfig.from_dict()
    if not args.no_persist:
        config = config.with_persistence()
        logger.info(f"Positions: {config.state_path}, journal: {config.journal_path}")

    market_data = CcxtMarketData(
        exchange_id=EXCHANGE["exchange_id"],
        api_key=os.getenv(EXCHANGE["api_key_env"], ""),
        api_secret=os.getenv(EXCHANGE["secret_env"], ""),
        timeout_ms=EXCHANGE["timeout_ms"],
    )

    notifier = None
    token = os.getenv(TELEGRAM["token_env"])
    chat_id = os.getenv(TELEGRAM["chat_id_env"])
    if TELEGRAM["enabled"] and token and chat_id:
        notifier = TelegramNotifier(token, chat_id, timeout=TELEGRAM["timeout"])

    engine = TradingEngine(config, market_data)
    daemon = SignalDaemon(engine, notifier=notifier, dry_run=args.dry_run)

    if args.once:
        events = daemon.run_once()
        logger.info(f"Tick produced {len(events)} events")
        return

    def signal_handler(_sig, _frame):
        logger.info("Shutdown signal received")
        daemon.stop()

    signal.signal(signal.SIGINT, signal_handler)
    signal.signal(signal.SIGTERM, signal_handler)

    try:
        daemon.run()
    except Exception as e:
        logger.error(f"Fatal error: {e}", exc_info=True)
        sys.exit(1)


if __name__ == "__main__":
    main()
