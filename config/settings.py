"""
Global Settings

Engine, indicator, risk and position parameters.
"""

from __future__ import annotations

from pathlib import Path

# =============================================================================
# Paths
# =============================================================================
PROJECT_ROOT = Path(__file__).parent.parent
DATA_DIR = PROJECT_ROOT / "data"
LOGS_DIR = PROJECT_ROOT / "logs"

POSITIONS_PATH = DATA_DIR / "positions.json"
TRADE_JOURNAL_PATH = DATA_DIR / "trades.jsonl"

# =============================================================================
# Engine Settings
# =============================================================================
ENGINE = {
    "symbols": ["BTC/USDT", "ETH/USDT", "SOL/USDT"],
    "timeframe": "15m",
    "bar_limit": 100,  # bars requested per symbol per tick
    "interval_seconds": 30,  # daemon tick interval
    "fetch_timeout_seconds": 10.0,  # whole-tick budget for parallel fetches
    "max_workers": 8,
    "state_path": None,  # positions snapshot (daemon default: POSITIONS_PATH)
    "journal_path": None,  # JSONL trade journal (daemon default: TRADE_JOURNAL_PATH)
}

# =============================================================================
# Indicator Panel
# =============================================================================
INDICATORS = {
    "supertrend": {
        "enabled": True,
        "weight": 1.0,
        "period": 10,
        "multiplier": 3.0,
    },
    "ema_rsi": {
        "enabled": True,
        "weight": 1.0,
        "rsi_period": 14,
        "ema_period": 9,
        "oversold": 30,
        "overbought": 70,
    },
    "stochastic": {
        "enabled": True,
        "weight": 1.0,
        "k_period": 14,
        "d_period": 3,
        "oversold": 20,
        "overbought": 80,
    },
    "cci": {
        "enabled": True,
        "weight": 1.0,
        "period": 20,
        "lower": -100,
        "upper": 100,
    },
    "vwap_bb": {
        "enabled": True,
        "weight": 1.0,
        "period": 20,
        "num_std": 2.0,
    },
    "ema_cross": {
        "enabled": False,
        "weight": 1.0,
        "fast": 10,
        "slow": 50,
    },
    "rsi": {
        "enabled": False,
        "weight": 1.0,
        "period": 7,
        "oversold": 30,
        "overbought": 70,
    },
    "macd": {
        "enabled": False,
        "weight": 1.0,
        "fast": 12,
        "slow": 26,
        "signal": 9,
    },
}

# =============================================================================
# Signal Aggregation
# =============================================================================
SIGNAL = {
    "min_agreement": 3,  # votes required on the winning side
    "min_confidence": 70.0,  # percent
}

# =============================================================================
# Risk Settings
# =============================================================================
RISK = {
    "max_concurrent_positions": 3,
    "max_daily_loss_percent": 5.0,
    "timezone": "UTC",  # daily reset and trading hours
    "trading_hours": None,  # [start_hour, end_hour] inclusive, e.g. [9, 20]
    "max_daily_trades": None,
    "min_atr_percent": None,  # volatility floor, ATR as % of price
    "atr_period": 14,

    # Probability gate (off by default)
    "probability_gate": False,
    "win_rate_floor": 60.0,
    "pass_probability": 0.5,
    "min_trades": 10,
    "seed": None,
}

# =============================================================================
# Position Settings
# =============================================================================
POSITION = {
    "atr_multiplier": 2.0,  # stop/target distance = k1 * ATR (1:1)
    "partial_fractions": [0.5, 0.75],
    "amount_per_pair": None,  # quote amount; size = amount / entry
    "default_size_units": 1.0,
    "history_size": 200,  # archived closed positions kept in memory
}

# =============================================================================
# Alert Settings
# =============================================================================
ALERTS = {
    "price_alert_percent": 1.0,  # move since last alert
    "sl_warning_fraction": 0.2,  # remaining stop distance / initial risk
    "max_sl_warnings": 1,
    "tp_zone_fraction": 0.2,
    "max_tp_alerts": 1,
}

# =============================================================================
# Exchange / Notification
# =============================================================================
EXCHANGE = {
    "exchange_id": "binance",
    "api_key_env": "EXCHANGE_API_KEY",
    "secret_env": "EXCHANGE_API_SECRET",
    "timeout_ms": 10000,
}

TELEGRAM = {
    "enabled": False,
    "token_env": "TELEGRAM_BOT_TOKEN",
    "chat_id_env": "TELEGRAM_CHAT_ID",
    "timeout": 10,
}

# =============================================================================
# Logging Settings
# =============================================================================
LOGGING = {
    "level": "INFO",
    "format": "%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    "console_format": "%(asctime)s | %(levelname)-8s | %(message)s",
    "quiet_loggers": ["ccxt", "urllib3"],
    "library_level": "WARNING",
    "file_prefix": "signal_engine",
}
