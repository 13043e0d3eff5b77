"""
Engine Configuration

Frozen config objects built from config/settings.py defaults, optionally
overridden by a YAML file:

    engine:
      symbols: [BTC/USDT, ETH/USDT]
    risk:
      max_daily_loss_percent: 3.0
    indicators:
      macd: {enabled: true}
"""

from __future__ import annotations

import copy
from collections.abc import Mapping
from dataclasses import dataclass, field, fields, replace
from pathlib import Path
from typing import Any

import yaml

from config.settings import (
    ALERTS,
    ENGINE,
    INDICATORS,
    POSITION,
    POSITIONS_PATH,
    RISK,
    SIGNAL,
    TRADE_JOURNAL_PATH,
)
from src.risk.risk_gate import ProbabilityGate, RiskGate, RiskState, TradingHours


def _deep_merge(base: Mapping[str, Any], override: Mapping[str, Any]) -> dict[str, Any]:
    merged = copy.deepcopy(dict(base))
    for key, val in override.items():
        if isinstance(val, Mapping) and isinstance(merged.get(key), Mapping):
            merged[key] = _deep_merge(merged[key], val)
        else:
            merged[key] = copy.deepcopy(val)
    return merged


def _known(cls, data: Mapping[str, Any]) -> dict[str, Any]:
    names = {f.name for f in fields(cls)}
    unknown = set(data) - names
    if unknown:
        raise ValueError(f"Unknown {cls.__name__} keys: {sorted(unknown)}")
    return dict(data)


@dataclass(frozen=True)
class RiskConfig:
    """Risk gate policy."""

    max_concurrent_positions: int = 3
    max_daily_loss_percent: float = 5.0
    timezone: str = "UTC"
    trading_hours: tuple[int, int] | None = None
    max_daily_trades: int | None = None
    min_atr_percent: float | None = None
    atr_period: int = 14
    probability_gate: bool = False
    win_rate_floor: float = 60.0
    pass_probability: float = 0.5
    min_trades: int = 10
    seed: int | None = None

    def __post_init__(self):
        if self.max_concurrent_positions < 1:
            raise ValueError("max_concurrent_positions must be >= 1")
        if self.max_daily_loss_percent <= 0:
            raise ValueError("max_daily_loss_percent must be > 0")
        if self.trading_hours is not None:
            if len(self.trading_hours) != 2:
                raise ValueError("trading_hours must be [start_hour, end_hour]")
            object.__setattr__(self, "trading_hours", tuple(self.trading_hours))

    def new_state(self) -> RiskState:
        return RiskState(
            max_concurrent_positions=self.max_concurrent_positions,
            max_daily_loss_percent=self.max_daily_loss_percent,
        )

    def build_gate(self) -> RiskGate:
        hours = TradingHours(*self.trading_hours) if self.trading_hours else None
        gate = None
        if self.probability_gate:
            gate = ProbabilityGate(
                win_rate_floor=self.win_rate_floor,
                pass_probability=self.pass_probability,
                min_trades=self.min_trades,
                seed=self.seed,
            )
        return RiskGate(
            timezone=self.timezone,
            trading_hours=hours,
            max_daily_trades=self.max_daily_trades,
            min_atr_percent=self.min_atr_percent,
            probability_gate=gate,
        )


@dataclass(frozen=True)
class PositionConfig:
    """Stop/target geometry and sizing."""

    atr_multiplier: float = 2.0
    partial_fractions: tuple[float, ...] = (0.5, 0.75)
    amount_per_pair: float | None = None
    default_size_units: float = 1.0
    history_size: int = 200

    def __post_init__(self):
        if self.atr_multiplier <= 0:
            raise ValueError("atr_multiplier must be > 0")
        fractions = tuple(sorted(float(f) for f in self.partial_fractions))
        if any(not 0 < f < 1 for f in fractions):
            raise ValueError("partial_fractions must be within (0, 1)")
        if len(set(fractions)) != len(fractions):
            raise ValueError("partial_fractions must be distinct")
        object.__setattr__(self, "partial_fractions", fractions)
        if self.amount_per_pair is not None and self.amount_per_pair <= 0:
            raise ValueError("amount_per_pair must be > 0")


@dataclass(frozen=True)
class AlertConfig:
    """Side-channel alert thresholds. A None threshold disables that alert."""

    price_alert_percent: float | None = 1.0
    sl_warning_fraction: float | None = 0.2
    max_sl_warnings: int = 1
    tp_zone_fraction: float | None = 0.2
    max_tp_alerts: int = 1


@dataclass(frozen=True)
class EngineConfig:
    """Everything one engine instance needs."""

    symbols: tuple[str, ...] = ()
    timeframe: str = "15m"
    bar_limit: int = 100
    interval_seconds: float = 30
    fetch_timeout_seconds: float = 10.0
    max_workers: int = 8
    state_path: str | None = None
    journal_path: str | None = None
    min_agreement: int = 3
    min_confidence: float = 70.0
    indicators: dict[str, dict[str, Any]] = field(default_factory=dict)
    risk: RiskConfig = field(default_factory=RiskConfig)
    position: PositionConfig = field(default_factory=PositionConfig)
    alerts: AlertConfig = field(default_factory=AlertConfig)

    def __post_init__(self):
        object.__setattr__(self, "symbols", tuple(self.symbols))
        if len(set(self.symbols)) != len(self.symbols):
            raise ValueError(f"Duplicate symbols: {self.symbols}")
        if self.fetch_timeout_seconds <= 0:
            raise ValueError("fetch_timeout_seconds must be > 0")
        if self.max_workers < 1:
            raise ValueError("max_workers must be >= 1")

    @classmethod
    def from_dict(cls, overrides: Mapping[str, Any] | None = None) -> "EngineConfig":
        """
        Build a config from settings defaults deep-merged with `overrides`.

        Args:
            overrides: {"engine", "indicators", "signal", "risk", "position",
                "alerts"} sections, each optional

        Raises:
            ValueError: Unknown section/key or invalid value
        """
        defaults = {
            "engine": ENGINE,
            "indicators": INDICATORS,
            "signal": SIGNAL,
            "risk": RISK,
            "position": POSITION,
            "alerts": ALERTS,
        }
        overrides = overrides or {}
        unknown = set(overrides) - set(defaults)
        if unknown:
            raise ValueError(f"Unknown config sections: {sorted(unknown)}")
        data = _deep_merge(defaults, overrides)

        return cls(
            **_known(cls, data["engine"]),
            **_known(cls, data["signal"]),
            indicators=data["indicators"],
            risk=RiskConfig(**_known(RiskConfig, data["risk"])),
            position=PositionConfig(**_known(PositionConfig, data["position"])),
            alerts=AlertConfig(**_known(AlertConfig, data["alerts"])),
        )

    def with_persistence(
        self,
        state_path: Path | str = POSITIONS_PATH,
        journal_path: Path | str = TRADE_JOURNAL_PATH,
    ) -> "EngineConfig":
        """Fill in storage paths the config leaves unset; explicit paths win."""
        return replace(
            self,
            state_path=self.state_path or str(state_path),
            journal_path=self.journal_path or str(journal_path),
        )

    @classmethod
    def from_yaml(cls, path: Path | str) -> "EngineConfig":
        with open(path) as f:
            data = yaml.safe_load(f) or {}
        if not isinstance(data, Mapping):
            raise ValueError(f"Config file must contain a mapping: {path}")
        return cls.from_dict(data)
