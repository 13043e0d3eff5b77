"""
Test Engine Configuration

Tests for settings defaults and YAML overrides.
"""

from __future__ import annotations

import pytest

from config.settings import POSITIONS_PATH, TRADE_JOURNAL_PATH
from src.daemon.config import EngineConfig, PositionConfig, RiskConfig
from src.indicators import IndicatorPanel
from src.risk.risk_gate import TradingHours


class TestDefaults:
    def test_from_settings(self):
        config = EngineConfig.from_dict()

        assert config.min_agreement == 3
        assert config.min_confidence == 70.0
        assert config.position.partial_fractions == (0.5, 0.75)
        assert config.risk.max_daily_loss_percent == 5.0
        assert config.alerts.price_alert_percent == 1.0
        assert isinstance(config.symbols, tuple)

    def test_default_panel(self):
        panel = IndicatorPanel.from_config(EngineConfig.from_dict().indicators)
        assert panel.names == ["supertrend", "ema_rsi", "stochastic", "cci", "vwap_bb"]


class TestOverrides:
    def test_yaml_deep_merge(self, tmp_path):
        path = tmp_path / "engine.yaml"
        path.write_text(
            "engine:\n"
            "  symbols: [XYZ/USDT]\n"
            "risk:\n"
            "  max_daily_loss_percent: 3.0\n"
            "  trading_hours: [9, 20]\n"
            "indicators:\n"
            "  macd:\n"
            "    enabled: true\n"
        )
        config = EngineConfig.from_yaml(path)

        assert config.symbols == ("XYZ/USDT",)
        assert config.risk.max_daily_loss_percent == 3.0
        assert config.risk.max_concurrent_positions == 3
        assert config.indicators["macd"]["enabled"] is True
        assert config.indicators["macd"]["fast"] == 12
        assert config.risk.build_gate().trading_hours == TradingHours(9, 20)

    def test_empty_yaml_uses_defaults(self, tmp_path):
        path = tmp_path / "empty.yaml"
        path.write_text("")
        assert EngineConfig.from_yaml(path) == EngineConfig.from_dict()

    def test_unknown_section(self):
        with pytest.raises(ValueError, match="sections"):
            EngineConfig.from_dict({"strategy": {}})

    def test_unknown_key(self):
        with pytest.raises(ValueError, match="RiskConfig"):
            EngineConfig.from_dict({"risk": {"max_leverage": 2}})


class TestValidation:
    def test_partial_fractions_sorted(self):
        assert PositionConfig(partial_fractions=[0.75, 0.5]).partial_fractions == (0.5, 0.75)

    def test_partial_fractions_range(self):
        with pytest.raises(ValueError):
            PositionConfig(partial_fractions=(0.5, 1.0))

    def test_risk_limits(self):
        with pytest.raises(ValueError):
            RiskConfig(max_daily_loss_percent=0)

    def test_probability_gate_built_when_enabled(self):
        gate = RiskConfig(probability_gate=True, seed=7).build_gate()
        assert gate.probability_gate is not None
        assert RiskConfig().build_gate().probability_gate is None

    def test_duplicate_symbols(self):
        with pytest.raises(ValueError):
            EngineConfig(symbols=("BTC", "BTC"))


class TestPersistence:
    def test_defaults_filled_in(self):
        config = EngineConfig.from_dict().with_persistence()
        assert config.state_path == str(POSITIONS_PATH)
        assert config.journal_path == str(TRADE_JOURNAL_PATH)

    def test_explicit_paths_kept(self, tmp_path):
        config = EngineConfig.from_dict(
            {"engine": {"state_path": str(tmp_path / "state.json")}}
        ).with_persistence(journal_path=tmp_path / "journal.jsonl")

        assert config.state_path == str(tmp_path / "state.json")
        assert config.journal_path == str(tmp_path / "journal.jsonl")

    def test_in_memory_by_default(self):
        config = EngineConfig.from_dict()
        assert config.state_path is None
        assert config.journal_path is None
