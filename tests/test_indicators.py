"""
Test Indicators

Tests for the panel indicators, ATR and the IndicatorPanel.
"""

from __future__ import annotations

import pandas as pd
import pytest

from src.indicators import (
    Bar,
    IndicatorPanel,
    InsufficientDataError,
    Signal,
    bars_to_frame,
    build_indicator,
    latest_atr,
)
from src.indicators.technical import (
    CCIIndicator,
    EMACrossIndicator,
    EMARSIIndicator,
    MACDIndicator,
    RSIIndicator,
    StochasticIndicator,
    SuperTrendIndicator,
    VWAPBollingerIndicator,
)
from config.settings import INDICATORS


class TestMinBars:
    """Declared lookback windows."""

    def test_default_windows(self):
        assert SuperTrendIndicator().min_bars == 11
        assert EMARSIIndicator().min_bars == 23
        assert StochasticIndicator().min_bars == 16
        assert CCIIndicator().min_bars == 20
        assert VWAPBollingerIndicator().min_bars == 20

    def test_panel_window_is_largest_member(self):
        panel = IndicatorPanel.from_config(INDICATORS)
        assert panel.min_bars == 23

    def test_short_series_raises(self, make_bars):
        panel = IndicatorPanel.from_config(INDICATORS)
        with pytest.raises(InsufficientDataError) as exc:
            panel.evaluate(make_bars([100.0] * 22))
        assert exc.value.required == 23
        assert exc.value.available == 22

    def test_exact_window_evaluates(self, make_bars):
        panel = IndicatorPanel.from_config(INDICATORS)
        readings = panel.evaluate(make_bars([100.0] * 23))
        assert len(readings) == 5


class TestDefaultPanel:
    """Votes of the default five-indicator panel."""

    def test_flat_series_holds(self, flat_bars):
        panel = IndicatorPanel.from_config(INDICATORS)
        readings = panel.evaluate(flat_bars)

        assert [r.name for r in readings] == [
            "supertrend", "ema_rsi", "stochastic", "cci", "vwap_bb",
        ]
        assert all(r.signal is Signal.HOLD for r in readings)

    def test_falling_series_votes(self, falling_bars):
        panel = IndicatorPanel.from_config(INDICATORS)
        votes = {r.name: r.signal for r in panel.evaluate(falling_bars)}

        assert votes == {
            "supertrend": Signal.HOLD,
            "ema_rsi": Signal.BUY,
            "stochastic": Signal.BUY,
            "cci": Signal.BUY,
            "vwap_bb": Signal.HOLD,
        }

    def test_rising_series_votes(self, rising_bars):
        panel = IndicatorPanel.from_config(INDICATORS)
        votes = {r.name: r.signal for r in panel.evaluate(rising_bars)}

        assert votes["ema_rsi"] is Signal.SELL
        assert votes["stochastic"] is Signal.SELL
        assert votes["cci"] is Signal.SELL

    def test_disabled_indicator_skipped(self):
        config = {name: dict(spec) for name, spec in INDICATORS.items()}
        config["cci"]["enabled"] = False
        panel = IndicatorPanel.from_config(config)
        assert "cci" not in panel.names
        assert len(panel) == 4

    def test_readings_carry_weight_and_components(self, flat_bars):
        panel = IndicatorPanel([VWAPBollingerIndicator(weight=2.5)])
        reading = panel.evaluate(flat_bars)[0]

        assert reading.weight == 2.5
        assert set(reading.components) == {"vwap", "middle", "upper", "lower"}
        assert reading.to_record()["signal"] == "HOLD"


class TestIndividualIndicators:
    """Threshold policies on constructed series."""

    def test_vwap_band_breakout_sells(self, make_bars):
        bars = make_bars([100.0] * 19 + [120.0], spread=0.0)
        reading = VWAPBollingerIndicator().evaluate(bars_to_frame(bars))

        assert reading.components["vwap"] == pytest.approx(101.0)
        assert reading.signal is Signal.SELL

    def test_supertrend_breakout_buys(self, make_bars):
        bars = make_bars([100.0] * 15, spread=0.0)
        last = bars[-1]
        bars.append(Bar(last.timestamp, 120.0, 130.0, 120.0, 130.0, 1000.0))
        reading = SuperTrendIndicator(multiplier=1.0).evaluate(bars_to_frame(bars))

        # ATR 3 around hl2 125: upper band 128
        assert reading.components["upper"] == pytest.approx(128.0)
        assert reading.signal is Signal.BUY

    def test_stochastic_flat_range_is_neutral(self, flat_bars):
        reading = StochasticIndicator().evaluate(bars_to_frame(flat_bars))
        assert reading.value == 50.0
        assert reading.signal is Signal.HOLD

    def test_cci_flat_is_zero(self, flat_bars):
        reading = CCIIndicator().evaluate(bars_to_frame(flat_bars))
        assert reading.value == 0.0

    def test_rsi_saturates_on_rising(self, rising_bars):
        reading = RSIIndicator().evaluate(bars_to_frame(rising_bars))
        assert reading.value == pytest.approx(100.0)
        assert reading.signal is Signal.SELL

    def test_ema_cross_follows_trend(self, rising_bars, falling_bars):
        ind = EMACrossIndicator()
        assert ind.evaluate(bars_to_frame(rising_bars)).signal is Signal.BUY
        assert ind.evaluate(bars_to_frame(falling_bars)).signal is Signal.SELL

    def test_macd_histogram_sign(self, rising_bars, falling_bars):
        ind = MACDIndicator()
        assert ind.evaluate(bars_to_frame(rising_bars)).signal is Signal.BUY
        assert ind.evaluate(bars_to_frame(falling_bars)).signal is Signal.SELL

    def test_negative_weight_rejected(self):
        with pytest.raises(ValueError):
            CCIIndicator(weight=-1.0)

    def test_build_unknown_indicator(self):
        with pytest.raises(ValueError, match="Unknown indicator"):
            build_indicator("ichimoku", {"weight": 1.0})

    def test_build_with_type_alias(self):
        ind = build_indicator("fast_rsi", {"type": "rsi", "period": 5, "enabled": True})
        assert isinstance(ind, RSIIndicator)
        assert ind.name == "fast_rsi"
        assert ind.min_bars == 6


class TestATR:
    """Average true range helper."""

    def test_constant_true_range(self, falling_bars):
        assert latest_atr(falling_bars, 14) == pytest.approx(1.5)

    def test_needs_period_plus_one(self, make_bars):
        with pytest.raises(InsufficientDataError):
            latest_atr(make_bars([100.0] * 14), 14)

    def test_accepts_dataframe(self, falling_bars):
        frame = bars_to_frame(falling_bars)
        assert isinstance(frame, pd.DataFrame)
        assert latest_atr(frame, 14) == pytest.approx(1.5)
