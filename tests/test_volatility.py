"""Tests for the volatility and fee-spike forecaster."""

import pytest

from dlmm_analytics.common.config import AnalyticsConfig

from conftest import build_engine, build_samples


@pytest.mark.parametrize("count", [0, 1, 10, 19])
def test_short_history_returns_zeroed_forecast(count):
    forecast = build_engine(build_samples([1.0 + i / 10 for i in range(count)])).forecast_volatility()

    assert forecast.current_volatility_pct == 0
    assert forecast.predicted_volatility_pct == 0
    assert forecast.fee_spike_probability == 0
    assert forecast.optimal_bin_spread == 100


def test_flat_prices_give_base_spread():
    forecast = build_engine(build_samples([1.0] * 20)).forecast_volatility()

    assert forecast.current_volatility_pct == pytest.approx(0)
    assert forecast.fee_spike_probability == pytest.approx(0)
    assert forecast.optimal_bin_spread == 50


def test_oscillating_prices_saturate_fee_spike_probability():
    # returns alternate +20% / -16.7%: std = 0.18333 over both windows
    forecast = build_engine(build_samples([1.0, 1.2] * 10 + [1.0])).forecast_volatility()

    assert forecast.current_volatility_pct == pytest.approx(18.3333, rel=1e-4)
    assert forecast.predicted_volatility_pct == pytest.approx(18.3333, rel=1e-4)
    assert forecast.fee_spike_probability == 1.0
    assert forecast.optimal_bin_spread == 142


def test_recent_volatility_is_blended_in():
    # calm history, then a volatile tail inside the last 10 returns
    prices = [1.0] * 30 + [1.02, 1.0] * 3
    forecast = build_engine(build_samples(prices)).forecast_volatility()

    assert forecast.predicted_volatility_pct > forecast.current_volatility_pct
    assert 0 < forecast.fee_spike_probability < 1
    assert forecast.optimal_bin_spread > 50


def test_blend_weights_are_configurable():
    prices = [1.0] * 30 + [1.02, 1.0] * 3
    history_only = build_engine(
        build_samples(prices), AnalyticsConfig(historical_weight=1.0, recent_weight=0.0)
    ).forecast_volatility()

    assert history_only.predicted_volatility_pct == pytest.approx(history_only.current_volatility_pct)


def test_forecast_is_idempotent(rising_engine):
    assert rising_engine.forecast_volatility() == rising_engine.forecast_volatility()
