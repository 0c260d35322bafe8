"""Tests for position health scoring."""

import pytest

from dlmm_analytics.analytics.health import status_for_score
from dlmm_analytics.common.errors import InvalidRangeError
from dlmm_analytics.constants import HealthStatus
from dlmm_analytics.models.position import PositionRange, ActiveBinInfo

from conftest import build_engine, build_samples


def test_centered_position_with_flat_prices_is_healthy(flat_engine):
    health = flat_engine.analyze_position_health(PositionRange(100, 120), ActiveBinInfo(bin_id=110, price=1.0))

    assert health.status == HealthStatus.HEALTHY
    # fully centered (50) + in range with 0.95 confidence (47.5)
    assert health.score == pytest.approx(97.5)
    assert health.stays_active_probability == pytest.approx(0.95)
    assert health.days_until_rebalance == pytest.approx(7.0)
    assert health.recommendations == []


def test_position_at_lower_edge_with_little_history_is_not_healthy():
    engine = build_engine(build_samples([1.0] * 5, [100] * 5))
    health = engine.analyze_position_health(PositionRange(100, 102), ActiveBinInfo(bin_id=100, price=1.0))

    assert health.status in (HealthStatus.WARNING, HealthStatus.CRITICAL)
    # centeredness 0.5 (25) + cold-start confidence 0.1 in range (5)
    assert health.score == pytest.approx(30)
    assert health.status == HealthStatus.CRITICAL
    assert health.days_until_rebalance == pytest.approx(0.1)
    assert health.recommendations == ["Consider rebalancing soon to optimize fee capture"]


def test_price_predicted_outside_range():
    engine = build_engine(build_samples([1.0] * 30, [200] * 30))
    health = engine.analyze_position_health(PositionRange(100, 120), ActiveBinInfo(bin_id=98, price=1.0))

    assert health.stays_active_probability == pytest.approx(0.05)
    # centeredness 0.4 (20) + 0.05 (2.5)
    assert health.score == pytest.approx(22.5)
    assert health.status == HealthStatus.CRITICAL
    assert health.recommendations == [
        "Consider rebalancing soon to optimize fee capture",
        "Price predicted to move neutral, adjust range accordingly",
        "Position is off-center - may miss trading activity",
    ]


def test_trend_towards_headroom_earns_bonus(rising_engine):
    # predicted bin is 21 for the rising series; both positions keep it in range
    position = PositionRange(20, 40)
    room_above = rising_engine.analyze_position_health(position, ActiveBinInfo(bin_id=22, price=1.22))
    room_below = rising_engine.analyze_position_health(position, ActiveBinInfo(bin_id=38, price=1.38))

    assert room_above.score == pytest.approx(87.5)
    assert room_below.score == pytest.approx(77.5)


def test_high_volatility_recommendation():
    engine = build_engine(build_samples([1.0, 1.2] * 15, [100, 101] * 15))
    health = engine.analyze_position_health(PositionRange(90, 110), ActiveBinInfo(bin_id=100, price=1.0))
    assert "High volatility expected - fees may spike, but position risk increases" in health.recommendations


def test_volatility_shortens_rebalance_runway(flat_engine):
    calm = flat_engine.analyze_position_health(PositionRange(100, 120), ActiveBinInfo(bin_id=110, price=1.0))

    noisy = build_engine(build_samples([1.0, 1.001] * 15, [110] * 30))
    busy = noisy.analyze_position_health(PositionRange(100, 120), ActiveBinInfo(bin_id=110, price=1.0))

    assert busy.status == HealthStatus.HEALTHY
    assert 1.0 <= busy.days_until_rebalance < calm.days_until_rebalance


@pytest.mark.parametrize("min_bin,max_bin", [(120, 100), (100, 100)])
def test_invalid_range_raises(flat_engine, min_bin, max_bin):
    with pytest.raises(InvalidRangeError):
        flat_engine.analyze_position_health(PositionRange(min_bin, max_bin), ActiveBinInfo(bin_id=110, price=1.0))


@pytest.mark.parametrize("prices", [[1.0] * 30, [1.0, 1.5] * 15, [round(1.0 + 0.01 * i, 2) for i in range(40)], []])
@pytest.mark.parametrize("min_bin,max_bin,active", [(100, 120, 110), (100, 101, 100), (0, 1000, -50), (-10, 10, 500)])
def test_score_is_bounded(prices, min_bin, max_bin, active):
    engine = build_engine(build_samples(prices))
    health = engine.analyze_position_health(PositionRange(min_bin, max_bin), ActiveBinInfo(bin_id=active, price=1.0))

    assert 0 <= health.score <= 100
    assert 0 <= health.stays_active_probability <= 1
    assert health.days_until_rebalance > 0


@pytest.mark.parametrize("score,status", [
    (0, HealthStatus.CRITICAL),
    (39.99, HealthStatus.CRITICAL),
    (40, HealthStatus.WARNING),
    (69.99, HealthStatus.WARNING),
    (70, HealthStatus.HEALTHY),
    (100, HealthStatus.HEALTHY),
])
def test_status_thresholds(score, status):
    assert status_for_score(score) == status


def test_score_is_idempotent(rising_engine):
    position, active = PositionRange(10, 30), ActiveBinInfo(bin_id=20, price=1.2)
    assert rising_engine.analyze_position_health(position, active) == rising_engine.analyze_position_health(position, active)


def test_warning_runway_scales_with_volatility():
    # prices swing 1.0 <-> 1.2: predicted bin 96 falls outside [98, 118], centered active bin
    engine = build_engine(build_samples([1.0, 1.2] * 15, [100, 101] * 15))
    health = engine.analyze_position_health(PositionRange(98, 118), ActiveBinInfo(bin_id=108, price=1.2))
    predicted_pct = engine.forecast_volatility().predicted_volatility_pct

    assert health.status == HealthStatus.WARNING
    assert health.score == pytest.approx(52.5)
    assert health.days_until_rebalance == pytest.approx(3 / (1 + predicted_pct / 10))
    assert 0.5 < health.days_until_rebalance < 3


def test_warning_runway_has_half_day_floor():
    # prices swing 1.0 <-> 3.0: ~133% predicted volatility would give ~0.2 days
    engine = build_engine(build_samples([1.0, 3.0] * 15, [100, 101] * 15))
    health = engine.analyze_position_health(PositionRange(70, 110), ActiveBinInfo(bin_id=100, price=3.0))
    predicted_pct = engine.forecast_volatility().predicted_volatility_pct

    assert health.status == HealthStatus.WARNING
    assert 3 / (1 + predicted_pct / 10) < 0.5
    assert health.days_until_rebalance == 0.5
