"""
Pytest configuration and shared fixtures for the analytics tests.

Provides sample-series builders and pre-filled engines.
"""

from typing import List, Optional, Sequence

import pytest

from dlmm_analytics.analytics.engine import PositionAnalyticsEngine
from dlmm_analytics.common.config import AnalyticsConfig
from dlmm_analytics.models.bin_sample import BinSample


def build_samples(prices: Sequence[float], bin_ids: Optional[Sequence[int]] = None, start_ts: int = 1_700_000_000_000) -> List[BinSample]:
    """One sample per price, one minute apart. Bin ids default to 0..n-1."""
    if bin_ids is None:
        bin_ids = range(len(prices))
    return [
        BinSample(timestamp=start_ts + i * 60_000, bin_id=b, price=p, volume=1000.0, liquidity=5000.0)
        for i, (p, b) in enumerate(zip(prices, bin_ids))
    ]


def build_engine(samples: Sequence[BinSample], config: Optional[AnalyticsConfig] = None) -> PositionAnalyticsEngine:
    engine = PositionAnalyticsEngine(config)
    for sample in samples:
        engine.add_historical_data(sample)
    return engine


@pytest.fixture
def empty_engine():
    """Engine with no history."""
    return PositionAnalyticsEngine()


@pytest.fixture
def flat_engine():
    """30 samples at price 1.0 sitting in bin 110."""
    return build_engine(build_samples([1.0] * 30, [110] * 30))


@pytest.fixture
def rising_samples():
    """25 samples rising from 1.00 in 0.01 steps across bins 0..24."""
    return build_samples([round(1.0 + 0.01 * i, 2) for i in range(25)])


@pytest.fixture
def rising_engine(rising_samples):
    return build_engine(rising_samples)
