# dlmm_analytics/analytics/engine.py
import logging
import time
from typing import Dict, Iterable, List, Optional, Tuple

from dlmm_analytics.analytics.health import PositionHealthScorer
from dlmm_analytics.analytics.history import HistoryStore, SampleLike
from dlmm_analytics.analytics.price_predictor import PricePredictor
from dlmm_analytics.analytics.rebalance import RebalanceAdvisor
from dlmm_analytics.analytics.volatility import VolatilityForecaster
from dlmm_analytics.common.config import AnalyticsConfig
from dlmm_analytics.constants import RangeStrategy
from dlmm_analytics.models.bin_sample import BinSample
from dlmm_analytics.models.forecasts import (
    HealthScore, PricePrediction, RebalanceRecommendation, SuggestedRange, VolatilityForecast,
)
from dlmm_analytics.models.position import PositionRange, ActiveBinInfo
from dlmm_analytics.utils.bin_math import optimal_bin_range

logger = logging.getLogger(__name__)


class PositionAnalyticsEngine:
    """
    Predictive analytics for a single DLMM pool.

    Each engine owns its own history buffer, so one engine per pool (or per
    position) can be kept side by side. Feed it samples in time order with
    add_sample / record_active_bin; every analysis call is a pure read of the
    current buffer.

    Lifecycle for persistence: create -> accumulate -> export_history ->
    import_history on a fresh engine to rehydrate.
    """

    def __init__(self, config: Optional[AnalyticsConfig] = None):
        self.config = config or AnalyticsConfig()
        self.history = HistoryStore(self.config.history_capacity)
        self.predictor = PricePredictor(self.history, self.config)
        self.forecaster = VolatilityForecaster(self.history, self.config)
        self.scorer = PositionHealthScorer(self.predictor, self.forecaster, self.config)
        self.advisor = RebalanceAdvisor(self.scorer, self.predictor, self.forecaster, self.config)

    def add_historical_data(self, sample: BinSample) -> None:
        self.history.append(sample)

    def add_sample(self, timestamp: int, bin_id: int, price: float, volume: float = 0.0, liquidity: float = 0.0) -> BinSample:
        sample = BinSample(timestamp=timestamp, bin_id=bin_id, price=price, volume=volume, liquidity=liquidity)
        self.history.append(sample)
        return sample

    def record_active_bin(self, active_bin: ActiveBinInfo, timestamp: Optional[int] = None) -> BinSample:
        """
        Append a sample built from an active-bin reading. Bin supply stands in for
        volume and the bin's token reserves (x + y) for liquidity. The timestamp
        defaults to the current time in milliseconds.
        """
        if timestamp is None:
            timestamp = int(time.time() * 1000)
        return self.add_sample(
            timestamp=timestamp,
            bin_id=active_bin.bin_id,
            price=active_bin.price,
            volume=active_bin.supply or 0.0,
            liquidity=(active_bin.x_amount or 0.0) + (active_bin.y_amount or 0.0),
        )

    def predict_next_price(self, time_horizon_minutes: int = 15) -> PricePrediction:
        return self.predictor.predict(time_horizon_minutes)

    def forecast_volatility(self) -> VolatilityForecast:
        return self.forecaster.forecast()

    def suggest_strategy_range(
        self, strategy: RangeStrategy = RangeStrategy.MODERATE, bin_step: Optional[int] = None
    ) -> SuggestedRange:
        """
        Narrow/moderate/wide range around the latest price, widened by the
        predicted volatility. Needs a bin step, either passed in or configured.
        """
        bin_step = bin_step if bin_step is not None else self.config.bin_step
        if bin_step is None:
            raise ValueError("bin_step is required: pass it or set AnalyticsConfig.bin_step")
        latest = self.history.latest()
        if latest is None:
            raise ValueError("no bin samples recorded yet")
        volatility = self.forecaster.forecast().predicted_volatility_pct / 100
        return optimal_bin_range(latest.price, bin_step, strategy, volatility=volatility)

    def analyze_position_health(self, position_range: PositionRange, active_bin: ActiveBinInfo) -> HealthScore:
        return self.scorer.score(position_range, active_bin)

    def generate_rebalance_recommendation(
        self, position_range: PositionRange, active_bin: ActiveBinInfo
    ) -> RebalanceRecommendation:
        return self.advisor.recommend(position_range, active_bin)

    def export_history(self) -> Tuple[BinSample, ...]:
        return self.history.export_history()

    def export_records(self) -> List[Dict]:
        return self.history.export_records()

    def import_history(self, samples: Iterable[SampleLike]) -> None:
        self.history.import_history(samples)

    def clear_history(self) -> None:
        self.history.clear()
        logger.info("Cleared bin history")


def create_position_analytics(config: Optional[AnalyticsConfig] = None) -> PositionAnalyticsEngine:
    return PositionAnalyticsEngine(config)
