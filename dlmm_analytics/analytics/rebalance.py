# dlmm_analytics/analytics/rebalance.py
import logging
import math

from dlmm_analytics.analytics.health import PositionHealthScorer
from dlmm_analytics.analytics.price_predictor import PricePredictor
from dlmm_analytics.analytics.volatility import VolatilityForecaster
from dlmm_analytics.common.config import AnalyticsConfig
from dlmm_analytics.constants import Urgency
from dlmm_analytics.models.forecasts import (
    HealthScore, PricePrediction, RebalanceRecommendation, SuggestedRange, VolatilityForecast,
)
from dlmm_analytics.models.position import PositionRange, ActiveBinInfo
from dlmm_analytics.utils.bin_math import price_of_bin

logger = logging.getLogger(__name__)


class RebalanceAdvisor:
    def __init__(
        self,
        scorer: PositionHealthScorer,
        predictor: PricePredictor,
        forecaster: VolatilityForecaster,
        config: AnalyticsConfig,
    ):
        self.scorer = scorer
        self.predictor = predictor
        self.forecaster = forecaster
        self.config = config

    def recommend(self, position_range: PositionRange, active_bin: ActiveBinInfo) -> RebalanceRecommendation:
        """
        Combine health, volatility and price forecasts into a rebalance
        recommendation with a new range centered on the predicted bin.
        """
        health = self.scorer.score(position_range, active_bin)
        volatility = self.forecaster.forecast()
        prediction = self.predictor.predict(self.config.health_horizon_minutes)

        should_rebalance = (
            health.score < self.config.rebalance_score_threshold
            or health.stays_active_probability < self.config.min_stays_active_probability
        )
        urgency = self._urgency(health)

        suggested_range = self._suggested_range(prediction, volatility.optimal_bin_spread)
        expected_fee_apr = self.config.base_fee_apr * (1 + volatility.predicted_volatility_pct / 10)

        if should_rebalance:
            logger.info(
                f"Rebalance advised for range [{position_range.min_bin_id}, {position_range.max_bin_id}] "
                f"(score {health.score:.0f}, urgency {urgency.value})"
            )

        return RebalanceRecommendation(
            should_rebalance=should_rebalance,
            urgency=urgency,
            suggested_range=suggested_range,
            expected_fee_apr=expected_fee_apr,
            reasoning=self._reasoning(should_rebalance, health, prediction, volatility, expected_fee_apr),
        )

    def _urgency(self, health: HealthScore) -> Urgency:
        if health.score < self.config.high_urgency_score or health.stays_active_probability == 0:
            return Urgency.HIGH
        if health.score < self.config.rebalance_score_threshold:
            return Urgency.MEDIUM
        return Urgency.LOW

    def _suggested_range(self, prediction: PricePrediction, spread: int) -> SuggestedRange:
        center = prediction.predicted_bin_id
        min_bin_id = center - spread // 2
        max_bin_id = center + math.ceil(spread / 2)

        if self.config.bin_step is not None:
            # exact model: move the predicted price by the number of bins to each edge
            min_price = prediction.predicted_price * price_of_bin(min_bin_id - center, self.config.bin_step)
            max_price = prediction.predicted_price * price_of_bin(max_bin_id - center, self.config.bin_step)
        else:
            step = self.config.approx_bin_step
            min_price = prediction.predicted_price * (1 - step) ** (spread / 2)
            max_price = prediction.predicted_price * (1 + step) ** (spread / 2)

        return SuggestedRange(min_bin_id=min_bin_id, max_bin_id=max_bin_id, min_price=min_price, max_price=max_price)

    @staticmethod
    def _reasoning(
        should_rebalance: bool,
        health: HealthScore,
        prediction: PricePrediction,
        volatility: VolatilityForecast,
        expected_fee_apr: float,
    ):
        if not should_rebalance:
            return [
                "Position is well-positioned, no immediate rebalancing needed",
                f"Current health score: {health.score:.0f}/100",
            ]
        return [
            f"Position health score is {health.score:.0f}/100",
            f"Predicted {prediction.trend.value} trend with {prediction.confidence * 100:.0f}% confidence",
            f"Optimal bin spread: ±{volatility.optimal_bin_spread} bins based on volatility",
            f"Expected fee APR: {expected_fee_apr:.1f}% with new range",
        ]
