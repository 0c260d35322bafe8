# dlmm_analytics/analytics/health.py
from typing import List

from dlmm_analytics.analytics.price_predictor import PricePredictor
from dlmm_analytics.analytics.volatility import VolatilityForecaster
from dlmm_analytics.common.config import AnalyticsConfig
from dlmm_analytics.constants import Trend, HealthStatus, HEALTHY_SCORE, WARNING_SCORE
from dlmm_analytics.models.forecasts import HealthScore, PricePrediction, VolatilityForecast
from dlmm_analytics.models.position import PositionRange, ActiveBinInfo


def status_for_score(score: float) -> HealthStatus:
    if score >= HEALTHY_SCORE:
        return HealthStatus.HEALTHY
    if score >= WARNING_SCORE:
        return HealthStatus.WARNING
    return HealthStatus.CRITICAL


class PositionHealthScorer:
    def __init__(self, predictor: PricePredictor, forecaster: VolatilityForecaster, config: AnalyticsConfig):
        self.predictor = predictor
        self.forecaster = forecaster
        self.config = config

    def score(self, position_range: PositionRange, active_bin: ActiveBinInfo) -> HealthScore:
        """
        Score a liquidity range from 0 to 100.

        Half of the score rewards how centered the active bin is in the range,
        the other half the probability that the price stays inside it over the
        health horizon (60 minutes by default). A trend pointing towards the side
        with more headroom earns a bonus.

        Raises InvalidRangeError if min_bin_id >= max_bin_id.
        """
        position_range.validate()

        distance_from_min = active_bin.bin_id - position_range.min_bin_id
        distance_from_max = position_range.max_bin_id - active_bin.bin_id
        centeredness = 1 - abs(0.5 - distance_from_min / position_range.width)

        prediction = self.predictor.predict(self.config.health_horizon_minutes)
        will_stay_in_range = position_range.contains(prediction.predicted_bin_id)
        stays_active_probability = prediction.confidence if will_stay_in_range else 1 - prediction.confidence

        score = centeredness * 50 + stays_active_probability * 50
        if prediction.trend == Trend.BULLISH and distance_from_max > distance_from_min:
            score += self.config.trend_alignment_bonus
        elif prediction.trend == Trend.BEARISH and distance_from_min > distance_from_max:
            score += self.config.trend_alignment_bonus
        score = max(0.0, min(100.0, score))

        status = status_for_score(score)
        volatility = self.forecaster.forecast()

        return HealthScore(
            score=score,
            status=status,
            stays_active_probability=stays_active_probability,
            days_until_rebalance=self._days_until_rebalance(status, volatility),
            recommendations=self._recommendations(
                score, will_stay_in_range, prediction, volatility, centeredness
            ),
        )

    def _days_until_rebalance(self, status: HealthStatus, volatility: VolatilityForecast) -> float:
        damping = 1 + volatility.predicted_volatility_pct / 10
        if status == HealthStatus.HEALTHY:
            return max(1.0, self.config.healthy_rebalance_days / damping)
        if status == HealthStatus.WARNING:
            return max(0.5, self.config.warning_rebalance_days / damping)
        return self.config.critical_rebalance_days

    def _recommendations(
        self,
        score: float,
        will_stay_in_range: bool,
        prediction: PricePrediction,
        volatility: VolatilityForecast,
        centeredness: float,
    ) -> List[str]:
        recommendations = []
        if score < HEALTHY_SCORE:
            recommendations.append("Consider rebalancing soon to optimize fee capture")
        if not will_stay_in_range:
            recommendations.append(
                f"Price predicted to move {prediction.trend.value}, adjust range accordingly"
            )
        if volatility.fee_spike_probability > self.config.fee_spike_alert_probability:
            recommendations.append("High volatility expected - fees may spike, but position risk increases")
        if centeredness < 0.5:
            recommendations.append("Position is off-center - may miss trading activity")
        return recommendations
