# dlmm_analytics/models/forecasts.py
from dataclasses import dataclass, field
from typing import Dict, List

from dlmm_analytics.constants import Trend, HealthStatus, Urgency


@dataclass(frozen=True)
class PricePrediction:
    predicted_bin_id: int
    predicted_price: float
    confidence: float  # 0.1 - 0.95
    time_horizon_minutes: int
    trend: Trend

    def to_dict(self) -> Dict:
        return {
            "predictedBinId": self.predicted_bin_id,
            "predictedPrice": self.predicted_price,
            "confidence": self.confidence,
            "timeHorizon": self.time_horizon_minutes,
            "trend": self.trend.value,
        }


@dataclass(frozen=True)
class VolatilityForecast:
    current_volatility_pct: float
    predicted_volatility_pct: float
    fee_spike_probability: float  # 0 - 1
    optimal_bin_spread: int

    def to_dict(self) -> Dict:
        return {
            "currentVolatility": self.current_volatility_pct,
            "predictedVolatility": self.predicted_volatility_pct,
            "feeSpikeProbability": self.fee_spike_probability,
            "optimalBinSpread": self.optimal_bin_spread,
        }


@dataclass(frozen=True)
class HealthScore:
    score: float  # 0 - 100
    status: HealthStatus
    stays_active_probability: float
    days_until_rebalance: float
    recommendations: List[str] = field(default_factory=list)

    def to_dict(self) -> Dict:
        return {
            "score": self.score,
            "status": self.status.value,
            "staysActiveProb": self.stays_active_probability,
            "daysUntilRebalance": self.days_until_rebalance,
            "recommendations": list(self.recommendations),
        }


@dataclass(frozen=True)
class SuggestedRange:
    min_bin_id: int
    max_bin_id: int
    min_price: float
    max_price: float


@dataclass(frozen=True)
class RebalanceRecommendation:
    should_rebalance: bool
    urgency: Urgency
    suggested_range: SuggestedRange
    expected_fee_apr: float
    reasoning: List[str] = field(default_factory=list)

    def to_dict(self) -> Dict:
        return {
            "shouldRebalance": self.should_rebalance,
            "urgency": self.urgency.value,
            "suggestedMinBinId": self.suggested_range.min_bin_id,
            "suggestedMaxBinId": self.suggested_range.max_bin_id,
            "suggestedMinPrice": self.suggested_range.min_price,
            "suggestedMaxPrice": self.suggested_range.max_price,
            "expectedFeeAPR": self.expected_fee_apr,
            "reasoning": list(self.reasoning),
        }
