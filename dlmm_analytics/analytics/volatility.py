# dlmm_analytics/analytics/volatility.py
import logging
import math
import pandas as pd

from dlmm_analytics.analytics.history import HistoryStore
from dlmm_analytics.common.config import AnalyticsConfig
from dlmm_analytics.models.forecasts import VolatilityForecast

logger = logging.getLogger(__name__)


class VolatilityForecaster:
    """
    Volatility forecast from the standard deviation of per-sample returns.

    The predicted volatility blends the volatility of the whole history with
    that of the most recent returns; the fee-spike probability and the optimal
    bin spread are derived from that blend. Percent fields are reported x100,
    everything else works on the fractional value.
    """

    def __init__(self, history: HistoryStore, config: AnalyticsConfig):
        self.history = history
        self.config = config

    def forecast(self) -> VolatilityForecast:
        if len(self.history) < self.config.min_samples_volatility:
            logger.debug(f"Only {len(self.history)} samples, returning zeroed volatility forecast")
            return VolatilityForecast(
                current_volatility_pct=0.0,
                predicted_volatility_pct=0.0,
                fee_spike_probability=0.0,
                optimal_bin_spread=self.config.cold_start_bin_spread,
            )

        returns = pd.Series(self.history.prices(), dtype=float).pct_change().dropna()

        current_volatility = _std(returns)
        recent_volatility = _std(returns.iloc[-self.config.recent_volatility_window:])
        predicted_volatility = (
            current_volatility * self.config.historical_weight
            + recent_volatility * self.config.recent_weight
        )

        fee_spike_probability = min(1.0, predicted_volatility / self.config.volatility_saturation)
        optimal_bin_spread = math.ceil(self.config.base_bin_spread * (1 + predicted_volatility * 10))

        return VolatilityForecast(
            current_volatility_pct=current_volatility * 100,
            predicted_volatility_pct=predicted_volatility * 100,
            fee_spike_probability=fee_spike_probability,
            optimal_bin_spread=int(optimal_bin_spread),
        )


def _std(returns: pd.Series) -> float:
    if returns.empty:
        return 0.0
    return math.sqrt(max(0.0, float(returns.var(ddof=0))))
