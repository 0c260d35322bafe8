# dlmm_analytics/analytics/price_predictor.py
import logging
import math
import numpy as np

from dlmm_analytics.analytics.history import HistoryStore
from dlmm_analytics.common.config import AnalyticsConfig
from dlmm_analytics.constants import Trend, COLD_START_CONFIDENCE, MIN_CONFIDENCE, MAX_CONFIDENCE
from dlmm_analytics.models.forecasts import PricePrediction
from dlmm_analytics.utils.bin_math import variance, bin_delta_for_price_move

logger = logging.getLogger(__name__)


class PricePredictor:
    """
    Short-horizon price forecast from a weighted moving average plus momentum.
    """

    def __init__(self, history: HistoryStore, config: AnalyticsConfig):
        self.history = history
        self.config = config

    def predict(self, time_horizon_minutes: int = 15) -> PricePrediction:
        samples = self.history.export_history()
        if len(samples) < self.config.min_samples_prediction:
            logger.debug(f"Only {len(samples)} samples, returning neutral prediction")
            latest = samples[-1] if samples else None
            return PricePrediction(
                predicted_bin_id=latest.bin_id if latest else 0,
                predicted_price=latest.price if latest else 0.0,
                confidence=COLD_START_CONFIDENCE,
                time_horizon_minutes=time_horizon_minutes,
                trend=Trend.NEUTRAL,
            )

        prices = np.array([s.price for s in samples], dtype=float)

        # oldest sample weighs 1, newest weighs n
        weights = np.arange(1, len(prices) + 1, dtype=float)
        wma_price = float(np.average(prices, weights=weights))

        momentum = self._momentum(prices)
        predicted_price = wma_price + momentum * time_horizon_minutes / self.config.horizon_baseline_minutes

        confidence = 1 - variance(prices) / wma_price
        confidence = max(MIN_CONFIDENCE, min(MAX_CONFIDENCE, confidence))

        threshold = self.config.trend_threshold * wma_price
        if momentum > threshold:
            trend = Trend.BULLISH
        elif momentum < -threshold:
            trend = Trend.BEARISH
        else:
            trend = Trend.NEUTRAL

        latest = samples[-1]
        return PricePrediction(
            predicted_bin_id=latest.bin_id + self._bin_delta(latest.price, predicted_price),
            predicted_price=predicted_price,
            confidence=confidence,
            time_horizon_minutes=time_horizon_minutes,
            trend=trend,
        )

    def _momentum(self, prices: np.ndarray) -> float:
        # Summed deltas are averaged over the window size, not the number of deltas
        window = prices[-self.config.momentum_window:]
        return float(np.diff(window).sum() / len(window))

    def _bin_delta(self, last_price: float, predicted_price: float) -> int:
        if self.config.bin_step is not None:
            if predicted_price > 0:
                return bin_delta_for_price_move(last_price, predicted_price, self.config.bin_step)
            logger.debug(f"Predicted price {predicted_price} has no bin, falling back to linear bin delta")
        # linear approximation: price_to_bin_scale bins per 100% move, rounded half up
        return math.floor((predicted_price - last_price) / last_price * self.config.price_to_bin_scale + 0.5)
