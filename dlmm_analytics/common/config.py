# dlmm_analytics/common/config.py
from dataclasses import dataclass, fields
from typing import Optional
from dotenv import load_dotenv
import os

from dlmm_analytics.constants import DEFAULT_HISTORY_CAPACITY, COLD_START_BIN_SPREAD

ENV_PREFIX = "DLMM_ANALYTICS_"


@dataclass(frozen=True)
class AnalyticsConfig:
    """
    Tuning constants for the analytics engine.

    None of these values has a formal derivation; they are the heuristics the
    dashboard shipped with and can be overridden per engine or through
    DLMM_ANALYTICS_* environment variables (see from_env).
    """
    history_capacity: int = DEFAULT_HISTORY_CAPACITY

    # price prediction
    min_samples_prediction: int = 10
    momentum_window: int = 20
    horizon_baseline_minutes: float = 15.0
    trend_threshold: float = 0.001
    price_to_bin_scale: float = 100.0

    # volatility
    min_samples_volatility: int = 20
    recent_volatility_window: int = 10
    historical_weight: float = 0.7
    recent_weight: float = 0.3
    volatility_saturation: float = 0.05
    base_bin_spread: int = 50
    cold_start_bin_spread: int = COLD_START_BIN_SPREAD

    # health / rebalance
    health_horizon_minutes: int = 60
    trend_alignment_bonus: float = 10.0
    healthy_rebalance_days: float = 7.0
    warning_rebalance_days: float = 3.0
    critical_rebalance_days: float = 0.1
    rebalance_score_threshold: float = 60.0
    high_urgency_score: float = 30.0
    min_stays_active_probability: float = 0.5
    fee_spike_alert_probability: float = 0.7
    base_fee_apr: float = 20.0
    approx_bin_step: float = 0.01

    # Pool bin step in basis points. When set, bin/price conversions use the
    # exact DLMM formula price = (1 + bin_step / 10000) ** bin_id.
    bin_step: Optional[int] = None

    def __post_init__(self):
        if self.history_capacity < 1:
            raise ValueError(f"history_capacity must be positive, got {self.history_capacity}")
        if self.momentum_window < 2 or self.recent_volatility_window < 2:
            raise ValueError("momentum and recent volatility windows need at least 2 samples")
        if self.horizon_baseline_minutes <= 0:
            raise ValueError("horizon_baseline_minutes must be positive")
        if self.volatility_saturation <= 0:
            raise ValueError("volatility_saturation must be positive")
        if abs(self.historical_weight + self.recent_weight - 1.0) > 1e-9:
            raise ValueError(
                f"volatility blend weights must sum to 1, got {self.historical_weight} + {self.recent_weight}"
            )
        if self.bin_step is not None and self.bin_step <= 0:
            raise ValueError(f"bin_step must be a positive number of basis points, got {self.bin_step}")

    @classmethod
    def from_env(cls, **overrides) -> "AnalyticsConfig":
        """
        Build a config from DLMM_ANALYTICS_<FIELD> environment variables (a .env
        file is loaded first). Explicit keyword overrides win over the environment.
        """
        load_dotenv()
        values = {}
        for f in fields(cls):
            raw = os.getenv(ENV_PREFIX + f.name.upper())
            if raw is None or raw == "":
                continue
            values[f.name] = _parse_env_value(f.name, raw)
        values.update(overrides)
        return cls(**values)


_INT_FIELDS = {
    "history_capacity", "min_samples_prediction", "momentum_window", "min_samples_volatility",
    "recent_volatility_window", "base_bin_spread", "cold_start_bin_spread", "health_horizon_minutes",
    "bin_step",
}


def _parse_env_value(name: str, raw: str):
    try:
        return int(raw) if name in _INT_FIELDS else float(raw)
    except ValueError:
        raise ValueError(f"Invalid value for {ENV_PREFIX}{name.upper()}: {raw!r}") from None
