from enum import Enum


class Trend(str, Enum):
    BULLISH = "bullish"
    BEARISH = "bearish"
    NEUTRAL = "neutral"


class HealthStatus(str, Enum):
    HEALTHY = "healthy"
    WARNING = "warning"
    CRITICAL = "critical"


class Urgency(str, Enum):
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"


class RangeStrategy(str, Enum):
    NARROW = "narrow"
    MODERATE = "moderate"
    WIDE = "wide"


# bins on each side of the current price
RANGE_STRATEGY_BINS = {
    RangeStrategy.NARROW: 20,
    RangeStrategy.MODERATE: 50,
    RangeStrategy.WIDE: 100,
}

DEFAULT_HISTORY_CAPACITY = 1000

# Cold-start values returned while the history is too short
COLD_START_CONFIDENCE = 0.1
COLD_START_BIN_SPREAD = 100

MIN_CONFIDENCE = 0.1
MAX_CONFIDENCE = 0.95

HEALTHY_SCORE = 70
WARNING_SCORE = 40

METEORA_DLMM_API_URL = "https://dlmm-api.meteora.ag"
