# dlmm_analytics/utils/bin_math.py
import math
from typing import Optional, Sequence
import numpy as np

from dlmm_analytics.constants import RangeStrategy, RANGE_STRATEGY_BINS
from dlmm_analytics.models.forecasts import SuggestedRange

BASIS_POINT_MAX = 10000


def variance(values: Sequence[float]) -> float:
    """Population variance; 0.0 for an empty sequence."""
    if len(values) == 0:
        return 0.0
    return float(np.var(np.asarray(values, dtype=float)))


def price_of_bin(bin_id: int, bin_step: int) -> float:
    """Price of a DLMM bin: (1 + bin_step / 10000) ** bin_id."""
    return (1 + bin_step / BASIS_POINT_MAX) ** bin_id


def bin_id_from_price(price: float, bin_step: int, round_down: bool = True) -> int:
    """
    Inverse of price_of_bin. Prices between two bins resolve to the lower bin
    when round_down is set, the upper bin otherwise.
    """
    if price <= 0:
        raise ValueError(f"price must be positive, got {price}")
    raw = math.log(price) / math.log(1 + bin_step / BASIS_POINT_MAX)
    # absorb float noise so exact bin prices map back to their own bin
    nearest = round(raw)
    if abs(raw - nearest) < 1e-9:
        return int(nearest)
    return int(math.floor(raw)) if round_down else int(math.ceil(raw))


def bin_delta_for_price_move(from_price: float, to_price: float, bin_step: int) -> int:
    """Number of bins between two prices under the exact bin-step model."""
    if from_price <= 0 or to_price <= 0:
        return 0
    return int(round(math.log(to_price / from_price) / math.log(1 + bin_step / BASIS_POINT_MAX)))


def optimal_bin_range(
    current_price: float,
    bin_step: int,
    strategy: RangeStrategy = RangeStrategy.MODERATE,
    volatility: Optional[float] = None,
) -> SuggestedRange:
    """
    Range of bins around current_price for a narrow/moderate/wide strategy,
    widened by a fractional volatility when one is given.
    """
    range_bins = RANGE_STRATEGY_BINS[RangeStrategy(strategy)]
    if volatility is not None:
        range_bins = int(math.floor(range_bins * (1 + volatility)))

    step = 1 + bin_step / BASIS_POINT_MAX
    min_price = current_price * step ** -range_bins
    max_price = current_price * step ** range_bins
    return SuggestedRange(
        min_bin_id=bin_id_from_price(min_price, bin_step, round_down=False),
        max_bin_id=bin_id_from_price(max_price, bin_step, round_down=True),
        min_price=min_price,
        max_price=max_price,
    )
