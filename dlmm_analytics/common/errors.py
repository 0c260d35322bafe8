# dlmm_analytics/common/errors.py


class AnalyticsError(Exception):
    """Base class for errors raised by the analytics engine."""


class InvalidSampleError(AnalyticsError, ValueError):
    """A bin sample has a non-positive price or negative volume/liquidity."""


class InvalidRangeError(AnalyticsError, ValueError):
    """A position range whose min bin is not strictly below its max bin."""

    def __init__(self, min_bin_id: int, max_bin_id: int):
        self.min_bin_id = min_bin_id
        self.max_bin_id = max_bin_id
        super().__init__(
            f"Invalid position range: min_bin_id ({min_bin_id}) must be lower than max_bin_id ({max_bin_id})"
        )
