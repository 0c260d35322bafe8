from dataclasses import dataclass
from typing import Optional

from dlmm_analytics.common.errors import InvalidRangeError


@dataclass
class PositionRange:
    min_bin_id: int
    max_bin_id: int
    position_key: Optional[str] = None

    @property
    def width(self) -> int:
        return self.max_bin_id - self.min_bin_id

    def contains(self, bin_id: int) -> bool:
        return self.min_bin_id <= bin_id <= self.max_bin_id

    def validate(self) -> "PositionRange":
        if self.min_bin_id >= self.max_bin_id:
            raise InvalidRangeError(self.min_bin_id, self.max_bin_id)
        return self


@dataclass
class ActiveBinInfo:
    bin_id: int
    price: float
    supply: float = 0.0
    x_amount: float = 0.0
    y_amount: float = 0.0
