# dlmm_analytics/models/bin_sample.py
from dataclasses import dataclass
from decimal import Decimal
from typing import Dict, Mapping
import math
import numbers

from dlmm_analytics.common.errors import InvalidSampleError

NUMERIC_FIELDS = ("price", "volume", "liquidity")


@dataclass(frozen=True)
class BinSample:
    timestamp: int
    bin_id: int
    price: float
    volume: float = 0.0
    liquidity: float = 0.0

    def __post_init__(self):
        # Decimal and numpy scalars are stored as plain float / int
        for name in NUMERIC_FIELDS:
            value = getattr(self, name)
            if isinstance(value, (numbers.Real, Decimal)) and not isinstance(value, bool):
                object.__setattr__(self, name, float(value))
        for name in ("timestamp", "bin_id"):
            value = getattr(self, name)
            if isinstance(value, numbers.Integral) and not isinstance(value, bool):
                object.__setattr__(self, name, int(value))

    def validate(self) -> "BinSample":
        """Raise InvalidSampleError unless price > 0 and volume/liquidity >= 0."""
        for name in NUMERIC_FIELDS:
            value = getattr(self, name)
            if not isinstance(value, float) or not math.isfinite(value):
                raise InvalidSampleError(f"{name} must be a finite number, got {value!r}")
        if self.price <= 0:
            raise InvalidSampleError(f"price must be positive, got {self.price}")
        if self.volume < 0:
            raise InvalidSampleError(f"volume must not be negative, got {self.volume}")
        if self.liquidity < 0:
            raise InvalidSampleError(f"liquidity must not be negative, got {self.liquidity}")
        return self

    def to_dict(self) -> Dict:
        return {
            "timestamp": self.timestamp,
            "binId": self.bin_id,
            "price": self.price,
            "volume": self.volume,
            "liquidity": self.liquidity,
        }

    @classmethod
    def from_dict(cls, record: Mapping) -> "BinSample":
        """Parse an exported record; accepts both camelCase and snake_case keys."""
        try:
            bin_id = record["binId"] if "binId" in record else record["bin_id"]
            return cls(
                timestamp=int(record["timestamp"]),
                bin_id=int(bin_id),
                price=float(record["price"]),
                volume=float(record.get("volume", 0)),
                liquidity=float(record.get("liquidity", 0)),
            )
        except (KeyError, TypeError, ValueError) as e:
            raise InvalidSampleError(f"Malformed bin sample record {record!r}: {e}") from e
