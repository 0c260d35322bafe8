# dlmm_analytics/analytics/history.py
import logging
from collections import deque
from typing import Deque, Dict, Iterable, Iterator, List, Mapping, Optional, Tuple, Union
import pandas as pd

from dlmm_analytics.constants import DEFAULT_HISTORY_CAPACITY
from dlmm_analytics.models.bin_sample import BinSample

logger = logging.getLogger(__name__)

HISTORY_COLUMNS = ["timestamp", "bin_id", "price", "volume", "liquidity"]

SampleLike = Union[BinSample, Mapping]


class HistoryStore:
    """
    Bounded, append-only series of bin samples, oldest first.

    Once capacity is reached every append evicts the oldest sample. The store
    is not synchronized; callers appending from several threads must
    serialize access themselves.
    """

    def __init__(self, capacity: int = DEFAULT_HISTORY_CAPACITY):
        if capacity < 1:
            raise ValueError(f"capacity must be positive, got {capacity}")
        self.capacity = capacity
        self._samples: Deque[BinSample] = deque(maxlen=capacity)

    def __len__(self) -> int:
        return len(self._samples)

    def __iter__(self) -> Iterator[BinSample]:
        return iter(self._samples)

    def append(self, sample: BinSample) -> None:
        self._samples.append(sample.validate())

    def latest(self) -> Optional[BinSample]:
        return self._samples[-1] if self._samples else None

    def prices(self) -> List[float]:
        return [s.price for s in self._samples]

    def export_history(self) -> Tuple[BinSample, ...]:
        """Immutable, ordered snapshot of the buffer."""
        return tuple(self._samples)

    def export_records(self) -> List[Dict]:
        """Snapshot as plain records for an external persistence layer."""
        return [s.to_dict() for s in self._samples]

    def import_history(self, samples: Iterable[SampleLike]) -> None:
        """
        Replace the buffer with the given samples (BinSample objects or exported
        records). Only the most recent `capacity` entries are kept. Every entry
        is validated before anything is replaced.
        """
        parsed = [_to_sample(s).validate() for s in samples]
        if len(parsed) > self.capacity:
            logger.debug(f"Truncating imported history from {len(parsed)} to {self.capacity} samples")
        self._samples = deque(parsed[-self.capacity:], maxlen=self.capacity)
        logger.info(f"Imported {len(self._samples)} bin samples")

    def clear(self) -> None:
        self._samples.clear()

    def to_dataframe(self) -> pd.DataFrame:
        """Buffer as a DataFrame with columns timestamp, bin_id, price, volume, liquidity."""
        return pd.DataFrame(
            [(s.timestamp, s.bin_id, s.price, s.volume, s.liquidity) for s in self._samples],
            columns=HISTORY_COLUMNS,
        )

    @classmethod
    def from_dataframe(cls, df: pd.DataFrame, capacity: int = DEFAULT_HISTORY_CAPACITY) -> "HistoryStore":
        missing = [c for c in ("timestamp", "bin_id", "price") if c not in df.columns]
        if missing:
            raise ValueError(f"DataFrame missing columns: {missing}")
        df = df.sort_values("timestamp", kind="stable")
        store = cls(capacity)
        store.import_history(
            BinSample(
                timestamp=int(row.timestamp),
                bin_id=int(row.bin_id),
                price=float(row.price),
                volume=float(getattr(row, "volume", 0.0)),
                liquidity=float(getattr(row, "liquidity", 0.0)),
            )
            for row in df.itertuples(index=False)
        )
        return store


def _to_sample(item: SampleLike) -> BinSample:
    if isinstance(item, BinSample):
        return item
    return BinSample.from_dict(item)
