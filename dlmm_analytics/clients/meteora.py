# dlmm_analytics/clients/meteora.py
import logging
import math
import time
from typing import Dict, Optional
import requests

from dlmm_analytics.common.errors import InvalidSampleError
from dlmm_analytics.constants import METEORA_DLMM_API_URL
from dlmm_analytics.models.bin_sample import BinSample
from dlmm_analytics.models.position import ActiveBinInfo
from dlmm_analytics.utils.bin_math import bin_id_from_price

logger = logging.getLogger(__name__)


class MeteoraDLMMClient:
    """
    Read-only client for the Meteora DLMM REST API, used to turn the live pair
    state into bin samples for the analytics engine.
    """

    def __init__(self, api_url: str = METEORA_DLMM_API_URL, timeout: float = 10):
        self.api_url = api_url.rstrip("/")
        self.timeout = timeout
        self.session = requests.Session()
        self.session.headers.update({
            'Content-type': 'application/json',
            'Accept': 'application/json',
        })

    def fetch_pair(self, pair_address: str) -> Optional[Dict]:
        """Fetch the raw pair state, or None if the request fails."""
        url = f"{self.api_url}/pair/{pair_address}"
        try:
            response = self.session.get(url, timeout=self.timeout)
            response.raise_for_status()
            data = response.json()
        except requests.exceptions.RequestException as e:
            logger.error(f"Pair fetch failed for {pair_address[:8]}...: {e}")
            return None
        except ValueError as e:
            logger.error(f"Invalid JSON for pair {pair_address[:8]}...: {e}")
            return None
        if not isinstance(data, dict):
            logger.warning(f"Unexpected pair response for {pair_address[:8]}...: {data}")
            return None
        return data

    def get_active_bin(self, pair_address: str, decimals_x: int = 0, decimals_y: int = 0) -> Optional[ActiveBinInfo]:
        pair = self.fetch_pair(pair_address)
        if pair is None:
            return None
        try:
            return self.parse_active_bin(pair, decimals_x, decimals_y)
        except (KeyError, TypeError, ValueError) as e:
            logger.warning(f"Skipping malformed pair {pair_address[:8]}...: {e}")
            return None

    def get_bin_sample(
        self, pair_address: str, decimals_x: int = 0, decimals_y: int = 0, timestamp: Optional[int] = None
    ) -> Optional[BinSample]:
        active_bin = self.get_active_bin(pair_address, decimals_x, decimals_y)
        if active_bin is None:
            return None
        sample = BinSample(
            timestamp=timestamp if timestamp is not None else int(time.time() * 1000),
            bin_id=active_bin.bin_id,
            price=active_bin.price,
            volume=active_bin.supply,
            liquidity=active_bin.x_amount + active_bin.y_amount,
        )
        try:
            return sample.validate()
        except InvalidSampleError as e:
            logger.warning(f"Skipping invalid sample for pair {pair_address[:8]}...: {e}")
            return None

    @staticmethod
    def parse_active_bin(pair: Dict, decimals_x: int = 0, decimals_y: int = 0) -> ActiveBinInfo:
        """
        Build an ActiveBinInfo from a /pair payload. The active bin id is taken
        from `active_id` when the payload has one, otherwise derived from
        `current_price` (a UI price) and `bin_step`. The 24h trade volume is used
        as the volume proxy and token reserves as liquidity.
        """
        price = float(pair["current_price"])
        if not math.isfinite(price) or price <= 0:
            raise ValueError(f"current_price must be a positive number, got {pair['current_price']!r}")
        if "active_id" in pair and pair["active_id"] is not None:
            bin_id = int(pair["active_id"])
        else:
            price_per_lamport = price * 10 ** (decimals_y - decimals_x)
            bin_id = bin_id_from_price(price_per_lamport, int(pair["bin_step"]), round_down=True)
        return ActiveBinInfo(
            bin_id=bin_id,
            price=price,
            supply=float(pair.get("trade_volume_24h", 0) or 0),
            x_amount=float(pair.get("reserve_x_amount", 0) or 0) / 10 ** decimals_x,
            y_amount=float(pair.get("reserve_y_amount", 0) or 0) / 10 ** decimals_y,
        )
