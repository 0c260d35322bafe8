import logging
from typing import Dict, List, Optional
import pandas as pd

from dlmm_analytics.analytics.engine import PositionAnalyticsEngine
from dlmm_analytics.clients.meteora import MeteoraDLMMClient
from dlmm_analytics.common.config import AnalyticsConfig
from dlmm_analytics.common.errors import InvalidRangeError, InvalidSampleError
from dlmm_analytics.models.position import PositionRange, ActiveBinInfo

logger = logging.getLogger(__name__)


class PositionMonitor:
    def __init__(self, client: MeteoraDLMMClient, config: Optional[AnalyticsConfig] = None):
        self.client = client
        self.config = config or AnalyticsConfig()
        self.engines: Dict[str, PositionAnalyticsEngine] = {}  # one engine per pool address
        self.active_bins: Dict[str, ActiveBinInfo] = {}

    def engine_for(self, pool_address: str) -> PositionAnalyticsEngine:
        if pool_address not in self.engines:
            self.engines[pool_address] = PositionAnalyticsEngine(self.config)
        return self.engines[pool_address]

    def poll(self, pool_address: str, decimals_x: int = 0, decimals_y: int = 0) -> Optional[ActiveBinInfo]:
        """Fetch the pool's active bin and record it in the pool's engine."""
        active_bin = self.client.get_active_bin(pool_address, decimals_x, decimals_y)
        if active_bin is None:
            logger.warning(f"No active bin for pool {pool_address[:8]}..., skipping sample")
            return None
        try:
            self.engine_for(pool_address).record_active_bin(active_bin)
        except InvalidSampleError as e:
            logger.warning(f"Invalid active bin for pool {pool_address[:8]}..., skipping sample: {e}")
            return None
        self.active_bins[pool_address] = active_bin
        return active_bin

    def check_price_bounds(self, position_range: PositionRange, active_bin: ActiveBinInfo) -> Optional[str]:
        """Return an alert message if the active bin left the position range."""
        if active_bin.bin_id < position_range.min_bin_id:
            return f"Active bin {active_bin.bin_id} below lower bin {position_range.min_bin_id} (price {active_bin.price:.4f})"
        elif active_bin.bin_id > position_range.max_bin_id:
            return f"Active bin {active_bin.bin_id} above upper bin {position_range.max_bin_id} (price {active_bin.price:.4f})"
        return None

    def monitor_positions(self, pool_address: str, positions: List[PositionRange]) -> pd.DataFrame:
        """Analyze every position of a pool against the last polled active bin."""
        active_bin = self.active_bins.get(pool_address)
        if active_bin is None:
            logger.warning(f"Pool {pool_address[:8]}... has not been polled yet")
            return pd.DataFrame()
        if not positions:
            logger.info(f"No positions to monitor for pool {pool_address[:8]}...")
            return pd.DataFrame()

        engine = self.engine_for(pool_address)
        rows = []
        for position in positions:
            try:
                health = engine.analyze_position_health(position, active_bin)
                recommendation = engine.generate_rebalance_recommendation(position, active_bin)
            except InvalidRangeError as e:
                logger.error(f"Skipping position {position.position_key}: {e}")
                continue

            bounds_alert = self.check_price_bounds(position, active_bin)
            if bounds_alert:
                self.send_alert(bounds_alert)
            if recommendation.should_rebalance:
                self.send_alert(
                    f"Position {position.position_key or '?'} needs rebalancing "
                    f"({recommendation.urgency.value} urgency, score {health.score:.0f}/100)"
                )

            rows.append({
                "position_key": position.position_key,
                "min_bin_id": position.min_bin_id,
                "max_bin_id": position.max_bin_id,
                "active_bin_id": active_bin.bin_id,
                "score": health.score,
                "status": health.status.value,
                "should_rebalance": recommendation.should_rebalance,
                "urgency": recommendation.urgency.value,
                "suggested_min_bin_id": recommendation.suggested_range.min_bin_id,
                "suggested_max_bin_id": recommendation.suggested_range.max_bin_id,
            })
        return pd.DataFrame(rows)

    def send_alert(self, message: str):
        logger.warning(f"[Position alert]: {message}")
