from __future__ import annotations

from dataclasses import dataclass

from token_ratio.domain.entities.pool import PoolCandidate
from token_ratio.domain.entities.price_series import Interval, RatioPoint
from token_ratio.domain.entities.token import TokenInfo


SOURCE_HISTORICAL = "GeckoTerminal (historical OHLCV)"
SOURCE_CURRENT = "DexTools (current USD-based ratio)"


@dataclass(frozen=True)
class GetPriceRatioInput:
    token_a: str
    token_b: str
    interval: Interval = "weekly"
    max_candles: int = 1000
    weekly_resample_days: int = 7
    pool_limit: int = 5
    chart_height: int = 30


@dataclass(frozen=True)
class GetPriceRatioOutput:
    token_a: str
    token_b: str
    token_a_info: TokenInfo
    token_b_info: TokenInfo
    interval: Interval
    source: str
    pool_a: PoolCandidate
    pool_b: PoolCandidate
    points: list[RatioPoint]
    chart: str

    @property
    def current_ratio(self) -> float:
        return self.points[-1].ratio
