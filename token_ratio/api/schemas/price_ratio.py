from __future__ import annotations

from pydantic import BaseModel, Field


class TokenResponse(BaseModel):
    address: str
    name: str
    symbol: str
    display_name: str


class PoolResponse(BaseModel):
    address: str
    name: str
    liquidity_usd: float
    history_depth: int = Field(..., description="Daily candles available when the pool was probed.")


class RatioPointResponse(BaseModel):
    timestamp: str
    ratio: float
    price_a: float
    price_b: float


class PriceRatioResponse(BaseModel):
    token_a: TokenResponse
    token_b: TokenResponse
    interval: str
    source: str
    pool_a: PoolResponse
    pool_b: PoolResponse
    current_ratio: float
    points: list[RatioPointResponse]
    chart: str = Field(..., description="ASCII chart with y gutter and aligned time axis.")
