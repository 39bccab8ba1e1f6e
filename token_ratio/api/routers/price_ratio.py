from __future__ import annotations

from datetime import datetime, timezone

from fastapi import APIRouter, Depends, HTTPException

from token_ratio.api.deps import get_app_settings, get_price_ratio_use_case
from token_ratio.api.schemas.price_ratio import (
    PoolResponse,
    PriceRatioResponse,
    RatioPointResponse,
    TokenResponse,
)
from token_ratio.application.dto.price_ratio import GetPriceRatioInput
from token_ratio.application.use_cases.get_price_ratio import GetPriceRatioUseCase
from token_ratio.domain.entities.pool import PoolCandidate
from token_ratio.domain.entities.token import TokenInfo
from token_ratio.domain.exceptions import (
    EmptyResultError,
    InvalidInputError,
    NoDataError,
    NoUsableCandidatesError,
    PriceSourceError,
)
from token_ratio.shared.config import Settings

router = APIRouter()


def _token(address: str, info: TokenInfo) -> TokenResponse:
    return TokenResponse(
        address=address,
        name=info.name,
        symbol=info.symbol,
        display_name=info.display_name,
    )


def _pool(pool: PoolCandidate) -> PoolResponse:
    return PoolResponse(
        address=pool.address,
        name=pool.name,
        liquidity_usd=pool.liquidity_usd,
        history_depth=pool.history_depth,
    )


@router.get("/v1/price-ratio", response_model=PriceRatioResponse)
def get_price_ratio(
    token_a: str,
    token_b: str,
    interval: str | None = None,
    max_candles: int | None = None,
    weekly_days: int | None = None,
    settings: Settings = Depends(get_app_settings),
    use_case: GetPriceRatioUseCase = Depends(get_price_ratio_use_case),
):
    try:
        result = use_case.execute(
            GetPriceRatioInput(
                token_a=token_a,
                token_b=token_b,
                interval=settings.interval if interval is None else interval,
                max_candles=settings.max_candles if max_candles is None else max_candles,
                weekly_resample_days=(
                    settings.weekly_resample_days if weekly_days is None else weekly_days
                ),
                pool_limit=settings.pool_limit,
                chart_height=settings.chart_height,
            )
        )
    except InvalidInputError as exc:
        raise HTTPException(status_code=400, detail=str(exc)) from exc
    except (NoUsableCandidatesError, NoDataError, EmptyResultError) as exc:
        raise HTTPException(status_code=404, detail=str(exc)) from exc
    except PriceSourceError as exc:
        raise HTTPException(status_code=502, detail=str(exc)) from exc

    return PriceRatioResponse(
        token_a=_token(result.token_a, result.token_a_info),
        token_b=_token(result.token_b, result.token_b_info),
        interval=result.interval,
        source=result.source,
        pool_a=_pool(result.pool_a),
        pool_b=_pool(result.pool_b),
        current_ratio=result.current_ratio,
        points=[
            RatioPointResponse(
                timestamp=datetime.fromtimestamp(point.timestamp_ms / 1000, tz=timezone.utc).isoformat(),
                ratio=point.ratio,
                price_a=point.price_a,
                price_b=point.price_b,
            )
            for point in result.points
        ],
        chart=result.chart,
    )
