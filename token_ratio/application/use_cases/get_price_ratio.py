from __future__ import annotations

from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass
import logging
import re
import time
from typing import Callable

from token_ratio.application.dto.price_ratio import (
    SOURCE_CURRENT,
    SOURCE_HISTORICAL,
    GetPriceRatioInput,
    GetPriceRatioOutput,
)
from token_ratio.application.dto.select_pool import SelectPoolInput, SelectPoolOutput
from token_ratio.application.ports.current_price_port import CurrentPricePort
from token_ratio.application.ports.price_history_port import PriceHistoryPort
from token_ratio.application.ports.token_info_port import TokenInfoPort
from token_ratio.application.use_cases.select_pool import SelectPoolUseCase
from token_ratio.domain.entities.price_series import INTERVALS, PriceSample
from token_ratio.domain.entities.token import TokenInfo
from token_ratio.domain.exceptions import InvalidInputError, NoDataError, PriceSourceError
from token_ratio.domain.services.ratio_chart import render
from token_ratio.domain.services.series_alignment import align_ratios, resample_to_buckets


logger = logging.getLogger(__name__)

ADDRESS_PATTERN = re.compile(r"^0x[a-f0-9]{40}$")


def normalize_token_address(value: str) -> str:
    address = value.strip().lower()
    if not ADDRESS_PATTERN.match(address):
        raise InvalidInputError(f"Invalid contract address format: {value}")
    return address


@dataclass(frozen=True)
class _ResolvedToken:
    info: TokenInfo
    selection: SelectPoolOutput


class GetPriceRatioUseCase:
    def __init__(
        self,
        *,
        select_pool_use_case: SelectPoolUseCase,
        price_history_port: PriceHistoryPort,
        token_info_port: TokenInfoPort,
        current_price_port: CurrentPricePort | None = None,
        clock: Callable[[], float] = time.time,
    ):
        self._select_pool_use_case = select_pool_use_case
        self._price_history_port = price_history_port
        self._token_info_port = token_info_port
        self._current_price_port = current_price_port
        self._clock = clock

    def execute(self, command: GetPriceRatioInput) -> GetPriceRatioOutput:
        token_a = normalize_token_address(command.token_a)
        token_b = normalize_token_address(command.token_b)
        if command.interval not in INTERVALS:
            raise InvalidInputError(
                "Invalid or unsupported interval. Supported values: hourly, daily, weekly."
            )
        if command.max_candles < 1:
            raise InvalidInputError("max_candles must be a positive integer.")
        if command.weekly_resample_days < 1:
            raise InvalidInputError("weekly_resample_days must be a positive integer.")

        logger.info(
            "get_price_ratio: start token_a=%s token_b=%s interval=%s",
            token_a,
            token_b,
            command.interval,
        )

        # The two tokens are independent: resolve and fetch both at once.
        with ThreadPoolExecutor(max_workers=2) as executor:
            future_a = executor.submit(self._resolve_token, token_a, command)
            future_b = executor.submit(self._resolve_token, token_b, command)
            resolved_a = future_a.result()
            resolved_b = future_b.result()

            source = SOURCE_HISTORICAL
            try:
                series_future_a = executor.submit(
                    self._fetch_series, resolved_a.selection.pool.address, command
                )
                series_future_b = executor.submit(
                    self._fetch_series, resolved_b.selection.pool.address, command
                )
                series_a = series_future_a.result()
                series_b = series_future_b.result()
            except (NoDataError, PriceSourceError) as exc:
                logger.warning("get_price_ratio: historical_data_failed error=%s", exc)
                series_a, series_b = self._current_price_series(token_a, token_b, exc)
                source = SOURCE_CURRENT

        points = align_ratios(series_a, series_b)
        chart = render(
            [point.ratio for point in points],
            [point.timestamp_ms for point in points],
            command.interval,
            height=command.chart_height,
        )
        logger.info(
            "get_price_ratio: computed points=%s source=%s current_ratio=%.12f",
            len(points),
            source,
            points[-1].ratio,
        )
        return GetPriceRatioOutput(
            token_a=token_a,
            token_b=token_b,
            token_a_info=resolved_a.info,
            token_b_info=resolved_b.info,
            interval=command.interval,
            source=source,
            pool_a=resolved_a.selection.pool,
            pool_b=resolved_b.selection.pool,
            points=points,
            chart=chart,
        )

    def _resolve_token(self, token_address: str, command: GetPriceRatioInput) -> _ResolvedToken:
        info = self._token_info_port.get_token_info(token_address=token_address)
        selection = self._select_pool_use_case.execute(
            SelectPoolInput(
                token_address=token_address,
                limit=command.pool_limit,
                max_candles=command.max_candles,
            )
        )
        return _ResolvedToken(info=info, selection=selection)

    def _fetch_series(self, pool_address: str, command: GetPriceRatioInput) -> list[PriceSample]:
        if command.interval == "weekly":
            daily = self._price_history_port.fetch_price_history(
                pool_address=pool_address,
                cadence="day",
                limit=command.max_candles,
            )
            return resample_to_buckets(daily, command.weekly_resample_days)

        return self._price_history_port.fetch_price_history(
            pool_address=pool_address,
            cadence="hour" if command.interval == "hourly" else "day",
            limit=command.max_candles,
        )

    def _current_price_series(
        self,
        token_a: str,
        token_b: str,
        cause: Exception,
    ) -> tuple[list[PriceSample], list[PriceSample]]:
        if self._current_price_port is None:
            raise NoDataError(
                f"Historical data unavailable and no current price fallback is configured: {cause}"
            ) from cause

        logger.info("get_price_ratio: fallback_current_prices token_a=%s token_b=%s", token_a, token_b)
        price_a = self._current_price_port.fetch_current_price(token_address=token_a)
        price_b = self._current_price_port.fetch_current_price(token_address=token_b)
        now_ms = int(self._clock() * 1000)
        return (
            [PriceSample(timestamp_ms=now_ms, close=price_a)],
            [PriceSample(timestamp_ms=now_ms, close=price_b)],
        )
