from __future__ import annotations

from typing import Protocol

from token_ratio.domain.entities.price_series import Cadence, PriceSample


class PriceHistoryPort(Protocol):
    def fetch_price_history(
        self,
        *,
        pool_address: str,
        cadence: Cadence,
        limit: int,
    ) -> list[PriceSample]:
        ...
